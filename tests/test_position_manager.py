"""Tests for the position validation gate."""

import pytest
from unittest.mock import Mock

from ondeestou.errors import AccuracyError, DistanceError, ElapseTimeError
from ondeestou.geo_position import calculate_distance
from ondeestou.position_manager import PositionEvent, PositionManager

# ~1 meter of latitude in degrees
METER = 1 / 111195.0


def sample(lat=-23.5505, lon=-46.6333, accuracy=5, timestamp=1_000_000, **extra):
    data = {"latitude": lat, "longitude": lon, "accuracy": accuracy, "timestamp": timestamp}
    data.update(extra)
    return data


@pytest.fixture
def manager():
    """Create position manager with handheld reject-list."""
    return PositionManager(
        not_accepted_accuracy=["medium", "bad", "very_bad"],
        minimum_distance_change=20,
        tracking_interval=50000,
    )


@pytest.fixture
def listener(manager):
    """Subscribe a mock listener."""
    listener = Mock()
    manager.subscribe(listener)
    return listener


def test_first_sample_accepted_as_regular(manager, listener):
    """Test first good sample is a regular update."""
    event = manager.update(sample())

    assert event == PositionEvent.REGULAR
    listener.assert_called_once()
    called_event, position, error = listener.call_args[0]
    assert called_event == PositionEvent.REGULAR
    assert position.latitude == -23.5505
    assert error is None
    assert manager.last_modified == 1_000_000


def test_accuracy_rejected(manager, listener):
    """Test sample in reject-list bucket is rejected."""
    event = manager.update(sample(accuracy=31))

    assert event == PositionEvent.NOT_UPDATED
    called_event, position, error = listener.call_args[0]
    assert called_event == PositionEvent.NOT_UPDATED
    assert position is None
    assert isinstance(error, AccuracyError)
    assert error.name == "AccuracyError"
    assert manager.last_position is None
    assert manager.last_modified is None


def test_desktop_reject_list_accepts_medium():
    """Test lenient reject-list accepts medium accuracy."""
    manager = PositionManager(not_accepted_accuracy=["bad", "very_bad"])
    assert manager.update(sample(accuracy=100)) == PositionEvent.REGULAR
    assert manager.update(sample(lat=0.0, accuracy=101, timestamp=2_000_000)) == PositionEvent.NOT_UPDATED


def test_reject_list_accepts_legacy_spelling():
    manager = PositionManager(not_accepted_accuracy=["very bad"])
    assert manager.update(sample(accuracy=500)) == PositionEvent.NOT_UPDATED


def test_distance_below_threshold_rejected(manager, listener):
    """Test movement below minimum distance is rejected."""
    manager.update(sample(timestamp=0))
    first = manager.last_position

    event = manager.update(sample(lat=-23.5505 + 19 * METER, timestamp=100_000))

    assert event == PositionEvent.NOT_UPDATED
    _, position, error = listener.call_args[0]
    assert position is None
    assert isinstance(error, DistanceError)
    # State untouched
    assert manager.last_position is first
    assert manager.last_modified == 0


def test_distance_at_threshold_accepted():
    """Test movement exactly at the threshold is accepted."""
    lat2 = -23.5505 + 20 * METER
    distance = calculate_distance(-23.5505, -46.6333, lat2, -46.6333)
    manager = PositionManager(not_accepted_accuracy=[], minimum_distance_change=distance)

    manager.update(sample(timestamp=0))
    assert manager.update(sample(lat=lat2, timestamp=100_000)) == PositionEvent.REGULAR


def test_distance_above_threshold_accepted(manager):
    manager.update(sample(timestamp=0))
    assert manager.update(sample(lat=-23.5505 + 25 * METER, timestamp=100_000)) == PositionEvent.REGULAR


def test_quick_update_is_immediate(manager, listener):
    """Test update sooner than tracking interval is accepted as immediate."""
    manager.update(sample(timestamp=1_000_000))
    event = manager.update(sample(lat=-23.5, timestamp=1_010_000))

    assert event == PositionEvent.IMMEDIATE
    called_event, position, error = listener.call_args[0]
    assert called_event == PositionEvent.IMMEDIATE
    assert position.latitude == -23.5
    assert isinstance(error, ElapseTimeError)
    assert error.elapsed_ms == 10_000
    assert manager.last_modified == 1_010_000


def test_update_after_interval_is_regular(manager):
    manager.update(sample(timestamp=1_000_000))
    assert manager.update(sample(lat=-23.5, timestamp=1_050_000)) == PositionEvent.REGULAR


@pytest.mark.parametrize("bad_sample", [
    None,
    {},
    {"latitude": 1.0, "longitude": 2.0, "accuracy": 5},
    {"coords": {"latitude": 1.0, "longitude": 2.0, "accuracy": 5}},
    {"latitude": 1.0, "accuracy": 5, "timestamp": 10},
    {"latitude": -8.05, "longitude": -34.9, "accuracy": "5", "timestamp": 1000},
    {"latitude": "-8.05", "longitude": -34.9, "accuracy": 5, "timestamp": 1000},
    {"latitude": -8.05, "longitude": -34.9, "accuracy": 5, "timestamp": "1000"},
    {"latitude": True, "longitude": -34.9, "accuracy": 5, "timestamp": 1000},
    {"latitude": float("nan"), "longitude": -34.9, "accuracy": 5, "timestamp": 1000},
    {"latitude": -8.05, "longitude": float("inf"), "accuracy": 5, "timestamp": 1000},
    ["not", "a", "mapping"],
])
def test_malformed_sample_dropped(manager, listener, bad_sample, caplog):
    """Test malformed samples produce a warning and no event."""
    assert manager.update(bad_sample) is None
    listener.assert_not_called()
    assert manager.last_position is None
    assert "Invalid position data" in caplog.text


def test_browser_shape_accepted(manager):
    event = manager.update({
        "coords": {"latitude": -8.05, "longitude": -34.9, "accuracy": 5},
        "timestamp": 1_000_000,
    })
    assert event == PositionEvent.REGULAR
    assert manager.latitude == -8.05
    assert manager.longitude == -34.9


def test_subscriber_error_does_not_break_others(manager):
    """Test failing subscriber is isolated."""
    def broken(*args):
        raise RuntimeError("boom")

    good = Mock()
    manager.subscribe(broken)
    manager.subscribe(good)

    manager.update(sample())

    good.assert_called_once()


def test_object_subscriber_and_unsubscribe(manager):
    """Test object with update() is supported and handle removes it."""
    class Display:
        def __init__(self):
            self.events = []

        def update(self, event, position, error):
            self.events.append(event)

    display = Display()
    subscription = manager.subscribe(display)
    manager.update(sample(timestamp=1_000_000))
    subscription.cancel()
    manager.update(sample(lat=0.0, timestamp=1_100_000))

    assert display.events == [PositionEvent.REGULAR]
    assert manager.subscriber_count == 0


def test_destroy_clears_state(manager, listener):
    manager.update(sample())
    manager.destroy()

    assert manager.last_position is None
    assert manager.last_modified is None
    assert manager.subscriber_count == 0
    assert str(manager) == "PositionManager: No position data"


def test_wrong_typed_sample_after_accepted_one(manager, listener, caplog):
    """Test non-numeric coordinates are dropped once a position is stored."""
    manager.update(sample())
    first = manager.last_position

    assert manager.update(sample(lat="-8.06", timestamp=2_000_000)) is None
    assert manager.last_position is first
    listener.assert_called_once()
    assert "not a number: latitude" in caplog.text
