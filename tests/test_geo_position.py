"""Tests for GeoPosition and distance helpers."""

import dataclasses

import pytest

from ondeestou.geo_position import (
    AccuracyQuality,
    GeoPosition,
    calculate_distance,
    get_accuracy_quality,
)


@pytest.mark.parametrize("accuracy,expected", [
    (0, AccuracyQuality.EXCELLENT),
    (10, AccuracyQuality.EXCELLENT),
    (11, AccuracyQuality.GOOD),
    (30, AccuracyQuality.GOOD),
    (31, AccuracyQuality.MEDIUM),
    (100, AccuracyQuality.MEDIUM),
    (101, AccuracyQuality.BAD),
    (200, AccuracyQuality.BAD),
    (201, AccuracyQuality.VERY_BAD),
    (5000, AccuracyQuality.VERY_BAD),
])
def test_accuracy_quality_boundaries(accuracy, expected):
    """Test accuracy bucket boundaries are inclusive."""
    assert get_accuracy_quality(accuracy) == expected


def test_accuracy_quality_compares_as_string():
    """Test quality values can be compared with config strings."""
    assert AccuracyQuality.VERY_BAD == "very_bad"
    assert AccuracyQuality.MEDIUM.value == "medium"


def test_distance_zero_for_same_point():
    assert calculate_distance(-23.55, -46.63, -23.55, -46.63) == 0


def test_distance_known_value():
    """One degree of latitude is about 111 km."""
    distance = calculate_distance(0.0, 0.0, 1.0, 0.0)
    assert 111000 < distance < 111400


def test_from_flat_sample():
    """Test building a position from a flat sample."""
    pos = GeoPosition.from_sample({
        "latitude": -23.5505,
        "longitude": -46.6333,
        "accuracy": 15,
        "altitude": 760,
        "heading": 90,
        "speed": 1.5,
        "timestamp": 1700000000000,
    })

    assert pos.latitude == -23.5505
    assert pos.longitude == -46.6333
    assert pos.accuracy_quality == AccuracyQuality.GOOD
    assert pos.altitude == 760
    assert pos.heading == 90
    assert pos.speed == 1.5
    assert pos.timestamp == 1700000000000


def test_from_browser_sample():
    """Test building a position from the browser {coords, timestamp} shape."""
    pos = GeoPosition.from_sample({
        "coords": {"latitude": -8.05, "longitude": -34.9, "accuracy": 8, "altitudeAccuracy": 3},
        "timestamp": 1000,
    })

    assert pos.latitude == -8.05
    assert pos.altitude is None
    assert pos.altitude_accuracy == 3
    assert pos.accuracy_quality == AccuracyQuality.EXCELLENT


def test_position_is_immutable():
    pos = GeoPosition(latitude=1.0, longitude=2.0, accuracy=5, timestamp=0)
    with pytest.raises(dataclasses.FrozenInstanceError):
        pos.latitude = 3.0


def test_distance_to():
    a = GeoPosition(latitude=0.0, longitude=0.0, accuracy=5, timestamp=0)
    b = GeoPosition(latitude=0.0, longitude=0.001, accuracy=5, timestamp=0)
    assert a.distance_to(b) == pytest.approx(111.19, rel=1e-3)
