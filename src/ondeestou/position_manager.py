"""Validation gate for incoming position samples."""

import logging
import math
import numbers
from enum import Enum
from typing import Any, Iterable, Mapping, Optional

from .config import MINIMUM_DISTANCE_CHANGE_M, TRACKING_INTERVAL_MS
from .config import not_accepted_accuracy as default_not_accepted_accuracy
from .errors import (
    AccuracyError,
    DistanceError,
    ElapseTimeError,
    InvalidPositionError,
    PositionError,
)
from .geo_position import GeoPosition, calculate_distance, get_accuracy_quality, normalize_sample
from .observer import ObserverSubject, Subscriber, Subscription

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("timestamp", "latitude", "longitude", "accuracy")


def _is_finite_number(value: Any) -> bool:
    return (
        isinstance(value, numbers.Real)
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


class PositionEvent(str, Enum):
    """Outcome of PositionManager.update()."""
    REGULAR = "PositionManager updated"
    IMMEDIATE = "Immediate address update"
    NOT_UPDATED = "PositionManager not updated"


class PositionManager:
    """
    Accepts or rejects raw geolocation samples.

    Each well-formed sample produces exactly one notification
    ``(event, position, error)`` to subscribers:

    - ``NOT_UPDATED, None, AccuracyError|DistanceError`` when rejected;
    - ``IMMEDIATE, position, ElapseTimeError`` when accepted sooner than the
      tracking interval;
    - ``REGULAR, position, None`` otherwise.

    Malformed samples are logged and dropped without a notification.
    State (``last_position``, ``last_modified``) only changes on acceptance.
    """

    def __init__(
        self,
        not_accepted_accuracy: Optional[Iterable[str]] = None,
        minimum_distance_change: float = MINIMUM_DISTANCE_CHANGE_M,
        tracking_interval: float = TRACKING_INTERVAL_MS,
    ):
        if not_accepted_accuracy is None:
            not_accepted_accuracy = default_not_accepted_accuracy()
        self.not_accepted_accuracy = frozenset(
            str(getattr(q, "value", q)).replace(" ", "_") for q in not_accepted_accuracy
        )
        self.minimum_distance_change = minimum_distance_change
        self.tracking_interval = tracking_interval
        self.last_position: Optional[GeoPosition] = None
        self.last_modified: Optional[float] = None
        self._subject = ObserverSubject("PositionManager")

    def subscribe(self, subscriber: Subscriber) -> Subscription:
        """Register a listener called with ``(event, position, error)``."""
        return self._subject.subscribe(subscriber)

    @property
    def subscriber_count(self) -> int:
        return len(self._subject)

    # Read-only views of the last accepted position
    @property
    def latitude(self) -> Optional[float]:
        return self.last_position.latitude if self.last_position else None

    @property
    def longitude(self) -> Optional[float]:
        return self.last_position.longitude if self.last_position else None

    @property
    def accuracy(self) -> Optional[float]:
        return self.last_position.accuracy if self.last_position else None

    @property
    def timestamp(self) -> Optional[float]:
        return self.last_position.timestamp if self.last_position else None

    def _notify(self, event: PositionEvent, position: Optional[GeoPosition], error: Optional[PositionError]):
        self._subject.notify(event, position, error)

    def _parse(self, sample: Optional[Mapping[str, Any]]) -> Optional[Mapping[str, Any]]:
        """Return the flattened sample, or None when it cannot be used."""
        if not sample or not isinstance(sample, Mapping):
            error = InvalidPositionError(f"Invalid position data: {sample!r}")
        else:
            flat = normalize_sample(sample)
            missing = [
                key for key in REQUIRED_FIELDS
                if flat.get(key) is None
            ]
            invalid = [
                key for key in REQUIRED_FIELDS
                if key not in missing and not _is_finite_number(flat[key])
            ]
            if not missing and not invalid:
                return flat
            if missing:
                error = InvalidPositionError(f"Invalid position data, missing {', '.join(missing)}")
            else:
                error = InvalidPositionError(f"Invalid position data, not a number: {', '.join(invalid)}")
        logger.warning(f"{error}")
        return None

    def update(self, sample: Optional[Mapping[str, Any]]) -> Optional[PositionEvent]:
        """
        Validate a raw sample and notify subscribers of the outcome.

        Args:
            sample: Mapping with latitude, longitude, accuracy, timestamp (ms)
                and optional altitude, heading and speed. The browser shape
                ``{"coords": {...}, "timestamp": ...}`` is accepted too.

        Returns:
            The event delivered to subscribers, or None if the sample was
            malformed and dropped.
        """
        flat = self._parse(sample)
        if flat is None:
            return None

        quality = get_accuracy_quality(flat["accuracy"])
        if quality.value in self.not_accepted_accuracy:
            error = AccuracyError(flat["accuracy"], quality.value)
            logger.warning(f"Position rejected: {error}")
            self._notify(PositionEvent.NOT_UPDATED, None, error)
            return PositionEvent.NOT_UPDATED

        if self.last_position is not None:
            distance = calculate_distance(
                self.last_position.latitude,
                self.last_position.longitude,
                flat["latitude"],
                flat["longitude"],
            )
            if distance < self.minimum_distance_change:
                error = DistanceError(distance, self.minimum_distance_change)
                logger.warning(f"Position rejected: {error}")
                self._notify(PositionEvent.NOT_UPDATED, None, error)
                return PositionEvent.NOT_UPDATED

        elapsed = flat["timestamp"] - (self.last_modified or 0)
        error = None
        if elapsed < self.tracking_interval:
            error = ElapseTimeError(elapsed, self.tracking_interval)
            logger.debug(f"Immediate update: {error}")
            event = PositionEvent.IMMEDIATE
        else:
            event = PositionEvent.REGULAR

        self.last_position = GeoPosition.from_sample(flat)
        self.last_modified = flat["timestamp"]
        logger.debug(f"Position accepted ({event.name}): {self.last_position}")
        self._notify(event, self.last_position, error)
        return event

    def destroy(self):
        """Release subscribers and stored state."""
        self._subject.clear()
        self.last_position = None
        self.last_modified = None

    def __str__(self) -> str:
        if self.last_position is None:
            return "PositionManager: No position data"
        return f"PositionManager: {self.last_position}"
