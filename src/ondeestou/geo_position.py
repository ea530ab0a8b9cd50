"""Immutable snapshot of an accepted geolocation sample."""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

EARTH_RADIUS_M = 6371e3  # mean radius


class AccuracyQuality(str, Enum):
    """Five-level bucket for a GPS accuracy radius."""
    EXCELLENT = "excellent"
    GOOD = "good"
    MEDIUM = "medium"
    BAD = "bad"
    VERY_BAD = "very_bad"


def get_accuracy_quality(accuracy: float) -> AccuracyQuality:
    """
    Classify an accuracy radius in meters.

    Boundaries are inclusive: 10 is excellent, 30 good, 100 medium,
    200 bad, anything larger very_bad.
    """
    if accuracy <= 10:
        return AccuracyQuality.EXCELLENT
    elif accuracy <= 30:
        return AccuracyQuality.GOOD
    elif accuracy <= 100:
        return AccuracyQuality.MEDIUM
    elif accuracy <= 200:
        return AccuracyQuality.BAD
    return AccuracyQuality.VERY_BAD


def calculate_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in meters (haversine)."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c


def normalize_sample(sample: Mapping[str, Any]) -> Mapping[str, Any]:
    """
    Flatten a raw sample into a single mapping.

    Accepts both the flat shape ``{latitude, longitude, accuracy, ..., timestamp}``
    and the browser shape ``{coords: {...}, timestamp}``.
    """
    coords = sample.get("coords")
    if isinstance(coords, Mapping):
        flat = dict(coords)
        flat["timestamp"] = sample.get("timestamp")
        return flat
    return sample


@dataclass(frozen=True)
class GeoPosition:
    """GPS position with metadata."""
    latitude: float
    longitude: float
    accuracy: float
    timestamp: float  # epoch ms
    altitude: Optional[float] = None
    altitude_accuracy: Optional[float] = None
    heading: Optional[float] = None
    speed: Optional[float] = None

    @property
    def accuracy_quality(self) -> AccuracyQuality:
        return get_accuracy_quality(self.accuracy)

    @classmethod
    def from_sample(cls, sample: Mapping[str, Any]) -> "GeoPosition":
        """Build a position from a raw sample (flat or browser shape)."""
        flat = normalize_sample(sample)
        return cls(
            latitude=float(flat["latitude"]),
            longitude=float(flat["longitude"]),
            accuracy=float(flat["accuracy"]),
            timestamp=flat["timestamp"],
            altitude=flat.get("altitude"),
            altitude_accuracy=flat.get("altitudeAccuracy", flat.get("altitude_accuracy")),
            heading=flat.get("heading"),
            speed=flat.get("speed"),
        )

    def distance_to(self, other: "GeoPosition") -> float:
        """Distance in meters to another position."""
        return calculate_distance(self.latitude, self.longitude, other.latitude, other.longitude)

    def __str__(self) -> str:
        return (
            f"GeoPosition: {self.latitude}, {self.longitude}, {self.accuracy_quality.value}, "
            f"{self.altitude}, {self.speed}, {self.heading}, {self.timestamp}"
        )
