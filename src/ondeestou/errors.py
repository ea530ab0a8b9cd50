"""Error taxonomy for the tracking pipeline.

Position errors are not raised by PositionManager. They are built and handed
to subscribers together with the event that describes the outcome of a
sample, so listeners can inspect ``type(error)`` or ``error.name``.
"""


class OndeestouError(Exception):
    """Base class for all pipeline errors."""

    @property
    def name(self) -> str:
        return type(self).__name__


class PositionError(OndeestouError):
    """Outcome descriptor for a position sample."""


class AccuracyError(PositionError):
    """Sample rejected: accuracy is not good enough."""

    def __init__(self, accuracy, quality):
        super().__init__(f"Accuracy is not good enough: {accuracy}m ({quality})")
        self.accuracy = accuracy
        self.quality = quality


class DistanceError(PositionError):
    """Sample rejected: movement is not significant enough."""

    def __init__(self, distance, minimum):
        super().__init__(
            f"Movement is not significant enough: {distance:.1f}m < {minimum}m"
        )
        self.distance = distance
        self.minimum = minimum


class ElapseTimeError(PositionError):
    """Sample accepted, but sooner than the regular tracking interval."""

    def __init__(self, elapsed_ms, interval_ms):
        super().__init__(
            f"Less than {interval_ms / 1000:g} seconds since last update: "
            f"{elapsed_ms / 1000:g} seconds"
        )
        self.elapsed_ms = elapsed_ms
        self.interval_ms = interval_ms


class InvalidPositionError(PositionError):
    """Malformed sample; dropped at the boundary."""


class CallbackExecutionError(OndeestouError):
    """A change callback or observer raised while being notified."""

    def __init__(self, target: str, cause: BaseException):
        super().__init__(f"Error executing callback for {target!r}: {cause}")
        self.target = target
        self.cause = cause
