"""Priority queue of pending announcements with per-item expiration."""

import logging
import math
import numbers
from dataclasses import dataclass
from typing import Callable, List, Optional

from .config import SPEECH_QUEUE_EXPIRATION_MS, SPEECH_QUEUE_MAX_SIZE
from .lru_cache import now_ms
from .observer import ObserverSubject, Subscriber, Subscription

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SpeechItem:
    """Text waiting to be spoken."""
    text: str
    priority: float
    created_at: float  # epoch ms

    def is_expired(self, expiration_ms: float, now: float) -> bool:
        return now - self.created_at > expiration_ms

    def __str__(self) -> str:
        text = self.text if len(self.text) <= 50 else self.text[:50] + "..."
        return f'SpeechItem: "{text}" (priority: {self.priority})'


class SpeechQueue:
    """
    Announcements ordered by descending priority.

    Items with equal priority keep their insertion order. Items older than
    ``expiration_ms`` are dropped lazily: every read (``size``,
    ``is_empty``, ``dequeue``, ``items``) and every ``enqueue`` sweeps them
    first, so callers never see stale entries. When the queue grows beyond
    ``max_size`` the lowest-priority tail is discarded.

    Observers are called with the queue itself whenever its contents change.
    """

    def __init__(
        self,
        max_size: int = SPEECH_QUEUE_MAX_SIZE,
        expiration_ms: int = SPEECH_QUEUE_EXPIRATION_MS,
        clock: Callable[[], float] = now_ms,
    ):
        if not isinstance(max_size, int) or not 1 <= max_size <= 1000:
            raise ValueError(f"max_size must be an integer between 1 and 1000, got: {max_size}")
        if not isinstance(expiration_ms, int) or not 1000 <= expiration_ms <= 300000:
            raise ValueError(f"expiration_ms must be an integer between 1000 and 300000, got: {expiration_ms}")
        self.max_size = max_size
        self.expiration_ms = expiration_ms
        self._clock = clock
        self._items: List[SpeechItem] = []
        self._subject = ObserverSubject("SpeechQueue")

    def subscribe(self, subscriber: Subscriber) -> Subscription:
        return self._subject.subscribe(subscriber)

    def _notify(self):
        self._subject.notify(self)

    def clean_expired(self) -> int:
        """Drop expired items. Returns the number removed."""
        now = self._clock()
        before = len(self._items)
        self._items = [item for item in self._items if not item.is_expired(self.expiration_ms, now)]
        removed = before - len(self._items)
        if removed:
            logger.debug(f"Removed {removed} expired speech items")
        return removed

    def enqueue(self, text: str, priority: float = 0) -> SpeechItem:
        """
        Insert ``text`` in priority order.

        Raises:
            TypeError: If text is not a string or priority is not a finite number
            ValueError: If text is empty or whitespace only
        """
        if not isinstance(text, str):
            raise TypeError(f"Text must be a string, got: {type(text).__name__}")
        if not text.strip():
            raise ValueError("Text cannot be empty or only whitespace")
        if (
            isinstance(priority, bool)
            or not isinstance(priority, numbers.Real)
            or not math.isfinite(priority)
        ):
            raise TypeError(f"Priority must be a finite number, got: {priority!r}")

        self.clean_expired()

        item = SpeechItem(text=text, priority=priority, created_at=self._clock())
        # Insert after the last item whose priority is >= the new one
        index = len(self._items)
        for i, queued in enumerate(self._items):
            if queued.priority < priority:
                index = i
                break
        self._items.insert(index, item)

        if len(self._items) > self.max_size:
            dropped = self._items[self.max_size:]
            del self._items[self.max_size:]
            logger.debug(f"Speech queue full, discarded {len(dropped)} lowest priority items")

        self._notify()
        return item

    def dequeue(self) -> Optional[SpeechItem]:
        """Remove and return the highest priority item, or None if empty."""
        self.clean_expired()
        if not self._items:
            return None
        item = self._items.pop(0)
        self._notify()
        return item

    def peek(self) -> Optional[SpeechItem]:
        self.clean_expired()
        return self._items[0] if self._items else None

    def is_empty(self) -> bool:
        self.clean_expired()
        return not self._items

    def size(self) -> int:
        self.clean_expired()
        return len(self._items)

    def __len__(self) -> int:
        return self.size()

    def items(self) -> List[SpeechItem]:
        """Snapshot of the live items, head first."""
        self.clean_expired()
        return list(self._items)

    def clear(self) -> int:
        """Remove every item. Returns the number removed."""
        removed = len(self._items)
        self._items = []
        self._notify()
        return removed

    def __str__(self) -> str:
        return f"SpeechQueue: size={self.size()}, maxSize={self.max_size}, expirationMs={self.expiration_ms}"
