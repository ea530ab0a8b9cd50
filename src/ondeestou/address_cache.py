"""Cached address resolution with field-level change notification."""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Mapping, NamedTuple, Optional

from .address import StandardizedAddress, extract_address
from .address_store import AddressDataStore, generate_cache_key
from .callback_registry import CallbackRegistry
from .change_detector import AddressChangeDetector, ChangeDetails
from .config import (
    ADDRESS_CACHE_CLEANUP_INTERVAL_S,
    ADDRESS_CACHE_EXPIRATION_MS,
    ADDRESS_CACHE_MAX_SIZE,
    TRACKED_ADDRESS_FIELDS,
)
from .lru_cache import LRUCache, now_ms
from .observer import ObserverSubject, Subscriber, Subscription
from .timers import RepeatingTimer

logger = logging.getLogger(__name__)

ADDRESS_UPDATED = "addressUpdated"


class CachedAddress(NamedTuple):
    address: StandardizedAddress
    raw: Mapping[str, Any]


@dataclass(frozen=True)
class AddressUpdated:
    """Event sent to AddressCache observers after a fresh resolution."""
    address: StandardizedAddress
    cache_size: int
    type: str = ADDRESS_UPDATED


class AddressCache:
    """
    Resolves raw reverse-geocoding payloads to standardized addresses.

    Resolution results are kept in an LRU cache keyed by the payload's
    address components. A cache miss extracts a new address, shifts the
    current/previous history and runs change detection on the tracked
    fields; each field with a new transition gets its registered callback
    called once with a ChangeDetails. Observers receive an AddressUpdated
    event on every miss.

    Components:
        - LRUCache: cached addresses and their raw payloads
        - AddressDataStore: current/previous history
        - AddressChangeDetector: one-shot transition signatures
        - CallbackRegistry: field -> callback
    """

    def __init__(
        self,
        max_size: int = ADDRESS_CACHE_MAX_SIZE,
        expiration_ms: float = ADDRESS_CACHE_EXPIRATION_MS,
        tracked_fields: Iterable[str] = TRACKED_ADDRESS_FIELDS,
        cleanup_interval: Optional[float] = ADDRESS_CACHE_CLEANUP_INTERVAL_S,
        clock: Callable[[], float] = now_ms,
    ):
        self.cache: LRUCache[str, CachedAddress] = LRUCache(max_size, expiration_ms, clock=clock)
        self.data_store = AddressDataStore()
        self.change_detector = AddressChangeDetector()
        self.callback_registry = CallbackRegistry()
        self.tracked_fields: List[str] = list(tracked_fields)
        self._subject = ObserverSubject("AddressCache")

        self._cleanup_timer: Optional[RepeatingTimer] = None
        if cleanup_interval:
            self._cleanup_timer = RepeatingTimer(
                cleanup_interval, self.clean_expired_entries, name="address-cache-cleanup"
            ).start()

    # Observers

    def subscribe(self, subscriber: Subscriber) -> Subscription:
        """Register a listener called with an AddressUpdated event."""
        return self._subject.subscribe(subscriber)

    # Change callbacks

    def track_field(self, field: str):
        """Add a StandardizedAddress field to change detection."""
        if field not in StandardizedAddress.__dataclass_fields__:
            raise ValueError(f"Unknown address field: {field}")
        if field not in self.tracked_fields:
            self.tracked_fields.append(field)

    def set_change_callback(self, field: str, callback: Optional[Callable[[ChangeDetails], Any]]):
        """Register (or with None, remove) the change callback for a field."""
        self.track_field(field)
        self.callback_registry.register(field, callback)

    def set_logradouro_change_callback(self, callback):
        self.set_change_callback("logradouro", callback)

    def set_bairro_change_callback(self, callback):
        self.set_change_callback("bairro", callback)

    def set_municipio_change_callback(self, callback):
        self.set_change_callback("municipio", callback)

    # History

    @property
    def current_address(self) -> Optional[StandardizedAddress]:
        return self.data_store.current_address

    @property
    def previous_address(self) -> Optional[StandardizedAddress]:
        return self.data_store.previous_address

    @property
    def cache_size(self) -> int:
        return len(self.cache)

    # Resolution

    def resolve(self, data: Optional[Mapping[str, Any]]) -> StandardizedAddress:
        """
        Return the standardized address for a raw payload.

        A non-expired cache hit is returned as is, without change detection
        or observer notification. Payloads without a derivable key are
        extracted but neither cached nor recorded in history.

        Args:
            data: Nominatim reverse payload with an ``address`` sub-object

        Returns:
            StandardizedAddress (all fields None for a malformed payload)
        """
        cache_key = generate_cache_key(data)
        if cache_key:
            cached = self.cache.get(cache_key)
            if cached is not None:
                logger.debug(f"Address cache hit: {cache_key}")
                return cached.address

        address = extract_address(data)

        if cache_key:
            self.cache.set(cache_key, CachedAddress(address, data))
            self.data_store.update(address, data)
            logger.debug(f"Address cached: {cache_key} ({len(self.cache)}/{self.cache.max_size})")
            self._detect_changes()
        else:
            logger.debug("Payload has no usable address components, not caching")

        self._subject.notify(AddressUpdated(address=address, cache_size=len(self.cache)))
        return address

    def _detect_changes(self) -> List[str]:
        """Run change detection on tracked fields. Returns the fields whose callback ran."""
        current = self.data_store.current
        previous = self.data_store.previous
        if current.address is None or previous.address is None:
            return []

        fired = []
        for field in self.tracked_fields:
            if not self.callback_registry.has(field):
                continue
            if not self.change_detector.has_field_changed(field, current.address, previous.address):
                continue
            details = self.change_detector.get_change_details(
                field, current.address, previous.address, current.raw, previous.raw
            )
            logger.info(f"Address field {field} changed: {details.from_value} => {details.to_value}")
            if self.callback_registry.execute(field, details):
                fired.append(field)
        return fired

    # Maintenance

    def clean_expired_entries(self) -> int:
        removed = self.cache.clean_expired()
        if removed > 0:
            logger.info(f"Cleaned {removed} expired cache entries")
        return removed

    def clear(self):
        """Empty the cache and forget history and notified transitions."""
        self.cache.clear()
        self.data_store.clear()
        self.change_detector.clear_all_signatures()

    def destroy(self):
        """Stop the cleanup timer and release all references."""
        if self._cleanup_timer is not None:
            self._cleanup_timer.cancel()
            self._cleanup_timer = None
        self.clear()
        self.callback_registry.clear()
        self._subject.clear()

    def __str__(self) -> str:
        return (
            f"AddressCache: cache={len(self.cache)}, current={self.current_address}, "
            f"previous={self.previous_address}"
        )
