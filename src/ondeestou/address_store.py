"""Current/previous address history and cache key derivation."""

from typing import Any, Mapping, NamedTuple, Optional

from .address import StandardizedAddress

CACHE_KEY_SEPARATOR = "|"


class AddressSnapshot(NamedTuple):
    address: Optional[StandardizedAddress]
    raw: Optional[Mapping[str, Any]]


def generate_cache_key(data: Optional[Mapping[str, Any]]) -> Optional[str]:
    """
    Derive a cache key from a raw payload.

    Joins the non-empty components road, house number, neighbourhood, city,
    postcode and country code. Returns None when the payload has no
    ``address`` sub-object or none of the components are present.
    """
    if not data or not isinstance(data.get("address"), Mapping):
        return None

    address = data["address"]
    components = [
        address.get("road") or address.get("street") or "",
        address.get("house_number") or "",
        address.get("neighbourhood") or address.get("suburb") or "",
        address.get("city") or address.get("town") or address.get("municipality") or "",
        address.get("postcode") or "",
        address.get("country_code") or "",
    ]
    key = CACHE_KEY_SEPARATOR.join(str(c).strip() for c in components if str(c).strip())
    return key or None


class AddressDataStore:
    """Holds the current and previous standardized address with their raw payloads."""

    def __init__(self):
        self.current = AddressSnapshot(None, None)
        self.previous = AddressSnapshot(None, None)

    def update(self, address: StandardizedAddress, raw: Optional[Mapping[str, Any]]):
        """Shift current into previous and store the new address."""
        self.previous = self.current
        self.current = AddressSnapshot(address, raw)

    @property
    def current_address(self) -> Optional[StandardizedAddress]:
        return self.current.address

    @property
    def previous_address(self) -> Optional[StandardizedAddress]:
        return self.previous.address

    def has_history(self) -> bool:
        return self.current.address is not None and self.previous.address is not None

    def clear(self):
        self.current = AddressSnapshot(None, None)
        self.previous = AddressSnapshot(None, None)
