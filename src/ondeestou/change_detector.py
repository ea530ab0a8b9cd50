"""Per-field change detection with one-shot notification signatures."""

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from .address import StandardizedAddress


@dataclass(frozen=True)
class ChangeDetails:
    """Payload handed to a field-change callback."""
    field: str
    from_value: Optional[str]
    to_value: Optional[str]
    current_address: Optional[StandardizedAddress]
    previous_address: Optional[StandardizedAddress]
    current_raw: Optional[Mapping[str, Any]] = None
    previous_raw: Optional[Mapping[str, Any]] = None

    def as_dict(self) -> Dict[str, Any]:
        return {
            "from": self.from_value,
            "to": self.to_value,
            "field": self.field,
            "currentAddress": self.current_address,
            "previousAddress": self.previous_address,
        }


class AddressChangeDetector:
    """
    Detects changes of any address field between two addresses.

    For each field the last reported transition ``"<old>=><new>"`` is kept,
    so the same transition is reported at most once. Any other transition
    on that field replaces the signature and is reported again.
    """

    def __init__(self):
        self._signatures: Dict[str, str] = {}

    @staticmethod
    def signature(field: str, current: Any, previous: Any) -> str:
        return f"{getattr(previous, field)}=>{getattr(current, field)}"

    def has_field_changed(self, field: str, current: Any, previous: Any) -> bool:
        """
        Return True if ``field`` differs and this transition was not reported yet.

        Reporting a transition records its signature.
        """
        if current is None or previous is None:
            return False
        if getattr(current, field) == getattr(previous, field):
            return False

        signature = self.signature(field, current, previous)
        if self._signatures.get(field) == signature:
            return False
        self._signatures[field] = signature
        return True

    def get_change_details(
        self,
        field: str,
        current: Optional[StandardizedAddress],
        previous: Optional[StandardizedAddress],
        current_raw: Optional[Mapping[str, Any]] = None,
        previous_raw: Optional[Mapping[str, Any]] = None,
    ) -> ChangeDetails:
        return ChangeDetails(
            field=field,
            from_value=getattr(previous, field) if previous is not None else None,
            to_value=getattr(current, field) if current is not None else None,
            current_address=current,
            previous_address=previous,
            current_raw=current_raw,
            previous_raw=previous_raw,
        )

    def get_field_signature(self, field: str) -> Optional[str]:
        return self._signatures.get(field)

    def clear_field_signature(self, field: str) -> bool:
        return self._signatures.pop(field, None) is not None

    def clear_all_signatures(self):
        self._signatures.clear()

    def tracked_fields(self) -> List[str]:
        """Fields that have a recorded signature."""
        return list(self._signatures)
