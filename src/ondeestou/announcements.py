"""Announcement phrases and the priority policy used to queue them."""

from dataclasses import dataclass, field
from typing import Dict, Optional

from .address import StandardizedAddress
from .change_detector import ChangeDetails
from .position_manager import PositionEvent

# Message templates
MSG_NO_LOCATION = "Localização não disponível"
MSG_NO_ADDRESS = "Localização detectada, mas endereço não disponível"
MSG_LOGRADOURO = "Você está agora em {logradouro}"
MSG_BAIRRO = "Você entrou no bairro {bairro}"
MSG_MUNICIPIO = "Você entrou no município de {municipio}"
MSG_MUNICIPIO_FROM_TO = "Você saiu de {previous} e entrou em {current}"


@dataclass(frozen=True)
class PriorityPolicy:
    """
    Queue priority for each kind of announcement.

    A value of None means the event is not announced. Field changes
    default to municipio > bairro > logradouro, periodic full-address
    announcements to the lowest priority, and immediate (early) position
    updates are not announced on their own.
    """
    field_changes: Dict[str, Optional[float]] = field(
        default_factory=lambda: {"municipio": 3, "bairro": 2, "logradouro": 1}
    )
    regular_update: Optional[float] = 0
    immediate_update: Optional[float] = None

    def for_field(self, field_name: str) -> Optional[float]:
        return self.field_changes.get(field_name)

    def for_position_event(self, event: PositionEvent) -> Optional[float]:
        if event == PositionEvent.REGULAR:
            return self.regular_update
        if event == PositionEvent.IMMEDIATE:
            return self.immediate_update
        return None


def build_full_text(address: Optional[StandardizedAddress]) -> str:
    """
    Full address phrase, from the most specific level available.

    Examples:
        >>> build_full_text(StandardizedAddress(logradouro="Rua A", bairro="Centro", municipio="Recife"))
        'Você está em Rua A, Centro, Recife'
    """
    if address is None:
        return MSG_NO_LOCATION

    if address.logradouro:
        text = f"Você está em {address.logradouro_completo()}"
        if address.bairro:
            text += f", {address.bairro_completo()}"
        if address.municipio:
            text += f", {address.municipio}"
        return text
    if address.bairro:
        text = f"Você está em bairro {address.bairro_completo()}"
        if address.municipio:
            text += f", {address.municipio}"
        return text
    if address.municipio:
        return f"Você está em {address.municipio}"
    return MSG_NO_ADDRESS


def build_change_text(details: ChangeDetails) -> Optional[str]:
    """Phrase for a field change, or None if there is nothing to say."""
    current = details.current_address
    if current is None:
        return None

    if details.field == "municipio":
        if not current.municipio:
            return None
        if details.from_value:
            return MSG_MUNICIPIO_FROM_TO.format(previous=details.from_value, current=current.municipio)
        return MSG_MUNICIPIO.format(municipio=current.municipio)
    if details.field == "bairro":
        if not current.bairro:
            return None
        return MSG_BAIRRO.format(bairro=current.bairro_completo())
    if details.field == "logradouro":
        if not current.logradouro:
            return None
        return MSG_LOGRADOURO.format(logradouro=current.logradouro_completo())

    if details.to_value:
        return f"{details.field}: {details.to_value}"
    return None
