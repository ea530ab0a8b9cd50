"""Brazilian standardized address and its extraction from Nominatim payloads."""

import re
import logging
from dataclasses import dataclass, fields
from typing import Any, Mapping, Optional

logger = logging.getLogger(__name__)

_ISO3166_BR = re.compile(r"^BR-([A-Z]{2})$")
_SIGLA = re.compile(r"^[A-Z]{2}$")

NO_REFERENCE_PLACE = "Não classificado"
REFERENCE_PLACE_CLASSES = ("place", "shop", "amenity", "railway")

# OSM class -> type -> Portuguese description
REFERENCE_PLACE_MAP = {
    "place": {"house": "Residencial"},
    "shop": {
        "mall": "Shopping Center",
        "car_repair": "Oficina Mecânica",
    },
    "amenity": {"cafe": "Café"},
    "railway": {
        "subway": "Estação do Metrô",
        "station": "Estação do Metrô",
    },
}


@dataclass(frozen=True)
class ReferencePlace:
    """
    Point of interest the payload was resolved to (mall, station, cafe...).

    Attributes:
        class_name: OSM feature class (e.g. "shop")
        type_name: OSM feature type (e.g. "mall")
        name: Name of the place
        description: Portuguese description, e.g. "Shopping Center Morumbi"
    """
    class_name: Optional[str] = None
    type_name: Optional[str] = None
    name: Optional[str] = None
    description: str = NO_REFERENCE_PLACE

    @classmethod
    def from_payload(cls, data: Optional[Mapping[str, Any]]) -> "ReferencePlace":
        """Build from the top-level ``class``, ``type`` and ``name`` of a payload."""
        data = data or {}
        class_name = data.get("class") or None
        type_name = data.get("type") or None
        name = data.get("name") or None
        return cls(
            class_name=class_name,
            type_name=type_name,
            name=name,
            description=describe_reference_place(class_name, type_name, name),
        )

    def __str__(self) -> str:
        if self.name:
            return f"ReferencePlace: {self.description} - {self.name}"
        return f"ReferencePlace: {self.description}"


def describe_reference_place(class_name: Optional[str], type_name: Optional[str], name: Optional[str] = None) -> str:
    if not class_name or not type_name or class_name not in REFERENCE_PLACE_CLASSES:
        return NO_REFERENCE_PLACE
    description = REFERENCE_PLACE_MAP.get(class_name, {}).get(type_name)
    if description is None:
        return f"{class_name}: {type_name}"
    if name:
        return f"{description} {name}"
    return description


@dataclass(frozen=True)
class StandardizedAddress:
    """
    Address in Brazilian terms.

    Attributes:
        logradouro: Street name
        numero: House number
        bairro: Neighborhood
        municipio: City/municipality
        regiao_metropolitana: Metropolitan region
        uf: Full state name (e.g. "São Paulo")
        sigla_uf: Two-letter state code (e.g. "SP")
        cep: Postal code
        pais: Country
        reference_place: Point of interest at the position, if classified
    """
    logradouro: Optional[str] = None
    numero: Optional[str] = None
    bairro: Optional[str] = None
    municipio: Optional[str] = None
    regiao_metropolitana: Optional[str] = None
    uf: Optional[str] = None
    sigla_uf: Optional[str] = None
    cep: Optional[str] = None
    pais: Optional[str] = None
    reference_place: Optional[ReferencePlace] = None

    def logradouro_completo(self) -> str:
        """Street with house number, e.g. "Rua das Flores, 123"."""
        if not self.logradouro:
            return ""
        if self.numero:
            return f"{self.logradouro}, {self.numero}"
        return self.logradouro

    def bairro_completo(self) -> str:
        return self.bairro or ""

    def municipio_completo(self) -> str:
        """City with state code, e.g. "São Paulo, SP"."""
        if not self.municipio:
            return ""
        if self.sigla_uf:
            return f"{self.municipio}, {self.sigla_uf}"
        return self.municipio

    def endereco_completo(self) -> str:
        parts = [self.logradouro_completo(), self.bairro, self.municipio_completo(), self.cep]
        return ", ".join(p for p in parts if p)

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self) if f.name != "reference_place")

    def __str__(self) -> str:
        return f"StandardizedAddress: {self.endereco_completo() or 'Empty address'}"


def extract_sigla_uf(iso3166_code: Any) -> Optional[str]:
    """Extract "SP" from an ISO 3166-2 code such as "BR-SP"."""
    if not iso3166_code or not isinstance(iso3166_code, str):
        return None
    match = _ISO3166_BR.match(iso3166_code)
    return match.group(1) if match else None


def _first(address: Mapping[str, Any], *keys: str) -> Optional[str]:
    for key in keys:
        value = address.get(key)
        if value:
            return value
    return None


def extract_address(data: Optional[Mapping[str, Any]]) -> StandardizedAddress:
    """
    Build a StandardizedAddress from a Nominatim reverse-geocoding payload.

    Supports Nominatim field names and raw OSM ``addr:*`` tags, which take
    precedence when present. A payload without an ``address`` sub-object
    yields an address with every field set to None.

    Args:
        data: Raw payload, e.g. ``{"address": {"road": ..., "city": ...}}``

    Returns:
        The standardized address (never None)
    """
    if not data or not isinstance(data.get("address"), Mapping):
        logger.debug("No address sub-object in payload")
        return StandardizedAddress()

    address = data["address"]

    uf = _first(address, "addr:state", "state")
    sigla_uf = address.get("state_code") or extract_sigla_uf(address.get("ISO3166-2-lvl4"))
    # A two-letter uf is a state code in disguise
    if uf and _SIGLA.match(uf):
        sigla_uf = uf

    country = address.get("country")
    if country in ("Brasil", "Brazil") or not country:
        pais = "Brasil"
    else:
        pais = country

    return StandardizedAddress(
        logradouro=_first(address, "addr:street", "road", "street", "pedestrian"),
        numero=_first(address, "addr:housenumber", "house_number"),
        bairro=_first(address, "addr:neighbourhood", "neighbourhood", "suburb", "quarter"),
        # hamlet is a subdivision inside a municipality, not a municipality
        municipio=_first(address, "addr:city", "city", "town", "municipality", "village"),
        regiao_metropolitana=address.get("county") or None,
        uf=uf,
        sigla_uf=sigla_uf or None,
        cep=_first(address, "addr:postcode", "postcode"),
        pais=pais,
        reference_place=ReferencePlace.from_payload(data),
    )
