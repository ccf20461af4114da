"""Rewrite IATA-style flight numbers (FA600) into ICAO form (SFR600)."""

import logging
import re
from dataclasses import dataclass
from typing import Optional

from flightlog.reference.airlines import AirlineResolver

logger = logging.getLogger(__name__)

IATA_FLIGHT_RE = re.compile(r"^([A-Z]{2})([0-9]+)$")


@dataclass(frozen=True)
class NormalizedIdent:
    """Identifier to send to the provider, plus the carrier code if one was resolved."""

    ident: str
    original: str
    airline: Optional[str] = None

    @property
    def converted(self) -> bool:
        return self.ident != self.original


def clean_ident(raw: Optional[str]) -> str:
    """Uppercase and strip all whitespace."""
    if not raw:
        return ""
    return "".join(raw.split()).upper()


def normalize_ident(raw: Optional[str], resolver: AirlineResolver) -> NormalizedIdent:
    """Best-effort conversion; falls back to the original identifier."""
    ident = clean_ident(raw)
    m = IATA_FLIGHT_RE.match(ident)
    if not m:
        return NormalizedIdent(ident=ident, original=ident)

    prefix, number = m.groups()
    logger.info("Detected IATA carrier %s in %s, converting", prefix, ident)
    icao = resolver.resolve(prefix)
    if not icao:
        logger.info("Could not resolve ICAO code for %s, keeping %s", prefix, ident)
        return NormalizedIdent(ident=ident, original=ident)

    converted = f"{icao}{number}"
    logger.info("Converted %s to %s", ident, converted)
    return NormalizedIdent(ident=converted, original=ident, airline=icao)
