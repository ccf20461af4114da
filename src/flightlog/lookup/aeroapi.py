"""FlightAware AeroAPI flight status lookup.

Endpoint used:
  GET /flights/{ident}?max_pages=1   (header: x-apikey)

A single page of recent and scheduled legs is requested; the first leg that
actually departed is preferred over purely scheduled ones.
"""

import logging
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Optional
from urllib.parse import quote

import requests

from flightlog.config import AEROAPI_BASE_URL, DEFAULT_TIMEOUT
from flightlog.errors import (
    BadInputError,
    ConfigurationError,
    InternalError,
    NetworkFailure,
    NotFoundError,
    ProviderError,
)
from flightlog.lookup.ident import clean_ident
from flightlog.reference.geo import round_half_up

logger = logging.getLogger(__name__)


@dataclass
class FlightStatus:
    """Representative leg extracted from a provider response."""

    origin: Optional[str]
    destination: Optional[str]
    duration: Optional[int]  # filed, minutes
    actual_duration: Optional[int]  # minutes
    departure_date: Optional[str]  # "YYYY-MM-DD"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @property
    def best_duration(self) -> Optional[int]:
        """Actual block time when flown, else the filed estimate."""
        if self.actual_duration is not None:
            return self.actual_duration
        return self.duration


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _airport_code(endpoint: Any) -> Optional[str]:
    if not isinstance(endpoint, dict):
        return None
    code = endpoint.get("code") or endpoint.get("code_icao") or endpoint.get("code_iata")
    return str(code).strip().upper() if code else None


def select_leg(legs: list[dict]) -> dict:
    """First leg with an actual departure, else the first leg."""
    for leg in legs:
        if leg.get("actual_off"):
            return leg
    return legs[0]


def extract_status(leg: dict) -> FlightStatus:
    """Map one AeroAPI flight object onto a FlightStatus."""
    filed_ete = leg.get("filed_ete")
    duration = round_half_up(filed_ete / 60) if filed_ete else None

    actual_duration = None
    off = _parse_timestamp(leg.get("actual_off"))
    on = _parse_timestamp(leg.get("actual_on"))
    if off and on:
        actual_duration = round_half_up((on - off).total_seconds() / 60)

    scheduled_off = leg.get("scheduled_off")
    departure_date = scheduled_off.split("T")[0] if scheduled_off else None

    return FlightStatus(
        origin=_airport_code(leg.get("origin")),
        destination=_airport_code(leg.get("destination")),
        duration=duration,
        actual_duration=actual_duration,
        departure_date=departure_date,
    )


class AeroAPIClient:
    """Flight status lookup against FlightAware AeroAPI v4."""

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = AEROAPI_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def fetch_legs(self, ident: str) -> list[dict]:
        """Raw flight objects for an identifier (one page)."""
        url = f"{self.base_url}/flights/{quote(ident, safe='')}"
        headers = {"x-apikey": self.api_key, "Accept": "application/json"}
        try:
            resp = requests.get(
                url, params={"max_pages": 1}, headers=headers, timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.warning("AeroAPI request for %s failed: %s", ident, e)
            raise NetworkFailure(f"Could not reach flight provider: {e}") from e

        logger.info("AeroAPI GET /flights/%s status=%s", ident, resp.status_code)
        if not resp.ok:
            raise ProviderError(resp.status_code)

        try:
            data = resp.json()
        except ValueError as e:
            raise InternalError(f"Provider returned invalid JSON for {ident}") from e
        flights = data.get("flights") if isinstance(data, dict) else None
        return [f for f in flights or [] if isinstance(f, dict)]

    def lookup(self, ident: Optional[str]) -> FlightStatus:
        """Most relevant leg for `ident` (already normalized by the caller)."""
        ident = clean_ident(ident)
        if not ident:
            raise BadInputError("No flight identifier supplied")
        if not self.api_key:
            raise ConfigurationError("FLIGHTAWARE_API_KEY is not configured")

        legs = self.fetch_legs(ident)
        if not legs:
            logger.info("No flights found for %s", ident)
            raise NotFoundError(f"Flight {ident} not found")

        try:
            status = extract_status(select_leg(legs))
        except (AttributeError, TypeError, ValueError) as e:
            logger.exception("Could not parse AeroAPI response for %s", ident)
            raise InternalError(f"Unexpected provider data for {ident}") from e
        logger.info("Resolved %s: %s", ident, status)
        return status
