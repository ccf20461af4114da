"""Airport lookup by IATA or ICAO code."""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional

from flightlog.config import AIRPORTS_URL, DEFAULT_TIMEOUT
from flightlog.reference.remote import fetch_dataset

logger = logging.getLogger(__name__)

_CODE_RE = re.compile(r"^[A-Z0-9]{3,4}$")


@dataclass(frozen=True)
class AirportRecord:
    """Airport details from reference data. Coordinates are None for bare codes."""

    iata: str
    icao: str
    name: str = ""
    city: str = ""
    country: str = ""
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @property
    def code(self) -> str:
        """Display code: IATA when known, else ICAO."""
        return self.iata or self.icao

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Optional["AirportRecord"]:
        """Validate a dataset row; field names are matched case-insensitively."""
        fields = {str(k).lower(): v for k, v in row.items()}
        iata = _clean_code(fields.get("iata"))
        icao = _clean_code(fields.get("icao"))
        if not iata and not icao:
            return None
        lat = _to_float(fields.get("lat", fields.get("latitude")))
        lon = _to_float(fields.get("lon", fields.get("longitude")))
        return cls(
            iata=iata,
            icao=icao,
            name=str(fields.get("name") or "").strip(),
            city=str(fields.get("city") or "").strip(),
            country=str(fields.get("country") or "").strip(),
            latitude=lat if lon is not None else None,
            longitude=lon if lat is not None else None,
        )

    @classmethod
    def bare(cls, code: str) -> Optional["AirportRecord"]:
        """Record for a well-formed code missing from the reference data."""
        code = (code or "").upper().strip()
        if not _CODE_RE.match(code):
            return None
        if len(code) == 3:
            return cls(iata=code, icao="")
        return cls(iata="", icao=code)


def _clean_code(value: Any) -> str:
    if value is None:
        return ""
    code = str(value).strip().upper()
    if code in ("\\N", "N/A", "-", "0"):
        return ""
    return code


def _to_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


class AirportTable:
    """Immutable airport lookup keyed by both IATA and ICAO codes."""

    def __init__(self, records: Iterable[AirportRecord] = ()):
        self._records: tuple[AirportRecord, ...] = tuple(records)
        index: dict[str, AirportRecord] = {}
        for rec in self._records:
            # Prefer first occurrence for duplicates
            if rec.iata:
                index.setdefault(rec.iata, rec)
            if rec.icao:
                index.setdefault(rec.icao, rec)
        self._index = index

    @classmethod
    def from_json(cls, payload: Any) -> "AirportTable":
        """Build from an object keyed by code, or from a plain list of rows."""
        if isinstance(payload, Mapping):
            rows: Iterable[Any] = payload.values()
        elif isinstance(payload, list):
            rows = payload
        else:
            if payload is not None:
                logger.warning("Airport dataset has unexpected type %s", type(payload).__name__)
            return cls()
        records = []
        for row in rows:
            if not isinstance(row, Mapping):
                continue
            rec = AirportRecord.from_row(row)
            if rec is not None:
                records.append(rec)
        return cls(records)

    @classmethod
    def fetch(cls, url: str = AIRPORTS_URL, timeout: float = DEFAULT_TIMEOUT) -> "AirportTable":
        """Download the dataset. Degrades to an empty table on failure."""
        table = cls.from_json(fetch_dataset(url, timeout=timeout))
        logger.info("Loaded %d airports from %s", len(table), url)
        return table

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self):
        return iter(self._records)

    def get(self, code: str) -> Optional[AirportRecord]:
        """Look up airport by IATA or ICAO code. Returns None if not found."""
        if not code:
            return None
        return self._index.get(code.upper().strip())

    def resolve(self, code: str, allow_bare: bool = False) -> Optional[AirportRecord]:
        """
        Known record, else None.

        A well-formed code missing from the table becomes a bare record only
        when the table failed to load or the caller trusts the code
        (`allow_bare`, e.g. codes reported by the flight provider).
        """
        rec = self.get(code)
        if rec is None and (allow_bare or not self._records):
            rec = AirportRecord.bare(code)
        return rec

    def search(self, query: str, limit: int = 5) -> list[AirportRecord]:
        """Autocomplete by code or city (case-insensitive substring)."""
        q = (query or "").strip().lower()
        if len(q) < 3:
            return []
        hits = []
        for rec in self._records:
            if q in rec.iata.lower() or q in rec.icao.lower() or q in rec.city.lower():
                hits.append(rec)
                if len(hits) >= limit:
                    break
        return hits


@dataclass(frozen=True)
class HomeMarket:
    """Country whose domestic flights count as local."""

    country_code: str
    country_name: str
    icao_prefix: str
    airports: frozenset = field(default_factory=frozenset)

    def is_local(self, code: str, airports: Optional[AirportTable] = None) -> bool:
        code = (code or "").upper().strip()
        if not code:
            return False
        rec = airports.get(code) if airports is not None else None
        if rec is not None:
            country = rec.country.lower()
            if country in (self.country_code.lower(), self.country_name.lower()):
                return True
            if self.icao_prefix and rec.icao.startswith(self.icao_prefix):
                return True
        if len(code) == 4 and self.icao_prefix and code.startswith(self.icao_prefix):
            return True
        return code in self.airports

    def is_local_flight(self, origin: str, destination: str, airports: Optional[AirportTable] = None) -> bool:
        return self.is_local(origin, airports) and self.is_local(destination, airports)


SOUTH_AFRICA = HomeMarket(
    country_code="ZA",
    country_name="South Africa",
    icao_prefix="FA",
    airports=frozenset({
        "JNB", "CPT", "DUR", "HLA", "GRJ", "PLZ", "ELS", "KIM", "BFN", "MQP",
        "PTG", "UTH", "RCB", "PBZ", "LNO", "PHW", "NTY", "SIS", "ZEC",
    }),
)

HOME_MARKETS: dict[str, HomeMarket] = {SOUTH_AFRICA.country_code: SOUTH_AFRICA}


def home_market(country_code: str) -> HomeMarket:
    """Known home market for an ISO country code; others get a country-only market."""
    code = (country_code or "").upper().strip()
    market = HOME_MARKETS.get(code)
    if market is not None:
        return market
    return HomeMarket(country_code=code, country_name=code, icao_prefix="")
