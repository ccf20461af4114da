"""Airline reference data and IATA -> ICAO carrier code resolution."""

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Protocol, Sequence

from flightlog.config import AIRLINES_URL, DEFAULT_TIMEOUT
from flightlog.reference.remote import fetch_dataset

logger = logging.getLogger(__name__)

# Home-market carriers. Public datasets are inconsistent for regional airlines,
# so these always win over the remote dataset.
AIRLINE_OVERRIDES: dict[str, str] = {
    "FA": "SFR",  # FlySafair
    "SA": "SAA",  # South African Airways
    "MN": "CAW",  # kulula.com / Comair
    # Airlink. Digit prefixes are not rewritten in flight identifiers, so this
    # only labels the carrier of a logged 4Z flight.
    "4Z": "LNK",
}

_ACTIVE_VALUES = {"y", "yes", "true", "1"}


@dataclass(frozen=True)
class AirlineRecord:
    """Airline details from reference data."""

    iata: str
    icao: str
    name: str
    active: bool = True

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Optional["AirlineRecord"]:
        """Validate a loosely-shaped dataset row. Returns None when it has no usable codes."""
        fields = {str(k).lower(): v for k, v in row.items()}
        iata = _clean_code(fields.get("iata"))
        icao = _clean_code(fields.get("icao"))
        if not iata or not icao:
            return None
        return cls(
            iata=iata,
            icao=icao,
            name=str(fields.get("name") or "").strip(),
            active=_parse_active(fields.get("active")),
        )


def _clean_code(value: Any) -> str:
    if value is None:
        return ""
    code = str(value).strip().upper()
    if code in ("\\N", "N/A", "-"):
        return ""
    return code


def _parse_active(value: Any) -> bool:
    """Datasets encode the flag as "Y"/"N", booleans, or 0/1. Missing means active."""
    if value is None:
        return True
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _ACTIVE_VALUES


class AirlineTable:
    """Immutable IATA-indexed airline lookup."""

    def __init__(self, records: Iterable[AirlineRecord] = ()):
        self._records: tuple[AirlineRecord, ...] = tuple(records)
        index: dict[str, AirlineRecord] = {}
        for rec in self._records:
            if not rec.active:
                continue
            # First active record wins for duplicate IATA codes
            index.setdefault(rec.iata, rec)
        self._by_iata = index

    @classmethod
    def from_json(cls, payload: Any) -> "AirlineTable":
        """Build from the airline dataset (a JSON array of rows)."""
        if not isinstance(payload, list):
            if payload is not None:
                logger.warning("Airline dataset is not a list (got %s)", type(payload).__name__)
            return cls()
        records = []
        for row in payload:
            if not isinstance(row, Mapping):
                continue
            rec = AirlineRecord.from_row(row)
            if rec is not None:
                records.append(rec)
        return cls(records)

    @classmethod
    def fetch(cls, url: str = AIRLINES_URL, timeout: float = DEFAULT_TIMEOUT) -> "AirlineTable":
        """Download the dataset. Degrades to an empty table on failure."""
        table = cls.from_json(fetch_dataset(url, timeout=timeout))
        logger.info("Loaded %d airlines from %s", len(table), url)
        return table

    def __len__(self) -> int:
        return len(self._records)

    def get_by_iata(self, iata: str) -> Optional[AirlineRecord]:
        """Active airline for a 2-character IATA code, or None."""
        if not iata:
            return None
        return self._by_iata.get(iata.upper().strip())


class AirlineResolver(Protocol):
    """One strategy in the resolver chain."""

    def resolve(self, iata: str) -> Optional[str]:
        """Return a 3-character ICAO carrier code, or None to defer to the next strategy."""
        ...


class OverrideResolver:
    """Static prefix table; never touches the network."""

    def __init__(self, overrides: Optional[Mapping[str, str]] = None):
        table = AIRLINE_OVERRIDES if overrides is None else overrides
        self._overrides = {k.upper(): v.upper() for k, v in table.items()}

    def resolve(self, iata: str) -> Optional[str]:
        return self._overrides.get(iata.upper().strip())


class DatasetResolver:
    """Resolves against the public airline dataset, fetched on first use."""

    def __init__(
        self,
        table: Optional[AirlineTable] = None,
        url: str = AIRLINES_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self._table = table
        self.url = url
        self.timeout = timeout

    @property
    def table(self) -> AirlineTable:
        if self._table is None:
            self._table = AirlineTable.fetch(self.url, timeout=self.timeout)
        return self._table

    def resolve(self, iata: str) -> Optional[str]:
        rec = self.table.get_by_iata(iata)
        return rec.icao if rec else None


class ResolverChain:
    """First strategy to return a code wins."""

    def __init__(self, resolvers: Sequence[AirlineResolver]):
        self.resolvers = tuple(resolvers)

    @classmethod
    def default(cls, url: str = AIRLINES_URL, timeout: float = DEFAULT_TIMEOUT) -> "ResolverChain":
        return cls([OverrideResolver(), DatasetResolver(url=url, timeout=timeout)])

    def resolve(self, iata: str) -> Optional[str]:
        """Convert IATA 2-character airline code to ICAO 3-letter code. Returns None if not found."""
        if not iata or len(iata.strip()) != 2:
            return None
        for resolver in self.resolvers:
            code = resolver.resolve(iata)
            if code:
                return code
        logger.info("No ICAO code found for carrier %s", iata)
        return None
