"""Append-only persistence for logbook flights."""

import logging
from pathlib import Path
from typing import List, Optional, Protocol, Sequence, runtime_checkable

import pandas as pd
import requests

from flightlog.config import DEFAULT_TIMEOUT, Settings
from flightlog.errors import ConfigurationError, StoreError
from flightlog.logbook.models import PersistedFlight

logger = logging.getLogger(__name__)

TABLE = "flights"


@runtime_checkable
class FlightStore(Protocol):
    """Protocol for pluggable logbook backends."""

    def append(self, flights: Sequence[PersistedFlight]) -> None:
        """Insert a whole batch in one operation. Never updates or deletes."""
        ...

    def load(self) -> List[PersistedFlight]:
        """All persisted flights, oldest first."""
        ...


class CsvFlightStore:
    """Logbook kept in a single CSV file."""

    def __init__(self, path):
        self.path = Path(path)

    def append(self, flights: Sequence[PersistedFlight]) -> None:
        if not flights:
            return
        df = pd.DataFrame([f.to_dict() for f in flights], columns=list(PersistedFlight.COLUMNS))
        write_header = not self.path.exists() or self.path.stat().st_size == 0
        self.path.parent.mkdir(parents=True, exist_ok=True)
        try:
            df.to_csv(self.path, mode="a", header=write_header, index=False)
        except OSError as e:
            raise StoreError(f"Could not write {self.path}: {e}") from e
        logger.info("Appended %d flights to %s", len(flights), self.path)

    def load(self) -> List[PersistedFlight]:
        if not self.path.exists() or self.path.stat().st_size == 0:
            return []
        try:
            df = pd.read_csv(self.path, dtype={"date": str, "airline": str, "flight_number": str})
        except (OSError, pd.errors.ParserError) as e:
            raise StoreError(f"Could not read {self.path}: {e}") from e
        flights = [PersistedFlight.from_dict(row) for row in df.to_dict(orient="records")]
        return sorted(flights, key=lambda f: f.date)


class SupabaseFlightStore:
    """Logbook in a Supabase `flights` table, via its PostgREST HTTP interface."""

    def __init__(self, url: str, key: str, table: str = TABLE, timeout: float = DEFAULT_TIMEOUT):
        self.base_url = f"{url.rstrip('/')}/rest/v1/{table}"
        self.timeout = timeout
        self._headers = {
            "apikey": key,
            "Authorization": f"Bearer {key}",
            "Content-Type": "application/json",
        }

    def append(self, flights: Sequence[PersistedFlight]) -> None:
        if not flights:
            return
        headers = {**self._headers, "Prefer": "return=minimal"}
        payload = [f.to_dict() for f in flights]
        try:
            resp = requests.post(self.base_url, json=payload, headers=headers, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise StoreError(f"Supabase insert failed: {e}") from e
        logger.info("Inserted %d flights into Supabase", len(flights))

    def load(self) -> List[PersistedFlight]:
        params = {"select": "*", "order": "date.asc"}
        try:
            resp = requests.get(self.base_url, params=params, headers=self._headers, timeout=self.timeout)
            resp.raise_for_status()
            rows = resp.json()
        except requests.RequestException as e:
            raise StoreError(f"Supabase query failed: {e}") from e
        except ValueError as e:
            raise StoreError("Supabase returned invalid JSON") from e
        return [PersistedFlight.from_dict(row) for row in rows or []]


def store_from_settings(settings: Optional[Settings] = None) -> FlightStore:
    """Pick the backend named by FLIGHTLOG_STORE."""
    settings = settings or Settings.from_env()
    if settings.store == "supabase":
        if not settings.supabase_url or not settings.supabase_key:
            raise ConfigurationError("SUPABASE_URL and SUPABASE_KEY are required for the supabase store")
        return SupabaseFlightStore(settings.supabase_url, settings.supabase_key, timeout=settings.http_timeout)
    if settings.store == "csv":
        return CsvFlightStore(settings.csv_path)
    raise ConfigurationError(f"Unknown FLIGHTLOG_STORE: {settings.store!r} (expected 'csv' or 'supabase')")
