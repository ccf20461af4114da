"""Runtime settings loaded from the environment (and `.env`, if present)."""

import logging
import os
import sys
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

AEROAPI_BASE_URL = "https://aeroapi.flightaware.com/aeroapi"
AIRPORTS_URL = "https://raw.githubusercontent.com/mwgg/Airports/master/airports.json"
AIRLINES_URL = "https://raw.githubusercontent.com/nprail/airline-codes/master/airlines.json"
DEFAULT_CSV_PATH = "flights.csv"
DEFAULT_TIMEOUT = 30.0

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class Settings:
    """Application settings. Build with `Settings.from_env()`."""

    flightaware_api_key: Optional[str] = None
    aeroapi_base_url: str = AEROAPI_BASE_URL
    airports_url: str = AIRPORTS_URL
    airlines_url: str = AIRLINES_URL
    http_timeout: float = DEFAULT_TIMEOUT
    store: str = "csv"
    csv_path: str = DEFAULT_CSV_PATH
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    home_country: str = "ZA"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "Settings":
        if dotenv:
            load_dotenv()
        return cls(
            flightaware_api_key=os.getenv("FLIGHTAWARE_API_KEY", "").strip() or None,
            aeroapi_base_url=os.getenv("AEROAPI_BASE_URL", AEROAPI_BASE_URL).rstrip("/"),
            airports_url=os.getenv("AIRPORTS_URL", AIRPORTS_URL),
            airlines_url=os.getenv("AIRLINES_URL", AIRLINES_URL),
            http_timeout=float(os.getenv("HTTP_TIMEOUT", str(DEFAULT_TIMEOUT))),
            store=os.getenv("FLIGHTLOG_STORE", "csv").strip().lower(),
            csv_path=os.getenv("FLIGHTLOG_CSV", DEFAULT_CSV_PATH),
            supabase_url=os.getenv("SUPABASE_URL", "").strip() or None,
            supabase_key=os.getenv("SUPABASE_KEY", "").strip() or None,
            home_country=os.getenv("HOME_COUNTRY", "ZA").strip().upper(),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )


_handler: Optional[logging.Handler] = None


def configure_logging(level: str = "INFO") -> None:
    """Install a single stderr handler on the root logger (idempotent)."""
    global _handler
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    if _handler is not None and _handler in root.handlers:
        return
    _handler = logging.StreamHandler(sys.stderr)
    _handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(_handler)
