"""Flight logbook package."""

from flightlog.logbook.models import (
    LegState,
    PersistedFlight,
    SaveResult,
    Trip,
    TripLeg,
)
from flightlog.logbook.service import LogbookService
from flightlog.logbook.store import CsvFlightStore, FlightStore, SupabaseFlightStore

__all__ = [
    "CsvFlightStore",
    "FlightStore",
    "LegState",
    "LogbookService",
    "PersistedFlight",
    "SaveResult",
    "SupabaseFlightStore",
    "Trip",
    "TripLeg",
]
