"""Data models for trip entry and the persisted logbook."""

import re
from dataclasses import asdict, dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional

from flightlog.lookup.ident import clean_ident
from flightlog.reference.airports import AirportRecord

_LEG_RE = re.compile(r"^(?P<body>[^@]+?)(?:@(?P<date>\d{4}-\d{2}-\d{2}))?$")


class LegState(str, Enum):
    PENDING = "pending"
    RESOLVED = "resolved"
    NEEDS_MANUAL = "needs_manual"
    FAILED = "failed"


@dataclass
class TripLeg:
    """One flight segment while it is being entered and reconciled."""

    flight_number: Optional[str] = None
    origin_code: Optional[str] = None
    destination_code: Optional[str] = None
    date: Optional[str] = None  # "YYYY-MM-DD"
    airline: Optional[str] = None
    distance_km: Optional[int] = None
    duration_min: Optional[int] = None
    origin: Optional[AirportRecord] = None
    destination: Optional[AirportRecord] = None
    error: Optional[str] = None
    state: LegState = LegState.PENDING

    def __post_init__(self):
        self.flight_number = clean_ident(self.flight_number) or None
        self.origin_code = clean_ident(self.origin_code) or None
        self.destination_code = clean_ident(self.destination_code) or None
        self.airline = clean_ident(self.airline) or None

    @classmethod
    def from_string(cls, spec: str) -> "TripLeg":
        """
        Parse 'FA600', 'CPT-JNB', 'FA600@2024-01-01' or 'CPT-JNB@2024-01-01'.
        """
        m = _LEG_RE.match((spec or "").strip())
        if not m:
            raise ValueError(f"Invalid leg: {spec!r}. Expected FLIGHT or ORIGIN-DEST, optionally @YYYY-MM-DD")
        body, leg_date = m.group("body").strip(), m.group("date")
        if leg_date:
            date.fromisoformat(leg_date)
        if "-" in body:
            parts = body.split("-")
            if len(parts) != 2 or not all(p.strip() for p in parts):
                raise ValueError(f"Invalid route in leg: {spec!r}. Expected ORIGIN-DEST (e.g. CPT-JNB)")
            return cls(origin_code=parts[0], destination_code=parts[1], date=leg_date)
        return cls(flight_number=body, date=leg_date)

    @property
    def has_lookup_ident(self) -> bool:
        """Identifier long enough to be worth querying the provider."""
        return bool(self.flight_number) and len(self.flight_number) > 2

    @property
    def is_resolved(self) -> bool:
        return self.origin is not None and self.destination is not None

    @property
    def needs_manual(self) -> bool:
        return self.state in (LegState.NEEDS_MANUAL, LegState.FAILED)

    def route(self) -> str:
        """Return route as ORIGIN-DESTINATION."""
        origin = self.origin.code if self.origin else (self.origin_code or "?")
        dest = self.destination.code if self.destination else (self.destination_code or "?")
        return f"{origin}-{dest}"


@dataclass
class Trip:
    """Ordered legs; a return trip gets a closing leg back to the first origin."""

    legs: List[TripLeg] = field(default_factory=list)
    is_return: bool = False

    def add_leg(self, leg: Optional[TripLeg] = None) -> TripLeg:
        """Append a leg, chaining its origin to the previous leg's destination."""
        leg = leg or TripLeg()
        if self.legs and not leg.origin_code and not leg.flight_number:
            leg.origin_code = self.legs[-1].destination_code
        self.legs.append(leg)
        return leg

    def return_leg(self) -> Optional[TripLeg]:
        """Leg from the last destination back to the first origin, or None."""
        if not self.is_return or not self.legs:
            return None
        first, last = self.legs[0], self.legs[-1]
        origin = last.destination.code if last.destination else last.destination_code
        dest = first.origin.code if first.origin else first.origin_code
        if not origin or not dest or origin == dest:
            return None
        if last.destination and first.origin:
            return TripLeg(origin=last.destination, destination=first.origin)
        return TripLeg(origin_code=origin, destination_code=dest)


@dataclass
class PersistedFlight:
    """Durable logbook record, one per completed leg."""

    date: str
    origin: str
    destination: str
    airline: Optional[str] = None
    flight_number: Optional[str] = None
    distance_km: int = 0
    duration_min: int = 0
    is_local: bool = False

    COLUMNS = (
        "date",
        "origin",
        "destination",
        "airline",
        "flight_number",
        "distance_km",
        "duration_min",
        "is_local",
    )

    def route(self) -> str:
        return f"{self.origin}-{self.destination}"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, row: Dict[str, Any]) -> "PersistedFlight":
        def _opt(v):
            if v is None or v != v or str(v).strip() == "":  # NaN from pandas
                return None
            return str(v)

        def _num(v):
            try:
                return int(float(v))
            except (TypeError, ValueError):
                return 0

        local = row.get("is_local")
        if isinstance(local, str):
            local = local.strip().lower() in ("true", "1", "yes")
        return cls(
            date=str(row.get("date", ""))[:10],
            origin=str(row.get("origin", "")),
            destination=str(row.get("destination", "")),
            airline=_opt(row.get("airline")),
            flight_number=_opt(row.get("flight_number")),
            distance_km=_num(row.get("distance_km")),
            duration_min=_num(row.get("duration_min")),
            is_local=bool(local) if local == local else False,
        )


@dataclass
class SaveResult:
    """Outcome of an all-or-nothing trip save."""

    saved: bool = False
    flights: List[PersistedFlight] = field(default_factory=list)
    errors: Dict[int, str] = field(default_factory=dict)
    legs: List[TripLeg] = field(default_factory=list)
