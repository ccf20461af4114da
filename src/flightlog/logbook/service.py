"""Logbook service - leg reconciliation, batch saves, and history."""

import logging
import re
from datetime import date
from typing import List, Optional, Set

from flightlog.config import Settings
from flightlog.errors import BadInputError, ConfigurationError, FlightLogError, LookupFailure
from flightlog.logbook.models import LegState, PersistedFlight, SaveResult, Trip, TripLeg
from flightlog.logbook.store import FlightStore
from flightlog.lookup.aeroapi import AeroAPIClient, FlightStatus
from flightlog.lookup.ident import NormalizedIdent, normalize_ident
from flightlog.reference.airlines import AirlineResolver, ResolverChain
from flightlog.reference.airports import SOUTH_AFRICA, AirportTable, HomeMarket, home_market
from flightlog.reference.geo import estimate_duration_min, haversine_km

logger = logging.getLogger(__name__)

_CARRIER_RE = re.compile(r"^([A-Z]{3}|[A-Z0-9]{2})\d")


class LogbookService:
    """Reconciles entered legs against the flight provider and persists whole trips."""

    def __init__(
        self,
        client: AeroAPIClient,
        airports: AirportTable,
        resolver: AirlineResolver,
        store: Optional[FlightStore] = None,
        home: HomeMarket = SOUTH_AFRICA,
        today: Optional[date] = None,
    ):
        self.client = client
        self.airports = airports
        self.resolver = resolver
        self.store = store
        self.home = home
        self._today = today

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None, store: Optional[FlightStore] = None) -> "LogbookService":
        """Build a session: reference tables are fetched here, once."""
        settings = settings or Settings.from_env()
        return cls(
            client=AeroAPIClient(
                settings.flightaware_api_key,
                base_url=settings.aeroapi_base_url,
                timeout=settings.http_timeout,
            ),
            airports=AirportTable.fetch(settings.airports_url, timeout=settings.http_timeout),
            resolver=ResolverChain.default(settings.airlines_url, timeout=settings.http_timeout),
            store=store,
            home=home_market(settings.home_country),
        )

    @property
    def today(self) -> date:
        return self._today or date.today()

    def lookup_flight(self, ident: Optional[str]) -> tuple[NormalizedIdent, FlightStatus]:
        """Normalize the identifier, then query the provider."""
        normalized = normalize_ident(ident, self.resolver)
        return normalized, self.client.lookup(normalized.ident)

    def reconcile_leg(self, leg: TripLeg) -> TripLeg:
        """Fill in a leg from lookup, manual entry, and derived geometry."""
        # Records carried over from an earlier reconciliation are trusted as-is
        trusted: Set[str] = set()
        if leg.origin is not None and not leg.origin_code:
            leg.origin_code = leg.origin.code
            trusted.add("origin")
        if leg.destination is not None and not leg.destination_code:
            leg.destination_code = leg.destination.code
            trusted.add("destination")
        leg.origin = leg.destination = None
        leg.state = LegState.PENDING

        failure: Optional[FlightLogError] = None
        fatal = False
        if leg.has_lookup_ident:
            normalized = normalize_ident(leg.flight_number, self.resolver)
            if not leg.airline and normalized.airline:
                leg.airline = normalized.airline
            try:
                status = self.client.lookup(normalized.ident)
            except LookupFailure as e:
                logger.warning("Lookup for %s failed: %s", leg.flight_number, e)
                failure = e
            except FlightLogError as e:
                logger.error("Lookup for %s could not run: %s", leg.flight_number, e)
                failure, fatal = e, True
            else:
                trusted |= self._apply_status(leg, status)
                leg.error = None

        if leg.flight_number and not leg.airline:
            m = _CARRIER_RE.match(leg.flight_number)
            if m:
                carrier = m.group(1)
                if len(carrier) == 2:
                    carrier = self.resolver.resolve(carrier) or carrier
                leg.airline = carrier

        missing = self._resolve_endpoints(leg, trusted)
        if missing:
            if failure is not None:
                leg.error = f"{failure}. Enter origin and destination manually."
                leg.state = LegState.FAILED if fatal else LegState.NEEDS_MANUAL
            else:
                leg.error = missing
                leg.state = LegState.NEEDS_MANUAL
            return leg

        if leg.distance_km is None and leg.origin.has_coordinates and leg.destination.has_coordinates:
            leg.distance_km = haversine_km(
                leg.origin.latitude,
                leg.origin.longitude,
                leg.destination.latitude,
                leg.destination.longitude,
            )
        if leg.duration_min is None and leg.distance_km is not None:
            leg.duration_min = estimate_duration_min(leg.distance_km)

        leg.error = None
        leg.state = LegState.RESOLVED
        return leg

    def _apply_status(self, leg: TripLeg, status: FlightStatus) -> Set[str]:
        """Fill gaps from the provider. Returns the endpoints it supplied."""
        supplied = set()
        if not leg.origin_code and status.origin:
            leg.origin_code = status.origin
            supplied.add("origin")
        if not leg.destination_code and status.destination:
            leg.destination_code = status.destination
            supplied.add("destination")
        if leg.duration_min is None:
            leg.duration_min = status.best_duration
        if not leg.date and status.departure_date:
            leg.date = status.departure_date
        return supplied

    def _resolve_endpoints(self, leg: TripLeg, trusted: Set[str]) -> Optional[str]:
        """Resolve both codes to airport records. Returns an error message, or None."""
        if not leg.origin_code or not leg.destination_code:
            if leg.flight_number:
                return f"Could not resolve route for {leg.flight_number}. Enter origin and destination manually."
            return "Enter a flight number, or origin and destination."
        leg.origin = self.airports.resolve(leg.origin_code, allow_bare="origin" in trusted)
        leg.destination = self.airports.resolve(leg.destination_code, allow_bare="destination" in trusted)
        unknown = [
            code
            for code, rec in ((leg.origin_code, leg.origin), (leg.destination_code, leg.destination))
            if rec is None
        ]
        if unknown:
            leg.origin = leg.destination = None
            return f"Unknown airport code: {', '.join(unknown)}"
        return None

    def reconcile(self, trip: Trip) -> List[TripLeg]:
        """
        Reconcile every leg in order, then the closing leg of a return trip.

        A stopover without an origin or flight number departs from where the
        previous leg landed, which is only known once that leg is reconciled.
        """
        legs: List[TripLeg] = []
        for leg in trip.legs:
            if legs and not leg.origin_code and leg.origin is None and not leg.flight_number:
                prev = legs[-1]
                if prev.destination is not None:
                    leg.origin = prev.destination
                else:
                    leg.origin_code = prev.destination_code
            legs.append(self.reconcile_leg(leg))
        closing = trip.return_leg()
        if closing is not None:
            legs.append(self.reconcile_leg(closing))
        return legs

    def to_flight(self, leg: TripLeg) -> PersistedFlight:
        if not leg.is_resolved:
            raise ValueError(f"Leg {leg.route()} is not resolved")
        return PersistedFlight(
            date=leg.date or self.today.isoformat(),
            origin=leg.origin.code,
            destination=leg.destination.code,
            airline=leg.airline,
            flight_number=leg.flight_number,
            distance_km=leg.distance_km or 0,
            duration_min=leg.duration_min or 0,
            is_local=self.home.is_local_flight(leg.origin.code, leg.destination.code, self.airports),
        )

    def save_trip(self, trip: Trip) -> SaveResult:
        """Persist every leg, or nothing if any leg still needs manual input."""
        if self.store is None:
            raise ConfigurationError("No flight store configured")
        if not trip.legs:
            raise BadInputError("Trip has no legs")
        legs = self.reconcile(trip)
        errors = {
            i: leg.error or "Leg could not be reconciled"
            for i, leg in enumerate(legs)
            if leg.state != LegState.RESOLVED
        }
        if errors:
            logger.warning("Trip not saved: %d of %d legs need attention", len(errors), len(legs))
            return SaveResult(saved=False, errors=errors, legs=legs)

        flights = [self.to_flight(leg) for leg in legs]
        self.store.append(flights)
        logger.info("Saved trip with %d legs", len(flights))
        return SaveResult(saved=True, flights=flights, legs=legs)

    def history(self) -> List[PersistedFlight]:
        """Persisted flights, newest first."""
        if self.store is None:
            raise ConfigurationError("No flight store configured")
        return sorted(self.store.load(), key=lambda f: f.date, reverse=True)
