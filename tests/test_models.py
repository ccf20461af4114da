"""Unit tests for logbook models."""

import pytest

from flightlog.logbook.models import LegState, PersistedFlight, Trip, TripLeg
from flightlog.reference.airports import AirportRecord


class TestTripLeg:
    """Tests for TripLeg."""

    def test_inputs_are_cleaned(self) -> None:
        leg = TripLeg(flight_number=" fa 600 ", origin_code="cpt", destination_code="", airline="")
        assert leg.flight_number == "FA600"
        assert leg.origin_code == "CPT"
        assert leg.destination_code is None
        assert leg.airline is None
        assert leg.state == LegState.PENDING

    def test_from_string_flight(self) -> None:
        leg = TripLeg.from_string("fa600")
        assert leg.flight_number == "FA600"
        assert leg.origin_code is None
        assert leg.date is None

    def test_from_string_route_with_date(self) -> None:
        leg = TripLeg.from_string("CPT-JNB@2024-01-01")
        assert leg.flight_number is None
        assert (leg.origin_code, leg.destination_code) == ("CPT", "JNB")
        assert leg.date == "2024-01-01"

    def test_from_string_flight_with_date(self) -> None:
        leg = TripLeg.from_string("SFR600@2024-03-05")
        assert leg.flight_number == "SFR600"
        assert leg.date == "2024-03-05"

    @pytest.mark.parametrize("spec", ["", "CPT-JNB-DUR", "CPT-", "FA600@2024-13-01", "FA600@yesterday"])
    def test_from_string_invalid(self, spec: str) -> None:
        with pytest.raises(ValueError):
            TripLeg.from_string(spec)

    def test_has_lookup_ident(self) -> None:
        assert TripLeg(flight_number="FA6").has_lookup_ident
        assert not TripLeg(flight_number="FA").has_lookup_ident
        assert not TripLeg().has_lookup_ident

    def test_route(self) -> None:
        leg = TripLeg(origin_code="CPT")
        assert leg.route() == "CPT-?"
        leg.destination = AirportRecord(iata="JNB", icao="FAOR")
        assert leg.route() == "CPT-JNB"


class TestTrip:
    """Tests for stopover chaining and return legs."""

    def test_add_leg_chains_origin(self) -> None:
        trip = Trip()
        trip.add_leg(TripLeg(origin_code="CPT", destination_code="JNB"))
        second = trip.add_leg(TripLeg(destination_code="LHR"))
        assert second.origin_code == "JNB"

    def test_add_leg_keeps_explicit_origin(self) -> None:
        trip = Trip()
        trip.add_leg(TripLeg(origin_code="CPT", destination_code="JNB"))
        second = trip.add_leg(TripLeg(origin_code="DUR", destination_code="LHR"))
        assert second.origin_code == "DUR"

    def test_add_leg_does_not_chain_flight_numbers(self) -> None:
        trip = Trip()
        trip.add_leg(TripLeg(origin_code="CPT", destination_code="JNB"))
        second = trip.add_leg(TripLeg(flight_number="BA56"))
        assert second.origin_code is None

    def test_return_leg(self) -> None:
        trip = Trip(is_return=True)
        trip.add_leg(TripLeg(origin_code="CPT", destination_code="JNB"))
        trip.add_leg(TripLeg(destination_code="LHR"))
        closing = trip.return_leg()
        assert (closing.origin_code, closing.destination_code) == ("LHR", "CPT")
        assert closing.flight_number is None
        assert closing.date is None

    def test_no_return_leg_for_one_way(self) -> None:
        trip = Trip(is_return=False)
        trip.add_leg(TripLeg(origin_code="CPT", destination_code="JNB"))
        assert trip.return_leg() is None

    def test_no_return_leg_without_endpoints(self) -> None:
        trip = Trip(is_return=True)
        trip.add_leg(TripLeg(flight_number="FA600"))
        assert trip.return_leg() is None


class TestPersistedFlight:
    """Tests for PersistedFlight serialization."""

    def test_round_trip_dict(self) -> None:
        f = PersistedFlight(
            date="2024-01-01", origin="CPT", destination="JNB",
            airline="SFR", flight_number="FA600", distance_km=1271, duration_min=150, is_local=True,
        )
        assert PersistedFlight.from_dict(f.to_dict()) == f

    def test_from_dict_tolerates_csv_values(self) -> None:
        row = {
            "date": "2024-01-01T00:00:00",
            "origin": "CPT",
            "destination": "LHR",
            "airline": float("nan"),
            "flight_number": "",
            "distance_km": "9689.0",
            "duration_min": None,
            "is_local": "False",
        }
        f = PersistedFlight.from_dict(row)
        assert f.date == "2024-01-01"
        assert f.airline is None
        assert f.flight_number is None
        assert f.distance_km == 9689
        assert f.duration_min == 0
        assert f.is_local is False
