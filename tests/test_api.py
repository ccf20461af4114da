"""Tests for the /api/flight_lookup endpoint."""

from unittest.mock import MagicMock

import pytest

from flightlog.api import create_app
from flightlog.config import Settings
from flightlog.errors import NetworkFailure, NotFoundError, ProviderError
from flightlog.lookup.aeroapi import FlightStatus
from flightlog.reference.airlines import OverrideResolver

STATUS = FlightStatus(
    origin="FACT",
    destination="FAOR",
    duration=90,
    actual_duration=150,
    departure_date="2024-01-01",
)


@pytest.fixture
def client_mock() -> MagicMock:
    mock = MagicMock()
    mock.api_key = "secret"
    mock.lookup.return_value = STATUS
    return mock


@pytest.fixture
def http(client_mock: MagicMock):
    app = create_app(settings=Settings(), client=client_mock, resolver=OverrideResolver())
    app.config["TESTING"] = True
    return app.test_client()


class TestFlightLookupEndpoint:
    """Tests for GET /api/flight_lookup."""

    def test_success(self, http, client_mock: MagicMock) -> None:
        resp = http.get("/api/flight_lookup?ident=fa600")
        assert resp.status_code == 200
        assert resp.get_json() == {
            "origin": "FACT",
            "destination": "FAOR",
            "duration": 90,
            "actual_duration": 150,
            "departure_date": "2024-01-01",
        }
        client_mock.lookup.assert_called_once_with("SFR600")

    def test_missing_ident(self, http, client_mock: MagicMock) -> None:
        resp = http.get("/api/flight_lookup")
        assert resp.status_code == 400
        assert "error" in resp.get_json()
        client_mock.lookup.assert_not_called()

    def test_missing_api_key(self, http, client_mock: MagicMock) -> None:
        client_mock.api_key = None
        resp = http.get("/api/flight_lookup?ident=FA600")
        assert resp.status_code == 500
        client_mock.lookup.assert_not_called()

    def test_not_found(self, http, client_mock: MagicMock) -> None:
        client_mock.lookup.side_effect = NotFoundError("Flight SFR600 not found")
        resp = http.get("/api/flight_lookup?ident=FA600")
        assert resp.status_code == 404
        assert resp.get_json()["error"] == "Flight SFR600 not found"

    def test_provider_status_passed_through(self, http, client_mock: MagicMock) -> None:
        client_mock.lookup.side_effect = ProviderError(429)
        resp = http.get("/api/flight_lookup?ident=FA600")
        assert resp.status_code == 429

    def test_network_failure(self, http, client_mock: MagicMock) -> None:
        client_mock.lookup.side_effect = NetworkFailure("offline")
        assert http.get("/api/flight_lookup?ident=FA600").status_code == 502

    def test_unexpected_error(self, http, client_mock: MagicMock) -> None:
        client_mock.lookup.side_effect = RuntimeError("boom")
        resp = http.get("/api/flight_lookup?ident=FA600")
        assert resp.status_code == 500
        assert resp.get_json() == {"error": "Internal Server Error"}

    def test_health(self, http) -> None:
        assert http.get("/health").get_json() == {"status": "ok"}
