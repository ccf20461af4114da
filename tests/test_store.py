"""Unit tests for logbook persistence backends."""

from unittest.mock import MagicMock, patch

import pytest
import requests

from flightlog.config import Settings
from flightlog.errors import ConfigurationError, StoreError
from flightlog.logbook.models import PersistedFlight
from flightlog.logbook.store import (
    CsvFlightStore,
    FlightStore,
    SupabaseFlightStore,
    store_from_settings,
)


def _flight(day: str = "2024-01-01", origin: str = "CPT", destination: str = "JNB", **kw) -> PersistedFlight:
    return PersistedFlight(
        date=day,
        origin=origin,
        destination=destination,
        airline=kw.get("airline", "SFR"),
        flight_number=kw.get("flight_number", "FA600"),
        distance_km=kw.get("distance_km", 1271),
        duration_min=kw.get("duration_min", 120),
        is_local=kw.get("is_local", True),
    )


class TestCsvFlightStore:
    """Tests for the CSV backend."""

    def test_empty_when_missing(self, tmp_path) -> None:
        assert CsvFlightStore(tmp_path / "flights.csv").load() == []

    def test_append_then_load(self, tmp_path) -> None:
        store = CsvFlightStore(tmp_path / "flights.csv")
        store.append([_flight("2024-02-01"), _flight("2024-01-01", "JNB", "CPT")])
        store.append([_flight("2024-03-01", "CPT", "LHR", airline=None, flight_number=None, is_local=False)])

        flights = store.load()

        assert [f.date for f in flights] == ["2024-01-01", "2024-02-01", "2024-03-01"]
        assert flights[0].route() == "JNB-CPT"
        assert flights[0].airline == "SFR"
        assert flights[0].is_local is True
        assert flights[2].airline is None
        assert flights[2].flight_number is None
        assert flights[2].is_local is False
        assert flights[2].distance_km == 1271

    def test_header_written_once(self, tmp_path) -> None:
        path = tmp_path / "flights.csv"
        store = CsvFlightStore(path)
        store.append([_flight()])
        store.append([_flight()])
        lines = path.read_text().strip().splitlines()
        assert len(lines) == 3
        assert lines[0].startswith("date,origin,destination")

    def test_empty_batch_is_noop(self, tmp_path) -> None:
        path = tmp_path / "flights.csv"
        CsvFlightStore(path).append([])
        assert not path.exists()

    def test_satisfies_protocol(self, tmp_path) -> None:
        assert isinstance(CsvFlightStore(tmp_path / "f.csv"), FlightStore)


class TestSupabaseFlightStore:
    """Tests for the Supabase REST backend with mocked HTTP."""

    @patch("flightlog.logbook.store.requests.post")
    def test_append_posts_whole_batch(self, mock_post: MagicMock) -> None:
        store = SupabaseFlightStore("https://proj.supabase.co/", "anon-key")
        store.append([_flight(), _flight("2024-01-05", "JNB", "CPT")])

        mock_post.assert_called_once()
        args, kwargs = mock_post.call_args
        assert args[0] == "https://proj.supabase.co/rest/v1/flights"
        assert len(kwargs["json"]) == 2
        assert kwargs["json"][0]["origin"] == "CPT"
        assert kwargs["json"][0]["distance_km"] == 1271
        assert kwargs["headers"]["apikey"] == "anon-key"
        assert kwargs["headers"]["Authorization"] == "Bearer anon-key"

    @patch("flightlog.logbook.store.requests.post")
    def test_append_failure_raises_store_error(self, mock_post: MagicMock) -> None:
        mock_post.return_value.raise_for_status.side_effect = requests.HTTPError("409")
        with pytest.raises(StoreError):
            SupabaseFlightStore("https://proj.supabase.co", "k").append([_flight()])

    @patch("flightlog.logbook.store.requests.get")
    def test_load(self, mock_get: MagicMock) -> None:
        mock_get.return_value.raise_for_status = MagicMock()
        mock_get.return_value.json.return_value = [
            {"id": 1, **_flight().to_dict()},
        ]
        flights = SupabaseFlightStore("https://proj.supabase.co", "k").load()

        assert flights == [_flight()]
        assert mock_get.call_args[1]["params"] == {"select": "*", "order": "date.asc"}


class TestStoreFromSettings:
    """Tests for backend selection."""

    def test_csv(self, tmp_path) -> None:
        store = store_from_settings(Settings(csv_path=str(tmp_path / "x.csv")))
        assert isinstance(store, CsvFlightStore)

    def test_supabase(self) -> None:
        store = store_from_settings(Settings(store="supabase", supabase_url="https://p.supabase.co", supabase_key="k"))
        assert isinstance(store, SupabaseFlightStore)

    def test_supabase_requires_credentials(self) -> None:
        with pytest.raises(ConfigurationError):
            store_from_settings(Settings(store="supabase"))

    def test_unknown_backend(self) -> None:
        with pytest.raises(ConfigurationError):
            store_from_settings(Settings(store="mongo"))
