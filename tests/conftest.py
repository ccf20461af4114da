"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

import pytest

# Ensure src is on path when running tests without installed package
src = Path(__file__).resolve().parent.parent / "src"
if src.exists() and str(src) not in sys.path:
    sys.path.insert(0, str(src))

from flightlog.reference.airports import AirportTable  # noqa: E402

# Rows shaped like the mwgg/Airports dataset (object keyed by ICAO)
AIRPORTS_JSON = {
    "FACT": {
        "icao": "FACT", "iata": "CPT", "name": "Cape Town International Airport",
        "city": "Cape Town", "country": "ZA", "lat": -33.9648, "lon": 18.6017,
    },
    "FAOR": {
        "icao": "FAOR", "iata": "JNB", "name": "OR Tambo International Airport",
        "city": "Johannesburg", "country": "ZA", "lat": -26.1392, "lon": 28.2460,
    },
    "FALE": {
        "icao": "FALE", "iata": "DUR", "name": "King Shaka International Airport",
        "city": "Durban", "country": "ZA", "lat": -29.6144, "lon": 31.1197,
    },
    "EGLL": {
        "icao": "EGLL", "iata": "LHR", "name": "London Heathrow Airport",
        "city": "London", "country": "GB", "lat": 51.4706, "lon": -0.4619,
    },
    "OMDB": {
        "icao": "OMDB", "iata": "DXB", "name": "Dubai International Airport",
        "city": "Dubai", "country": "AE", "lat": 25.2528, "lon": 55.3644,
    },
}


@pytest.fixture
def airports() -> AirportTable:
    return AirportTable.from_json(AIRPORTS_JSON)
