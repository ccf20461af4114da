"""Reference data lookups for airports and airlines, plus route geometry."""

from flightlog.reference.airlines import (
    AIRLINE_OVERRIDES,
    AirlineRecord,
    AirlineTable,
    DatasetResolver,
    OverrideResolver,
    ResolverChain,
)
from flightlog.reference.airports import (
    SOUTH_AFRICA,
    AirportRecord,
    AirportTable,
    HomeMarket,
    home_market,
)
from flightlog.reference.geo import estimate_duration_min, haversine_km

__all__ = [
    "AIRLINE_OVERRIDES",
    "AirlineRecord",
    "AirlineTable",
    "AirportRecord",
    "AirportTable",
    "DatasetResolver",
    "HomeMarket",
    "OverrideResolver",
    "ResolverChain",
    "SOUTH_AFRICA",
    "estimate_duration_min",
    "haversine_km",
    "home_market",
]
