"""Flight number normalization and flight status lookup."""

from flightlog.lookup.aeroapi import AeroAPIClient, FlightStatus
from flightlog.lookup.ident import NormalizedIdent, normalize_ident

__all__ = ["AeroAPIClient", "FlightStatus", "NormalizedIdent", "normalize_ident"]
