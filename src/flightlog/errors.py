"""Error taxonomy for lookups, reconciliation, and persistence."""

from typing import Optional


class FlightLogError(Exception):
    """Base class. `code` is a stable identifier callers can branch on."""

    code = "internal"
    http_status = 500

    def to_dict(self) -> dict:
        return {"error": str(self), "code": self.code}


class BadInputError(FlightLogError):
    """A required field was not supplied."""

    code = "bad_input"
    http_status = 400


class ConfigurationError(FlightLogError):
    """A required setting (e.g. the provider API key) is missing."""

    code = "configuration"
    http_status = 500


class LookupFailure(FlightLogError):
    """Recoverable lookup failure: the caller falls back to manual entry."""


class NotFoundError(LookupFailure):
    code = "not_found"
    http_status = 404


class ProviderError(LookupFailure):
    """The flight-status provider answered with a non-success status."""

    code = "provider_error"

    def __init__(self, status_code: int, message: Optional[str] = None):
        self.status_code = status_code
        super().__init__(message or f"Provider error (HTTP {status_code})")

    @property
    def http_status(self) -> int:
        return self.status_code


class NetworkFailure(LookupFailure):
    code = "network_failure"
    http_status = 502


class InternalError(FlightLogError):
    code = "internal"
    http_status = 500


class StoreError(FlightLogError):
    """Persistence backend rejected or failed a read or write."""

    code = "store"
    http_status = 500
