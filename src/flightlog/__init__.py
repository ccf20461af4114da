"""Personal flight logbook: trip reconciliation, persistence, and statistics."""

__version__ = "0.1.0"
