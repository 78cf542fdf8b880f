"""UberSearch - quota-aware meta search across third-party search APIs."""

__version__ = "1.0.0"
