"""Aggregation bridge in front of the QLStats ranking API."""

__version__ = "1.0.0"
