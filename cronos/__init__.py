"""Cronos: interval routine runner."""

__version__ = "0.1.0"
