"""Contractor matching and scoring for the event marketplace."""

__version__ = "0.1.0"
