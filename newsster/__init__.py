"""Newsster: reactive paginated article feed."""

__version__ = "0.1.0"
