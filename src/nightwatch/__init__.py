"""Nightwatch - heuristic risk reports for pull requests."""

__version__ = "1.2.0"
