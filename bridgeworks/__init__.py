"""Bridgeworks — feature request lifecycle and revenue intelligence."""

__version__ = "0.1.0"
