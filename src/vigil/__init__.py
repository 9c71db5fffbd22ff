"""Vigil - visit monitoring dashboard."""

__version__ = "0.1.0"
