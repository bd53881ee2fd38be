"""Constrained fantasy-football roster generation."""

__version__ = "0.1.0"
