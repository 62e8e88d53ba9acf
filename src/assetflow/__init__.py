"""Declarative, toggle-driven front-end asset builds."""

__version__ = "0.1.0"
