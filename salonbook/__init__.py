"""Salon appointment scheduling and reservation backend."""

__version__ = "0.1.0"
