"""Storefront order placement backend."""

__version__ = "0.1.0"
