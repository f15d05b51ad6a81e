"""Storefront cart: stock-checked shopping cart state with local persistence."""

__version__ = "1.0.0"
