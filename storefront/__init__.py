"""Storefront core - cart, inventory, shipping and order logic."""

__version__ = "0.1.0"
