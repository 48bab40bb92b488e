"""Route group exports."""

from . import cache, health, products, search

__all__ = ["products", "search", "cache", "health"]
