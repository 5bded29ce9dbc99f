"""Lore Graph - query, compare and explore a typed lore dataset."""

__version__ = "0.1.0"
