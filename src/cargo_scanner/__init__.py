"""Cargo value scanner - cargo valuation and sell-location ranking."""

__version__ = "0.1.0"
