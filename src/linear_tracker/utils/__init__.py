"""Utility functions."""

from .datetime import from_iso, now_iso, now_utc, to_iso

__all__ = ["from_iso", "now_iso", "now_utc", "to_iso"]
