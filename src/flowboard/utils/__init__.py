"""Utility functions."""

from .datetime import from_iso, now_utc, to_iso
from .slug import generate_filename, slugify

__all__ = [
    "from_iso",
    "generate_filename",
    "now_utc",
    "slugify",
    "to_iso",
]
