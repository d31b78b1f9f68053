"""Utility helpers for brand normalization and path handling."""

from __future__ import annotations

import os
from typing import Optional


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


# Mode a plain open() would give a new file; temp files start at 0600.
DEFAULT_FILE_MODE = 0o666 & ~_current_umask()


def brand_slug(brand: Optional[str]) -> str:
    """Turn a brand name into the directory segment used on disk and in URLs.

    Only spaces and apostrophes are touched; other punctuation passes through.
    A missing brand maps to an empty segment.
    """
    if not brand:
        return ""
    return brand.replace(" ", "_").replace("'", "").lower()


def target_filename(local_filename: str, content_hash: str) -> str:
    """Pick the on-disk filename, falling back to ``<hash>.jpg``."""
    if local_filename:
        return local_filename
    return f"{content_hash}.jpg"
