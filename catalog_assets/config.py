"""Configuration objects and constants for the asset pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

DEFAULT_BASE_URL = "https://portal.framescloud.optiserver.co.uk"
DEFAULT_IMAGES_ROOT = "images"
DEFAULT_MAX_WORKERS = 8
DEFAULT_TIMEOUT = 30.0
USER_AGENT = "catalog-assets/0.1"

# Catalog keys the pipeline reads; everything else is carried through untouched.
SOURCE_IMAGE_KEY = "$iFrame_IMAGE"
BRAND_KEY = "$iBrand"
LOCAL_FILENAME_KEY = "localfilename"
CONTENT_HASH_KEY = "dbhash"

FETCH_FROM_REWRITTEN = "rewritten"
FETCH_FROM_SOURCE = "source"


@dataclass
class PipelineConfig:
    """Top-level settings that control URL rewriting and downloading."""

    output_root: Path
    base_url: str = DEFAULT_BASE_URL
    images_root: str = DEFAULT_IMAGES_ROOT
    max_workers: int = DEFAULT_MAX_WORKERS
    timeout: float = DEFAULT_TIMEOUT
    fetch_from: str = FETCH_FROM_REWRITTEN
    require_image: bool = False

    def __post_init__(self) -> None:
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {self.max_workers}")
        if self.fetch_from not in (FETCH_FROM_REWRITTEN, FETCH_FROM_SOURCE):
            raise ValueError(f"Unknown fetch_from value: {self.fetch_from!r}")
