"""Canonical CDN URL derivation for catalog image assets."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from .config import PipelineConfig
from .models import Record
from .utils import brand_slug

logger = logging.getLogger("catalog_assets")


def build_image_url(
    base_url: str,
    images_root: str,
    brand: Optional[str],
    local_filename: str,
) -> str:
    """Compose ``<base>/<images_root>/<slug(brand)>/<filename>``."""
    return "/".join(
        (
            base_url.rstrip("/"),
            images_root.strip("/"),
            brand_slug(brand),
            local_filename,
        )
    )


def rewrite_image_urls(records: Iterable[Record], config: PipelineConfig) -> int:
    """Set ``rewritten_image_url`` on every record that carries a source image."""
    rewritten = 0
    for record in records:
        if not record.has_asset:
            record.rewritten_image_url = None
            continue
        record.rewritten_image_url = build_image_url(
            config.base_url,
            config.images_root,
            record.brand,
            record.local_filename,
        )
        rewritten += 1
    logger.debug("Rewrote %d image URLs", rewritten)
    return rewritten
