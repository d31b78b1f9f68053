"""Idempotent image fetching and content sniffing."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

import requests
from filetype import guess

from .config import DEFAULT_TIMEOUT
from .models import FetchResult, FetchStatus
from .utils import DEFAULT_FILE_MODE

logger = logging.getLogger("catalog_assets")

PARTIAL_SUFFIX = ".part"


def detect_image_format(data: bytes) -> Optional[str]:
    """Detect image type using filetype; returns lowercase extension."""
    kind = guess(data)
    if kind and kind.mime.startswith("image/"):
        ext = kind.extension.lower()
        if ext == "jpeg":
            return "jpg"
        return ext
    return None


def _write_atomically(target: Path, data: bytes) -> None:
    # Each writer gets its own temp file; concurrent writers of one target
    # each replace it with identical bytes.
    partial = None
    try:
        with tempfile.NamedTemporaryFile(
            dir=target.parent,
            prefix=f".{target.name}.",
            suffix=PARTIAL_SUFFIX,
            delete=False,
        ) as handle:
            partial = Path(handle.name)
            handle.write(data)
        os.chmod(partial, DEFAULT_FILE_MODE)
        os.replace(partial, target)
    except OSError:
        if partial is not None:
            partial.unlink(missing_ok=True)
        raise


def fetch_asset(
    session: requests.Session,
    url: str,
    target: Path,
    timeout: float = DEFAULT_TIMEOUT,
    require_image: bool = False,
) -> FetchResult:
    """Download ``url`` into ``target`` unless the file is already present.

    Exactly one request is made per call. Every problem is folded into a
    ``FAILED`` result so one bad asset never disturbs the rest of the batch.
    """
    if target.exists():
        return FetchResult(FetchStatus.SKIPPED, url, target)

    try:
        resp = session.get(url, timeout=timeout)
    except requests.RequestException as exc:
        return FetchResult(FetchStatus.FAILED, url, target, reason=str(exc))

    if not resp.ok:
        return FetchResult(
            FetchStatus.FAILED, url, target, reason=f"HTTP {resp.status_code}"
        )

    data = resp.content
    if require_image and detect_image_format(data) is None:
        content_type = resp.headers.get("Content-Type", "")
        return FetchResult(
            FetchStatus.FAILED,
            url,
            target,
            reason=f"unsupported content (Content-Type={content_type or 'unknown'})",
        )

    try:
        _write_atomically(target, data)
    except OSError as exc:
        logger.debug("Write to %s failed", target, exc_info=True)
        return FetchResult(FetchStatus.FAILED, url, target, reason=str(exc))

    return FetchResult(FetchStatus.DOWNLOADED, url, target)
