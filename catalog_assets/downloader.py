"""High-level orchestration for fetching catalog assets concurrently."""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import requests
from requests.adapters import HTTPAdapter

from .config import FETCH_FROM_SOURCE, USER_AGENT, PipelineConfig
from .fetcher import fetch_asset
from .models import (
    DownloadSummary,
    DownloadTask,
    FetchResult,
    FetchStatus,
    Record,
)
from .progress import ProgressReporter
from .utils import brand_slug, target_filename

logger = logging.getLogger("catalog_assets")


def build_session(config: PipelineConfig) -> requests.Session:
    """Create a session whose connection pool matches the worker count."""
    session = requests.Session()
    session.headers.update({"User-Agent": USER_AGENT})
    adapter = HTTPAdapter(
        pool_connections=config.max_workers,
        pool_maxsize=config.max_workers,
    )
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session


def target_path(record: Record, output_root: Path) -> Path:
    """Resolve ``<output_root>/<slug(brand)>/<filename>`` for a record."""
    directory = output_root / brand_slug(record.brand)
    return directory / target_filename(record.local_filename, record.content_hash)


def plan_downloads(records: Sequence[Record], config: PipelineConfig) -> List[DownloadTask]:
    """Build one task per record with a source image and a string brand."""
    tasks: List[DownloadTask] = []
    for index, record in enumerate(records):
        if not record.has_asset or record.brand is None:
            continue
        if config.fetch_from == FETCH_FROM_SOURCE:
            url = record.source_image_url
        else:
            url = record.rewritten_image_url or record.source_image_url
        tasks.append(
            DownloadTask(index=index, url=url, target=target_path(record, config.output_root))
        )
    return tasks


def _inside(directory: Path, root: Path) -> bool:
    root_text = os.path.normpath(os.path.abspath(root))
    dir_text = os.path.normpath(os.path.abspath(directory))
    return os.path.commonpath([root_text, dir_text]) == root_text


def _prepare_directories(tasks: Sequence[DownloadTask], output_root: Path) -> Dict[Path, str]:
    """Create every target directory; return the ones that could not be made.

    Brand segments such as ``../x`` or ``/x`` would land outside ``output_root``;
    those directories are never created.
    """
    broken: Dict[Path, str] = {}
    for directory in sorted({task.target.parent for task in tasks}):
        if not _inside(directory, output_root):
            broken[directory] = f"target directory {directory} is outside {output_root}"
            continue
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            logger.debug("Cannot create directory %s", directory, exc_info=True)
            broken[directory] = str(exc)
    return broken


def download_assets(
    records: Sequence[Record],
    config: PipelineConfig,
    session: Optional[requests.Session] = None,
) -> DownloadSummary:
    """Fetch every eligible asset on a bounded worker pool.

    Waits for all tasks regardless of their outcome; results come back in
    catalog order.
    """
    tasks = plan_downloads(records, config)
    if not tasks:
        logger.info("No downloadable assets found in catalog")
        return DownloadSummary()

    reporter = ProgressReporter(len(tasks))
    broken = _prepare_directories(tasks, config.output_root)
    outcomes: Dict[int, FetchResult] = {}
    runnable: List[DownloadTask] = []

    for task in tasks:
        reason = broken.get(task.target.parent)
        if reason is None:
            runnable.append(task)
            continue
        result = FetchResult(FetchStatus.FAILED, task.url, task.target, reason=reason)
        outcomes[task.index] = result
        reporter.report(result)

    owns_session = session is None
    if session is None:
        session = build_session(config)

    logger.info(
        "Fetching %d assets with %d workers", len(runnable), config.max_workers
    )
    try:
        with ThreadPoolExecutor(max_workers=config.max_workers) as pool:
            future_map = {
                pool.submit(
                    fetch_asset,
                    session,
                    task.url,
                    task.target,
                    config.timeout,
                    config.require_image,
                ): task
                for task in runnable
            }
            for future in as_completed(future_map):
                task = future_map[future]
                try:
                    result = future.result()
                except Exception as exc:  # pylint: disable=broad-except
                    logger.exception("Unexpected error fetching %s", task.url)
                    result = FetchResult(
                        FetchStatus.FAILED, task.url, task.target, reason=str(exc)
                    )
                outcomes[task.index] = result
                reporter.report(result)
    finally:
        if owns_session:
            session.close()

    return DownloadSummary(results=[outcomes[task.index] for task in tasks])
