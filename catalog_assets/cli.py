"""Command-line entry point for the catalog asset downloader."""

from __future__ import annotations

import argparse
import logging
import os
import sys
import time
from pathlib import Path
from typing import Sequence

from .catalog import CatalogError, default_output_path, load_catalog, write_catalog
from .config import (
    DEFAULT_BASE_URL,
    DEFAULT_IMAGES_ROOT,
    DEFAULT_MAX_WORKERS,
    DEFAULT_TIMEOUT,
    FETCH_FROM_REWRITTEN,
    FETCH_FROM_SOURCE,
    PipelineConfig,
)
from .downloader import download_assets
from .rewriter import rewrite_image_urls

logger = logging.getLogger("catalog_assets.cli")


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value}")
    return number


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description=(
            "Rewrite catalog image URLs to the CDN layout and download every "
            "image into brand folders."
        ),
    )
    parser.add_argument("catalog", type=Path, help="JSON catalog file to process")
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Where to write the modified catalog (default: <catalog>-modified-w-embedded-imgs.json)",
    )
    parser.add_argument(
        "--images-dir",
        type=Path,
        default=Path("."),
        help="Directory that receives the brand folders (default: current directory)",
    )
    parser.add_argument(
        "--base-url",
        default=os.getenv("CATALOG_ASSETS_BASE_URL", DEFAULT_BASE_URL),
        help="Host prefix for rewritten image URLs",
    )
    parser.add_argument(
        "--images-root",
        default=DEFAULT_IMAGES_ROOT,
        help="Path segment between the host and the brand folder",
    )
    parser.add_argument(
        "--workers",
        type=_positive_int,
        default=os.getenv("CATALOG_ASSETS_WORKERS", str(DEFAULT_MAX_WORKERS)),
        help="Maximum number of concurrent downloads",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help="Per-request timeout in seconds",
    )
    parser.add_argument(
        "--fetch-from",
        choices=(FETCH_FROM_REWRITTEN, FETCH_FROM_SOURCE),
        default=FETCH_FROM_REWRITTEN,
        help="Download from the rewritten CDN URL or from the catalog's original URL",
    )
    parser.add_argument(
        "--require-image",
        action="store_true",
        help="Treat responses that are not recognisable images as failures",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser.parse_args(list(sys.argv[1:] if argv is None else argv))


def run(args: argparse.Namespace) -> int:
    config = PipelineConfig(
        output_root=Path(args.images_dir).resolve(),
        base_url=args.base_url,
        images_root=args.images_root,
        max_workers=args.workers,
        timeout=args.timeout,
        fetch_from=args.fetch_from,
        require_image=args.require_image,
    )
    output_path = args.output or default_output_path(args.catalog)

    overall_start = time.perf_counter()
    try:
        records = load_catalog(args.catalog)
    except CatalogError as exc:
        logger.error("%s", exc)
        return 1

    rewrite_image_urls(records, config)
    summary = download_assets(records, config)

    try:
        write_catalog(records, output_path)
    except CatalogError as exc:
        logger.error("%s", exc)
        return 1

    total_elapsed = time.perf_counter() - overall_start
    logger.info(
        "Finished in %.2fs (%d downloaded, %d skipped, %d failed)",
        total_elapsed,
        summary.downloaded,
        summary.skipped,
        summary.failed,
    )
    logger.info("Modified JSON written to %s", output_path)
    return 0


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )
    sys.exit(run(args))


if __name__ == "__main__":
    main()
