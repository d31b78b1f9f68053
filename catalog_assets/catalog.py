"""Catalog loading and serialization."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Sequence

from .config import (
    BRAND_KEY,
    CONTENT_HASH_KEY,
    LOCAL_FILENAME_KEY,
    SOURCE_IMAGE_KEY,
)
from .models import Record
from .utils import DEFAULT_FILE_MODE

logger = logging.getLogger("catalog_assets")

OUTPUT_SUFFIX = "-modified-w-embedded-imgs.json"


class CatalogError(RuntimeError):
    """Raised when the catalog cannot be read or written."""


def _is_typed(key: str, value: Any) -> bool:
    # Values of an unexpected JSON type stay in the extras so they round-trip.
    if key == SOURCE_IMAGE_KEY:
        return value is None or isinstance(value, str)
    if key in (LOCAL_FILENAME_KEY, CONTENT_HASH_KEY):
        return isinstance(value, str)
    return False


def record_from_json(item: Dict[str, Any]) -> Record:
    """Split a raw catalog object into typed fields and pass-through extras."""
    typed = {key: value for key, value in item.items() if _is_typed(key, value)}
    extras = {key: value for key, value in item.items() if key not in typed}
    brand = item.get(BRAND_KEY)
    return Record(
        local_filename=typed.get(LOCAL_FILENAME_KEY, ""),
        content_hash=typed.get(CONTENT_HASH_KEY, ""),
        brand=brand if isinstance(brand, str) else None,
        source_image_url=typed.get(SOURCE_IMAGE_KEY),
        extra_fields=extras,
        had_source_key=SOURCE_IMAGE_KEY in typed,
        field_order=list(item.keys()),
    )


def record_to_json(record: Record) -> Dict[str, Any]:
    """Merge typed fields back with the extras in the record's original key order.

    The source image key carries the rewritten URL when there is one.
    """
    typed: Dict[str, Any] = {}
    if LOCAL_FILENAME_KEY not in record.extra_fields:
        typed[LOCAL_FILENAME_KEY] = record.local_filename
    if CONTENT_HASH_KEY not in record.extra_fields:
        typed[CONTENT_HASH_KEY] = record.content_hash
    if record.had_source_key or record.rewritten_image_url is not None:
        typed[SOURCE_IMAGE_KEY] = (
            record.rewritten_image_url
            if record.rewritten_image_url is not None
            else record.source_image_url
        )

    payload: Dict[str, Any] = {}
    for key in record.field_order:
        if key in typed:
            payload[key] = typed.pop(key)
        elif key in record.extra_fields:
            payload[key] = record.extra_fields[key]
    for key, value in record.extra_fields.items():
        payload.setdefault(key, value)
    payload.update(typed)
    return payload


def load_catalog(path: Path) -> List[Record]:
    """Read a JSON array of product objects from ``path``."""
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CatalogError(f"Cannot read catalog {path}: {exc}") from exc

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise CatalogError(f"Malformed catalog {path}: {exc}") from exc

    if not isinstance(data, list):
        raise CatalogError(f"Catalog {path} must contain a JSON array")
    for position, item in enumerate(data):
        if not isinstance(item, dict):
            raise CatalogError(
                f"Catalog {path} entry {position} is {type(item).__name__}, expected object"
            )

    records = [record_from_json(item) for item in data]
    logger.info("Loaded %d records from %s", len(records), path)
    return records


def write_catalog(records: Sequence[Record], path: Path) -> None:
    """Write the catalog as pretty JSON, replacing ``path`` in one step."""
    payload = [record_to_json(record) for record in records]
    text = json.dumps(payload, indent=2, ensure_ascii=False)
    directory = path.parent if str(path.parent) else Path(".")
    tmp_name = None
    try:
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=directory,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as handle:
            tmp_name = handle.name
            handle.write(text)
            handle.write("\n")
        mode = path.stat().st_mode & 0o777 if path.exists() else DEFAULT_FILE_MODE
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, path)
    except OSError as exc:
        if tmp_name is not None:
            Path(tmp_name).unlink(missing_ok=True)
        raise CatalogError(f"Cannot write catalog {path}: {exc}") from exc


def default_output_path(input_path: Path) -> Path:
    """``products.json`` -> ``products-modified-w-embedded-imgs.json`` beside it."""
    name = input_path.name
    if name.endswith(".json"):
        name = name[: -len(".json")]
    return input_path.with_name(name + OUTPUT_SUFFIX)
