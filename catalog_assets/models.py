"""Data models used throughout the asset pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional


@dataclass
class Record:
    """One catalog entry and its optional image asset."""

    local_filename: str = ""
    content_hash: str = ""
    brand: Optional[str] = None
    source_image_url: Optional[str] = None
    rewritten_image_url: Optional[str] = None
    extra_fields: Dict[str, Any] = field(default_factory=dict)
    had_source_key: bool = False
    field_order: List[str] = field(default_factory=list)

    @property
    def has_asset(self) -> bool:
        return bool(self.source_image_url)


class FetchStatus(str, Enum):
    DOWNLOADED = "Downloaded"
    SKIPPED = "Skipped"
    FAILED = "Failed"


@dataclass(frozen=True)
class DownloadTask:
    """Immutable unit of work handed to a worker thread."""

    index: int
    url: str
    target: Path


@dataclass(frozen=True)
class FetchResult:
    """Outcome of a single fetch attempt."""

    status: FetchStatus
    url: str
    target: Path
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is not FetchStatus.FAILED


@dataclass
class DownloadSummary:
    """Aggregated outcomes for a whole catalog run."""

    results: List[FetchResult] = field(default_factory=list)

    def count(self, status: FetchStatus) -> int:
        return sum(1 for result in self.results if result.status is status)

    @property
    def downloaded(self) -> int:
        return self.count(FetchStatus.DOWNLOADED)

    @property
    def skipped(self) -> int:
        return self.count(FetchStatus.SKIPPED)

    @property
    def failed(self) -> int:
        return self.count(FetchStatus.FAILED)

    @property
    def failures(self) -> List[FetchResult]:
        return [result for result in self.results if result.status is FetchStatus.FAILED]
