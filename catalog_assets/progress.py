"""Thread-safe progress accounting for fetch outcomes."""

from __future__ import annotations

import logging
import threading
from typing import Optional

from .models import FetchResult, FetchStatus

logger = logging.getLogger("catalog_assets")


class ProgressReporter:
    """Counts completed fetch tasks and logs one status line per completion."""

    def __init__(self, total: int, log: Optional[logging.Logger] = None) -> None:
        self.total = total
        self._log = log or logger
        self._completed = 0
        self._lock = threading.Lock()

    @property
    def completed(self) -> int:
        with self._lock:
            return self._completed

    def report(self, result: FetchResult) -> int:
        with self._lock:
            self._completed += 1
            position = self._completed

        if result.status is FetchStatus.DOWNLOADED:
            self._log.info(
                "Downloaded %d of %d: %s -> %s",
                position,
                self.total,
                result.url,
                result.target,
            )
        elif result.status is FetchStatus.SKIPPED:
            self._log.info(
                "Skipped %d of %d: %s, already exists",
                position,
                self.total,
                result.target,
            )
        else:
            self._log.warning(
                "Failed %d of %d: %s: %s",
                position,
                self.total,
                result.url,
                result.reason,
            )
        return position
