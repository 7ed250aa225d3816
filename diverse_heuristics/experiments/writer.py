"""CSV result sink and output file naming."""

from __future__ import annotations

import csv
import logging
import threading
import time
from pathlib import Path
from typing import Iterable, Sequence

from diverse_heuristics.errors import ResultWriteError

logger = logging.getLogger("diverse_heuristics.writer")


def next_unique_path(directory: Path, prefix: str, stamp: int, suffix: str = ".csv") -> Path:
    """``<directory>/<prefix><stamp><suffix>``, bumping ``stamp`` until the file does not exist."""
    candidate = directory / f"{prefix}{stamp}{suffix}"
    while candidate.exists():
        stamp += 1
        candidate = directory / f"{prefix}{stamp}{suffix}"
    return candidate


def create_data_location(
    data_dir: str | Path,
    category: str,
    problem_token: str,
    file_id: int,
) -> Path:
    """Create ``<data_dir>/<category>s/`` and return a fresh result file path in it.

    File name: ``<problem><category><file_id>Data<nanoseconds>.csv``.
    """
    directory = Path(data_dir) / f"{category}s"
    if not directory.exists():
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ResultWriteError(f"Failed to create data directory {directory}: {e}") from e
        logger.info("%s data directory created.", directory)
    prefix = f"{problem_token}{category}{file_id}Data"
    return next_unique_path(directory, prefix, time.time_ns())


class ResultWriter:
    """Append-only CSV writer; every write is flushed to disk before returning.

    The lock serialises appends so a writer may be shared between tasks.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._lock = threading.Lock()
        self.rows_written = 0

    def write_header(self, header: Sequence[str]) -> None:
        self._append([header])

    def write_row(self, row: Sequence) -> None:
        self._append([row])
        self.rows_written += 1

    def write_rows(self, rows: Iterable[Sequence]) -> None:
        rows = list(rows)
        self._append(rows)
        self.rows_written += len(rows)

    def _append(self, rows: Sequence[Sequence]) -> None:
        with self._lock:
            try:
                with open(self.path, "a", newline="", encoding="utf-8") as f:
                    writer = csv.writer(f)
                    writer.writerows(rows)
                    f.flush()
            except OSError as e:
                raise ResultWriteError(f"Failed to write results to {self.path}: {e}") from e
        logger.debug("wrote %d line(s) to %s", len(rows), self.path)

    def __repr__(self) -> str:
        return f"ResultWriter({str(self.path)!r})"
