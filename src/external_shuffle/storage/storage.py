"""Temporary spill file allocation, plain or gzip-compressed."""

import contextlib
import gzip
import itertools
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import TextIO

from external_shuffle.errors import StorageError
from external_shuffle.partition.types import BUFFER_SIZE, LINE_TERMINATOR, SpillFile
from external_shuffle.storage.unit import GzipSpillUnit, PlainSpillUnit, SpillUnit

logger = logging.getLogger(__name__)

# Fastest deflate level; spill files are short-lived so speed beats ratio.
GZIP_LEVEL = 1


class SpillStorage:
    """Creates, reopens and deletes spill files inside one temporary directory."""

    suffix = ".txt"
    unit_class: type[SpillUnit] = PlainSpillUnit

    def __init__(self, tmp_dir: str | Path, encoding: str = "utf-8"):
        self._tmp_dir = Path(tmp_dir)
        self._encoding = encoding
        self._counter = itertools.count()

    @property
    def tmp_dir(self) -> Path:
        return self._tmp_dir

    def _get_path(self, spill_idx: int) -> Path:
        return self._tmp_dir / f"spill_{spill_idx:04d}{self.suffix}"

    def _open_writer(self, path: Path) -> TextIO:
        return open(  # noqa: SIM115
            path, "x", encoding=self._encoding, newline="", buffering=BUFFER_SIZE
        )

    def write_block(self, lines: Iterable[str]) -> SpillFile:
        """Persist lines in their current order, one per line, and record the count."""
        path = self._get_path(next(self._counter))
        line_count = 0
        try:
            self._tmp_dir.mkdir(parents=True, exist_ok=True)
            with self._open_writer(path) as handle:
                for line in lines:
                    handle.write(line)
                    handle.write(LINE_TERMINATOR)
                    line_count += 1
        except OSError as exc:
            with contextlib.suppress(OSError):
                path.unlink(missing_ok=True)
            raise StorageError(f"Failed to write spill file {path}: {exc}") from exc

        logger.debug("Spilled %d lines to %s", line_count, path.name)
        return SpillFile(path, line_count)

    def open_unit(self, spill: SpillFile) -> SpillUnit:
        return self.unit_class.open(spill.path, spill.line_count, self._encoding)

    def delete(self, spill: SpillFile) -> None:
        try:
            spill.path.unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError(f"Failed to delete spill file {spill.path}: {exc}") from exc


class GzipSpillStorage(SpillStorage):
    """Spill storage that compresses every spill file with gzip."""

    suffix = ".txt.gz"
    unit_class = GzipSpillUnit

    def _open_writer(self, path: Path) -> TextIO:
        return gzip.open(
            path, "xt", compresslevel=GZIP_LEVEL, encoding=self._encoding, newline=""
        )


def make_storage(tmp_dir: str | Path, compress: bool = False, encoding: str = "utf-8") -> SpillStorage:
    """Pick the spill storage implementation for the requested compression."""
    if compress:
        return GzipSpillStorage(tmp_dir, encoding)
    return SpillStorage(tmp_dir, encoding)
