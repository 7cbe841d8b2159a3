"""Streaming buffers over persisted, already-shuffled blocks."""

import gzip
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Self, TextIO

from external_shuffle.errors import StorageError
from external_shuffle.partition.types import BUFFER_SIZE, LINE_TERMINATOR


class SpillUnit(ABC):
    """
    Keeps the next unread line of one spill file in memory.

    ``remaining`` counts the cached line plus every line still unread in
    storage, and drops to zero exactly when the cache is empty.
    """

    def __init__(self, handle: TextIO, line_count: int):
        self._handle = handle
        self._remaining = line_count
        self._cache: str | None = None
        self._closed = False
        self._reload()
        self._check_remaining()

    @classmethod
    @abstractmethod
    def open(cls, path: Path, line_count: int, encoding: str = "utf-8") -> Self:
        """Open a spill file written by the matching storage."""

    @property
    def remaining(self) -> int:
        return self._remaining

    def peek(self) -> str | None:
        return self._cache

    def pop(self) -> str:
        """Return the cached line and read the next one from storage."""
        answer = self._cache
        if answer is None:
            raise StorageError("pop() called on an empty spill unit")
        self._reload()
        self._remaining -= 1
        self._check_remaining()
        return answer

    def empty(self) -> bool:
        return self._cache is None

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._handle.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _reload(self) -> None:
        try:
            raw_line = self._handle.readline()
        except (OSError, EOFError) as exc:
            raise StorageError(f"Failed to read spill unit: {exc}") from exc

        if raw_line:
            self._cache = raw_line.removesuffix(LINE_TERMINATOR)
        else:
            self._cache = None

    def _check_remaining(self) -> None:
        # Storage and the recorded line count must run out together.
        if (self._cache is None) != (self._remaining == 0):
            raise StorageError(
                f"Spill unit holds a different number of lines than recorded "
                f"(remaining={self._remaining}, exhausted={self._cache is None})"
            )


class PlainSpillUnit(SpillUnit):
    """Spill unit backed by an uncompressed text file."""

    @classmethod
    def open(cls, path: Path, line_count: int, encoding: str = "utf-8") -> Self:
        try:
            handle = open(  # noqa: SIM115
                path, encoding=encoding, newline=LINE_TERMINATOR, buffering=BUFFER_SIZE
            )
        except OSError as exc:
            raise StorageError(f"Failed to open spill file {path}: {exc}") from exc
        try:
            return cls(handle, line_count)
        except BaseException:
            handle.close()
            raise


class GzipSpillUnit(SpillUnit):
    """Spill unit backed by a gzip-compressed text file."""

    @classmethod
    def open(cls, path: Path, line_count: int, encoding: str = "utf-8") -> Self:
        try:
            handle = gzip.open(path, "rt", encoding=encoding, newline=LINE_TERMINATOR)
        except OSError as exc:
            raise StorageError(f"Failed to open spill file {path}: {exc}") from exc
        try:
            return cls(handle, line_count)
        except BaseException:
            handle.close()
            raise
