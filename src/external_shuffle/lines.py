"""Line sources and sinks used at the edges of the shuffle."""

from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Self, TextIO

from external_shuffle.partition.types import BUFFER_SIZE, LINE_TERMINATOR


def iter_lines(handle: Iterable[str]) -> Iterator[str]:
    """Yield lines from a text stream with their terminator removed."""
    for raw_line in handle:
        yield raw_line.removesuffix(LINE_TERMINATOR)


def read_lines(path: str | Path, encoding: str = "utf-8") -> Iterator[str]:
    """Read all lines of a text file, decoding with universal newlines."""
    with open(path, encoding=encoding, buffering=BUFFER_SIZE) as handle:
        yield from iter_lines(handle)


class LineSink:
    """Writes one line per call, appending the terminator, until closed."""

    def __init__(self, handle: TextIO, terminator: str = LINE_TERMINATOR):
        self._handle = handle
        self._terminator = terminator
        self.lines_written = 0

    @classmethod
    def open(cls, path: str | Path, encoding: str = "utf-8", append: bool = False) -> Self:
        mode = "a" if append else "w"
        handle = open(path, mode, encoding=encoding, newline="", buffering=BUFFER_SIZE)  # noqa: SIM115
        return cls(handle)

    @property
    def closed(self) -> bool:
        return self._handle.closed

    def write(self, line: str) -> None:
        self._handle.write(line)
        self._handle.write(self._terminator)
        self.lines_written += 1

    def close(self) -> None:
        """Flush and release the underlying stream."""
        if not self._handle.closed:
            self._handle.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
