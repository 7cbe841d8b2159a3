"""Shared in-memory fakes for spill storage and output sinks."""

import io
from collections.abc import Iterable
from pathlib import Path

import pytest

from external_shuffle.partition.types import SpillFile
from external_shuffle.storage import PlainSpillUnit, SpillStorage, SpillUnit


class MemoryStorage(SpillStorage):
    """Spill storage that keeps every block in a dict instead of on disk."""

    def __init__(self) -> None:
        super().__init__(Path("memory"))
        self.blocks: dict[Path, str] = {}
        self.deleted: list[Path] = []
        self.opened: list[SpillUnit] = []

    def write_block(self, lines: Iterable[str]) -> SpillFile:
        path = self._get_path(next(self._counter))
        block = list(lines)
        self.blocks[path] = "".join(f"{line}\n" for line in block)
        return SpillFile(path, len(block))

    def open_unit(self, spill: SpillFile) -> SpillUnit:
        unit = PlainSpillUnit(io.StringIO(self.blocks[spill.path], newline="\n"), spill.line_count)
        self.opened.append(unit)
        return unit

    def delete(self, spill: SpillFile) -> None:
        self.blocks.pop(spill.path, None)
        self.deleted.append(spill.path)

    def block_lines(self, spill: SpillFile) -> list[str]:
        return self.blocks[spill.path].split("\n")[:-1]


class ListSink:
    """Collects written lines in a list."""

    def __init__(self) -> None:
        self.lines: list[str] = []
        self.closed = False

    def write(self, line: str) -> None:
        assert not self.closed
        self.lines.append(line)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def memory_storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def list_sink() -> ListSink:
    return ListSink()
