"""Shared constants and metadata structures for partitioning."""

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TypeAlias

SizeEstimator: TypeAlias = Callable[[str], int]

# 1MB buffer for efficient I/O.
BUFFER_SIZE = 1024 * 1024

# Terminator written after every line of spill files and output.
LINE_TERMINATOR = "\n"

# Upper bound on spill units when the caller does not choose one.
DEFAULT_MAX_SPILL_UNITS = 1024


@dataclass(frozen=True, slots=True)
class SpillFile:
    """One persisted, already-shuffled block and the exact number of lines in it."""

    path: Path
    line_count: int


@dataclass
class PartitionStats:
    """Statistics from partition_lines operation."""

    lines_read: int = 0
    header_lines_skipped: int = 0
    lines_written: int = 0
    block_size: int = 0
    spill_units: int = 0
