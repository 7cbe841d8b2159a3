"""Block budget and per-line cost heuristics."""

import psutil

from external_shuffle.errors import ConfigurationError

# Bytes taken by the terminator that follows every line on disk.
TERMINATOR_SIZE = 1


def estimate_line_size(line: str, encoding: str = "utf-8") -> int:
    """
    Bytes a line occupies in the input file, terminator included.

    Measured in the same unit as the input file size, so the running cost of a
    block can be compared directly with a budget derived from that size.
    """
    if encoding == "utf-8" and line.isascii():
        return len(line) + TERMINATOR_SIZE
    return len(line.encode(encoding, errors="replace")) + TERMINATOR_SIZE


def probe_available_memory() -> int:
    """Memory currently available to the process, as reported by the OS."""
    return psutil.virtual_memory().available


def estimate_block_size(total_bytes: int, max_units: int, available_memory: int) -> int:
    """
    Choose how many bytes of lines to buffer before spilling a block.

    Blocks are sized so that at most ``max_units`` spill units are created.
    When that would make blocks smaller than half of the available memory, the
    block grows to half the available memory instead, so small inputs do not
    produce many tiny spill units.
    """
    if max_units <= 0:
        raise ConfigurationError(f"max_units must be positive, got {max_units}")
    if total_bytes < 0:
        raise ConfigurationError(f"total_bytes must not be negative, got {total_bytes}")

    block_size = -(-total_bytes // max_units)
    floor = available_memory // 2
    if block_size < floor:
        block_size = floor
    return block_size
