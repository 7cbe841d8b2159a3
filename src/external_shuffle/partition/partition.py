"""Splitting a line stream into independently shuffled spill files."""

import logging
from collections.abc import Iterable
from random import Random

from external_shuffle.errors import ConfigurationError, StorageError
from external_shuffle.partition.sizing import estimate_block_size, estimate_line_size
from external_shuffle.partition.types import PartitionStats, SizeEstimator, SpillFile
from external_shuffle.storage.storage import SpillStorage

logger = logging.getLogger(__name__)


def partition_lines(
    lines: Iterable[str],
    total_bytes: int,
    rng: Random,
    storage: SpillStorage,
    *,
    max_units: int,
    available_memory: int,
    header_lines: int = 0,
    size_of: SizeEstimator = estimate_line_size,
) -> tuple[list[SpillFile], PartitionStats]:
    """
    Buffer lines up to the block budget, shuffle each block in memory and spill it.

    The first ``header_lines`` lines are dropped and never reach a spill file.
    Every block is shuffled with ``rng.shuffle`` before it is written, so each
    spill file is a uniform permutation of its own lines. If anything fails,
    the spill files written so far are deleted before the error propagates.
    """
    if header_lines < 0:
        raise ConfigurationError(f"header_lines must not be negative, got {header_lines}")
    block_size = estimate_block_size(total_bytes, max_units, available_memory)
    logger.debug(
        "Block size %d bytes (total=%d, max_units=%d, available_memory=%d)",
        block_size,
        total_bytes,
        max_units,
        available_memory,
    )

    stats = PartitionStats(block_size=block_size)
    spills: list[SpillFile] = []
    block: list[str] = []
    block_cost = 0

    def flush() -> None:
        nonlocal block_cost
        rng.shuffle(block)
        spill = storage.write_block(block)
        spills.append(spill)
        stats.lines_written += spill.line_count
        block.clear()
        block_cost = 0

    try:
        for line in lines:
            stats.lines_read += 1
            if stats.header_lines_skipped < header_lines:
                stats.header_lines_skipped += 1
                continue

            block.append(line)
            block_cost += size_of(line)
            if block_cost >= block_size:
                flush()

        if block:
            flush()

    except BaseException:
        for spill in spills:
            try:
                storage.delete(spill)
            except StorageError:
                logger.warning("Failed to remove %s after an error", spill.path, exc_info=True)
        raise

    stats.spill_units = len(spills)
    return spills, stats
