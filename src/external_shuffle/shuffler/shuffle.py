import contextlib
import functools
import logging
import os
import shutil
import tempfile
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path
from random import Random

from external_shuffle.errors import ConfigurationError, StorageError
from external_shuffle.lines import LineSink, read_lines
from external_shuffle.merge import LineWriter, merge_spill_files
from external_shuffle.partition import partition_lines
from external_shuffle.partition.sizing import estimate_line_size, probe_available_memory
from external_shuffle.partition.types import DEFAULT_MAX_SPILL_UNITS, SizeEstimator
from external_shuffle.storage import SpillStorage, make_storage

logger = logging.getLogger(__name__)


@dataclass
class ShuffleStats:
    """Counters describing one complete shuffle."""

    lines_read: int = 0
    header_lines_skipped: int = 0
    spill_units: int = 0
    block_size: int = 0
    lines_merged: int = 0


def validate_options(max_spill_units: int, header_lines: int) -> None:
    """Reject invalid parameters before any work is done."""
    if max_spill_units <= 0:
        raise ConfigurationError(f"max_spill_units must be positive, got {max_spill_units}")
    if header_lines < 0:
        raise ConfigurationError(f"header_lines must not be negative, got {header_lines}")


def validate_encoding(encoding: str) -> None:
    """Reject names that are unknown or are not text encodings (e.g. "hex")."""
    try:
        "".encode(encoding)
    except LookupError as exc:
        raise ConfigurationError(f"Unknown text encoding: {encoding}") from exc


def shuffle_stream(
    lines: Iterable[str],
    open_sink: Callable[[], LineWriter],
    *,
    total_bytes: int,
    rng: Random,
    storage: SpillStorage,
    max_spill_units: int = DEFAULT_MAX_SPILL_UNITS,
    available_memory: int = 0,
    header_lines: int = 0,
    size_of: SizeEstimator = estimate_line_size,
) -> ShuffleStats:
    """
    Shuffle a line stream into a sink using spill storage for the blocks.

    Two-phase algorithm:
    1. Partition lines into memory-bounded blocks, shuffle each, spill to storage
    2. Open the sink and merge the spill units by weighted random selection

    The sink is only opened once the whole input has been consumed, so the
    output may be the very file the lines are read from. It is closed when
    this returns or raises.
    """
    validate_options(max_spill_units, header_lines)

    # Pass 1: partition into shuffled spill units.
    t1_start = time.perf_counter()
    spills, partition_stats = partition_lines(
        lines,
        total_bytes,
        rng,
        storage,
        max_units=max_spill_units,
        available_memory=available_memory,
        header_lines=header_lines,
        size_of=size_of,
    )
    t1 = time.perf_counter() - t1_start

    logger.info(
        "Pass 1 done: %d lines in %d spill units in %.2fs (%d header lines skipped)",
        partition_stats.lines_written,
        len(spills),
        t1,
        partition_stats.header_lines_skipped,
    )

    # Pass 2: weighted random merge.
    t2_start = time.perf_counter()
    try:
        sink = open_sink()
    except BaseException:
        for spill in spills:
            with contextlib.suppress(StorageError):
                storage.delete(spill)
        raise
    lines_merged = merge_spill_files(spills, storage, sink, rng)
    t2 = time.perf_counter() - t2_start
    logger.info("Pass 2 done: %d lines merged in %.2fs", lines_merged, t2)

    return ShuffleStats(
        lines_read=partition_stats.lines_read,
        header_lines_skipped=partition_stats.header_lines_skipped,
        spill_units=partition_stats.spill_units,
        block_size=partition_stats.block_size,
        lines_merged=lines_merged,
    )


def shuffle_file(
    input_path: str | Path,
    output_path: str | Path,
    *,
    max_spill_units: int = DEFAULT_MAX_SPILL_UNITS,
    header_lines: int = 0,
    available_memory: int | None = None,
    compress: bool = False,
    encoding: str = "utf-8",
    tmp_dir: str | Path | None = None,
    seed: int | None = None,
    rng: Random | None = None,
    append: bool = False,
) -> ShuffleStats:
    """
    Shuffle the lines of input_path into output_path.

    Spill files live in a private temporary directory (created under tmp_dir
    when given) which is removed whatever the outcome. When no rng is passed,
    a private Random seeded with seed is used. The output is opened only after
    the input has been read in full, so input_path and output_path may be the
    same file.
    """
    total_start = time.perf_counter()
    validate_options(max_spill_units, header_lines)
    validate_encoding(encoding)

    input_file = Path(input_path)
    total_bytes = os.stat(input_file).st_size
    if available_memory is None:
        available_memory = probe_available_memory()
    if rng is None:
        rng = Random(seed)

    logger.info(
        "Starting: file=%s, size=%d, max_spill_units=%d, header_lines=%d, gzip=%s",
        input_file.name,
        total_bytes,
        max_spill_units,
        header_lines,
        compress,
    )

    # Create temporary directory for spill files.
    spill_dir = tempfile.mkdtemp(prefix="external_shuffle_", dir=tmp_dir)

    try:
        storage = make_storage(spill_dir, compress=compress, encoding=encoding)
        with contextlib.closing(read_lines(input_file, encoding)) as lines:
            stats = shuffle_stream(
                lines,
                functools.partial(LineSink.open, output_path, encoding=encoding, append=append),
                total_bytes=total_bytes,
                rng=rng,
                storage=storage,
                max_spill_units=max_spill_units,
                available_memory=available_memory,
                header_lines=header_lines,
                size_of=functools.partial(estimate_line_size, encoding=encoding),
            )
    finally:
        shutil.rmtree(spill_dir, ignore_errors=True)

    total_time = time.perf_counter() - total_start
    logger.info("Result: %d lines shuffled (total %.2fs)", stats.lines_merged, total_time)
    return stats


def main_shuffle(input_path: str, output_path: str, **options) -> None:
    """Main entry point that prints a summary to stdout."""
    stats = shuffle_file(input_path, output_path, **options)
    print(f"{stats.lines_merged} lines shuffled using {stats.spill_units} spill units")
