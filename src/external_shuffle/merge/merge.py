"""Weighted random merge of independently shuffled spill units."""

import logging
from collections.abc import Sequence
from random import Random
from typing import Protocol

from external_shuffle.errors import PartialWriteError
from external_shuffle.partition.types import SpillFile
from external_shuffle.storage.storage import SpillStorage
from external_shuffle.storage.unit import SpillUnit

logger = logging.getLogger(__name__)


class LineWriter(Protocol):
    def write(self, line: str) -> None: ...

    def close(self) -> None: ...


def _abort_sink(sink: LineWriter) -> None:
    """Close the sink while another error propagates, without masking that error."""
    try:
        sink.close()
    except OSError:
        logger.warning("Failed to close output while aborting the merge", exc_info=True)


def merge_units(units: Sequence[SpillUnit], sink: LineWriter, rng: Random) -> int:
    """
    Interleave shuffled units into one uniformly shuffled stream.

    Each step picks a unit with probability proportional to its remaining
    line count and emits that unit's next line. Because every unit is itself a
    uniform permutation of its lines, the output is a uniform permutation of
    all lines. Units are closed as soon as they run dry; the sink and every
    unit still open are closed on every exit path.

    Returns the number of lines written.
    """
    active = [unit for unit in units if not unit.empty()]
    for unit in units:
        if unit.empty():
            unit.close()

    rows_written = 0
    try:
        total = sum(unit.remaining for unit in active)
        while total > 0:
            y = rng.randrange(total)

            # Select the unit whose cumulative remaining count first exceeds y.
            running_sum = 0
            for idx, unit in enumerate(active):
                running_sum += unit.remaining
                if y < running_sum:
                    break

            line = unit.pop()
            try:
                sink.write(line)
            except OSError as exc:
                raise PartialWriteError(
                    f"Failed to write output after {rows_written} lines: {exc}", rows_written
                ) from exc
            rows_written += 1
            total -= 1

            if unit.empty():
                unit.close()
                del active[idx]

    except BaseException:
        for unit in active:
            unit.close()
        _abort_sink(sink)
        raise

    # Buffered write failures surface when the sink is flushed on close.
    try:
        sink.close()
    except OSError as exc:
        raise PartialWriteError(
            f"Failed to flush output after {rows_written} lines: {exc}", rows_written
        ) from exc

    return rows_written


def merge_spill_files(
    spills: Sequence[SpillFile],
    storage: SpillStorage,
    sink: LineWriter,
    rng: Random,
) -> int:
    """Open every spill file as a unit, merge them into the sink, then delete the files."""
    units: list[SpillUnit] = []
    try:
        try:
            for spill in spills:
                units.append(storage.open_unit(spill))
        except BaseException:
            for unit in units:
                unit.close()
            _abort_sink(sink)
            raise

        logger.debug("Merging %d spill units", len(units))
        return merge_units(units, sink, rng)

    finally:
        for spill in spills:
            storage.delete(spill)
