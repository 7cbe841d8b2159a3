"""Partitioning of the input into shuffled spill files."""

from external_shuffle.partition.partition import partition_lines
from external_shuffle.partition.sizing import estimate_block_size, estimate_line_size
from external_shuffle.partition.types import PartitionStats, SpillFile

__all__ = [
    "PartitionStats",
    "SpillFile",
    "estimate_block_size",
    "estimate_line_size",
    "partition_lines",
]
