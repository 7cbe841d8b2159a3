"""Weighted random merge of spill units."""

from external_shuffle.merge.merge import LineWriter, merge_spill_files, merge_units

__all__ = ["LineWriter", "merge_spill_files", "merge_units"]
