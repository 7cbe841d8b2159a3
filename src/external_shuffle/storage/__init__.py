"""Spill storage and the units that stream it back."""

from external_shuffle.storage.storage import GzipSpillStorage, SpillStorage, make_storage
from external_shuffle.storage.unit import GzipSpillUnit, PlainSpillUnit, SpillUnit

__all__ = [
    "GzipSpillStorage",
    "GzipSpillUnit",
    "PlainSpillUnit",
    "SpillStorage",
    "SpillUnit",
    "make_storage",
]
