"""Orchestration of the partition and merge passes."""

from external_shuffle.shuffler.shuffle import (
    ShuffleStats,
    main_shuffle,
    shuffle_file,
    shuffle_stream,
)

__all__ = ["ShuffleStats", "main_shuffle", "shuffle_file", "shuffle_stream"]
