"""External Shuffle - Uniformly shuffle the lines of files larger than memory."""

from external_shuffle.shuffler import main_shuffle, shuffle_file, shuffle_stream

__all__ = ["shuffle_file", "shuffle_stream", "main_shuffle"]
