"""Exception hierarchy for external shuffling."""


class ShuffleError(Exception):
    """Base class for all shuffle failures."""


class ConfigurationError(ShuffleError, ValueError):
    """Invalid shuffle parameters, detected before any work is done."""


class StorageError(ShuffleError):
    """Temporary spill storage could not be created, written or read back."""


class PartialWriteError(StorageError):
    """Writing the shuffled output failed part way through the merge."""

    def __init__(self, message: str, lines_written: int):
        super().__init__(message)
        self.lines_written = lines_written
