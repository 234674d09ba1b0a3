"""Errors raised by the tracking pipeline.

Malformed classifier output and duplicate entries are not errors: the
response parser absorbs the former and ``EntryStore.append`` returns
``None`` for the latter.
"""


class DigestigoError(Exception):
    """Base class for all tracking errors."""


class ClassifierUnavailable(DigestigoError):
    """No language model provider produced a completion."""


class StorageError(DigestigoError):
    """The key-value store failed."""


class StorageReadError(StorageError):
    """Reading from the key-value store failed."""


class StorageWriteError(StorageError):
    """Writing to the key-value store failed."""


class StaleSessionError(DigestigoError):
    """A write was attempted after the entries it belonged to were cleared."""

    def __init__(self, expected: int, current: int):
        super().__init__(
            f"Tracking data was cleared (generation {expected} -> {current})"
        )
        self.expected = expected
        self.current = current
