"""Exceptions raised by the inventory history tracker."""


class HistoryError(Exception):
    """Base class for inventory history errors."""


class InvalidInputError(HistoryError, ValueError):
    """The inventory records (or a snapshot) cannot be used as given.

    Not retried by the tracker: the caller decides whether to skip the cycle.
    """


class PersistenceError(HistoryError, RuntimeError):
    """The durable key-value store could not be read or written."""
