"""Exceptions raised by the storage layer."""


class StorageError(Exception):
    """A database operation failed."""


class NotFound(StorageError):
    """The requested record does not exist."""
