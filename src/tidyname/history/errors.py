"""Operation history errors."""


class HistoryError(Exception):
    """Base exception for operation history failures."""


class HistoryStorageError(HistoryError):
    """Raised when the history file cannot be read or written."""


class EmptyHistoryError(HistoryError):
    """Raised when an operation is requested but the history is empty."""


class OperationNotFoundError(HistoryError):
    """Raised when no history entry has the requested id."""


class OperationAlreadyUndoneError(HistoryError):
    """Raised when undoing an operation that was already undone."""
