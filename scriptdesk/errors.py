"""
Failure taxonomy shared by the storage adapter, repository and bridge.

A cancelled file choice is not listed here: it is a normal outcome and is
reported through the export/import outcome payloads.
"""

__all__ = [
    "ScriptDeskError",
    "ValidationFailure",
    "StorageFailure",
]


class ScriptDeskError(Exception):
    """Root exception for all scriptdesk errors."""


class ValidationFailure(ScriptDeskError):
    """Raised when a request is rejected before it reaches storage."""


class StorageFailure(ScriptDeskError):
    """Raised when the database reports a fault (I/O, constraint, bad statement).

    The message is the driver's own diagnostic text.
    """
