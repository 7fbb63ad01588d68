"""Exceptions raised by lexlink."""


class LexlinkError(Exception):
    """Base class for lexlink errors."""


class NotFoundError(LexlinkError, KeyError):
    """Raised when an update targets an entity or connection id that is not stored."""

    def __init__(self, kind: str, identifier: str) -> None:
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} {identifier} not found")

    def __str__(self) -> str:
        return f"{self.kind} {self.identifier} not found"


class StorageError(LexlinkError):
    """Raised when a snapshot cannot be written."""
