"""
treeshift.errors — Exceptions raised for caller contract violations.

A transform that finds its location gone returns None; it never raises.
The exceptions here are reserved for misuse that ordinary operation
sequences cannot produce: asking for the parent of the root path, the
previous sibling of a first child, a malformed operation payload.
"""


class TreeshiftError(Exception):
    """
    Base exception for all treeshift errors.

    Carries a human-readable message and a details dict so callers can
    log the failure with structured context.
    """

    def __init__(self, message: str, details: dict[str, object] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


class InvalidPathError(TreeshiftError):
    """Raised when a path query has no answer (root parent, negative index, ...)."""

    def __init__(self, message: str, path: tuple = (), **details: object) -> None:
        super().__init__(message, {"path": list(path), **details})
        self.path = path


class InvalidNodeError(TreeshiftError):
    """Raised when a path resolves to the wrong kind of node, or to nothing."""

    def __init__(self, message: str, path: tuple = ()) -> None:
        super().__init__(message, {"path": list(path)})
        self.path = path


class OperationFormatError(TreeshiftError):
    """Raised when a serialized operation cannot be decoded."""

    def __init__(self, message: str, payload: object = None) -> None:
        details: dict[str, object] = {}
        if payload is not None:
            details["payload"] = payload
        super().__init__(message, details)
        self.payload = payload
