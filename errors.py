"""
Exception types raised while cloning a database.

Every failure is terminal for the run. The CLI catches CloneError at the top
and turns it into a labelled message and exit status 1.
"""

from __future__ import annotations

from typing import Any


class CloneError(Exception):
    """Base exception for all clone errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (details: {self.details})"
        return self.message


class ArgumentError(CloneError):
    """Raised when required command-line arguments are missing or invalid."""

    pass


class ConnectError(CloneError):
    """Raised when a database cannot be reached or authenticated against."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Failed to connect to {url}: {reason}", {"url": url})
        self.url = url
        self.reason = reason


class ScanError(CloneError):
    """Raised when the source inventory cannot be read."""

    pass


class PrepareError(CloneError):
    """Raised when the target database cannot be dropped."""

    pass


class CopyError(CloneError):
    """Raised when a collection cannot be copied."""

    def __init__(self, collection: str, reason: str, details: dict[str, Any] | None = None):
        super().__init__(
            f"Error copying collection '{collection}': {reason}",
            {"collection": collection, **(details or {})},
        )
        self.collection = collection
        self.reason = reason


class InsertError(CopyError):
    """Raised when the target rejects a document."""

    pass


class InsertConflictError(InsertError):
    """Raised when the target already holds a document with a colliding key."""

    def __init__(self, collection: str, document_id: Any = None):
        super().__init__(
            collection,
            "duplicate key, the document is probably already in the target",
            {"document_id": document_id},
        )
        self.document_id = document_id


class WorkCountMismatchError(CloneError):
    """Raised when copying ends with a different count than the scan found."""

    def __init__(self, expected: int, actual: int):
        super().__init__(
            f"Copied {actual} documents but the source scan counted {expected}",
            {"expected": expected, "actual": actual},
        )
        self.expected = expected
        self.actual = actual


class UnclassifiedError(CloneError):
    """Wraps any unexpected exception raised during a run."""

    def __init__(self, original: BaseException):
        super().__init__(f"{type(original).__name__}: {original}")
        self.original = original
