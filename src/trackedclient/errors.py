"""Exceptions raised by the tracked client."""

from __future__ import annotations

from typing import List, Optional, Tuple


class TrackedClientError(Exception):
    """Base class for errors raised by the tracking wrapper itself."""


class SnapshotError(TrackedClientError):
    """A created object could not be captured into the tracking log.

    The remote create already succeeded when this is raised, so the object
    exists in the store but is not tracked.
    """


class UnregisteredKindError(SnapshotError):
    """The scheme has no apiVersion/kind for an object's type."""


class TrackedDeletionError(TrackedClientError):
    """One or more tracked objects could not be deleted.

    Attributes:
        errors: Individual deletion errors, in tracking order
        records: Per-object deletion records for the whole cleanup run
    """

    def __init__(self, errors: List[BaseException], records: Optional[list] = None) -> None:
        if not errors:
            raise ValueError("TrackedDeletionError requires at least one error")
        self.errors = list(errors)
        self.records = list(records or [])
        super().__init__("; ".join(str(e) for e in self.errors))

    @property
    def failed_count(self) -> int:
        return len(self.errors)


def error_details(exc: BaseException) -> Tuple[str, str]:
    """Extract a short error code and message from an exception.

    API exceptions from the kubernetes client carry an HTTP status and reason;
    anything else is reported by class name.

    Args:
        exc: Exception to describe

    Returns:
        Tuple of (error_code, error_message)
    """
    reason = getattr(exc, "reason", None)
    status = getattr(exc, "status", None)

    if reason:
        code = str(reason)
    elif status:
        code = str(status)
    else:
        code = type(exc).__name__

    summary = getattr(exc, "summary", None)
    if callable(summary):
        try:
            message = summary()
        except (TypeError, ValueError):
            message = str(exc)
    else:
        message = str(exc)

    return code, message or code
