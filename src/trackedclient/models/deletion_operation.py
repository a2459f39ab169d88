"""Deletion operation model.

Summary of one bulk cleanup of tracked objects.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class OperationStatus(Enum):
    """Operation execution status with state transitions."""

    EXECUTING = "executing"
    COMPLETED = "completed"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass
class DeletionOperation:
    """Deletion operation entity.

    State transitions:
        executing → completed (all succeeded, or nothing was tracked)
        executing → partial (some failed)
        executing → failed (all failed)

    Attributes:
        operation_id: Unique identifier for the operation
        timestamp: When operation was initiated (UTC)
        status: Current execution status
        total_objects: Tracked objects at the start of the cleanup
        succeeded_count: Number successfully deleted (default: 0)
        failed_count: Number that failed to delete (default: 0)
        dry_run: Whether deletes were sent as server-side dry runs
        options: Caller-supplied delete options (optional)
        completed_at: When execution completed (optional)
        duration_seconds: Total execution duration (optional)
    """

    operation_id: str
    timestamp: datetime
    status: OperationStatus
    total_objects: int
    succeeded_count: int = 0
    failed_count: int = 0
    dry_run: bool = False
    options: Optional[Dict[str, Any]] = None
    completed_at: Optional[datetime] = None
    duration_seconds: Optional[float] = None

    def finish(self, completed_at: datetime) -> None:
        """Mark the operation finished and derive its final status."""
        self.completed_at = completed_at
        self.duration_seconds = (completed_at - self.timestamp).total_seconds()

        if self.failed_count == 0:
            self.status = OperationStatus.COMPLETED
        elif self.succeeded_count == 0:
            self.status = OperationStatus.FAILED
        else:
            self.status = OperationStatus.PARTIAL

    def validate(self) -> bool:
        """Validate operation invariants.

        Validation rules:
            - succeeded_count + failed_count == total_objects once finished
            - completed_at must not be before timestamp

        Returns:
            True if validation passes

        Raises:
            ValueError: If any validation rule fails
        """
        if self.status != OperationStatus.EXECUTING:
            if self.succeeded_count + self.failed_count != self.total_objects:
                raise ValueError("Object counts don't match total")

        if self.completed_at and self.completed_at < self.timestamp:
            raise ValueError("Completion time before start time")

        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "operation_id": self.operation_id,
            "timestamp": self.timestamp.isoformat(),
            "status": self.status.value,
            "total_objects": self.total_objects,
            "succeeded_count": self.succeeded_count,
            "failed_count": self.failed_count,
            "dry_run": self.dry_run,
            "options": self.options,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "duration_seconds": self.duration_seconds,
        }
