"""Deletion record model.

Individual tracked-object deletion attempt with result and metadata.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class DeletionStatus(Enum):
    """Individual object deletion status."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class DeletionRecord:
    """Deletion record entity.

    Represents an individual object deletion attempt with result and metadata.
    Each record belongs to a DeletionOperation and tracks the outcome for a single
    tracked object.

    Validation rules:
        - status=succeeded: no error_code or error_message
        - status=failed: requires error_code
        - kind and name must be non-empty

    Attributes:
        record_id: Unique identifier for this record
        operation_id: Parent operation identifier
        api_version: API group/version of the object
        kind: Object kind
        name: Object name
        namespace: Object namespace (None for cluster-scoped kinds)
        uid: UID precondition sent with the delete (optional)
        timestamp: When deletion was attempted (UTC)
        status: Deletion outcome (succeeded, failed)
        error_code: API error reason if failed (optional)
        error_message: Human-readable error if failed (optional)
    """

    record_id: str
    operation_id: str
    api_version: str
    kind: str
    name: str
    namespace: Optional[str]
    uid: Optional[str]
    timestamp: datetime
    status: DeletionStatus
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    def validate(self) -> bool:
        """Validate record invariants.

        Returns:
            True if validation passes

        Raises:
            ValueError: If any validation rule fails
        """
        if self.status == DeletionStatus.FAILED:
            if not self.error_code:
                raise ValueError("Failed status requires error_code")
        elif self.status == DeletionStatus.SUCCEEDED:
            if self.error_code or self.error_message:
                raise ValueError("Succeeded status cannot have an error")

        if not self.kind or not self.name:
            raise ValueError("Record requires kind and name")

        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "record_id": self.record_id,
            "operation_id": self.operation_id,
            "api_version": self.api_version,
            "kind": self.kind,
            "namespace": self.namespace,
            "name": self.name,
            "uid": self.uid,
            "timestamp": self.timestamp.isoformat(),
            "status": self.status.value,
            "error_code": self.error_code,
            "error_message": self.error_message,
        }
