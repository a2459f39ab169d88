"""Audit storage for cleanup operations.

Stores and retrieves cleanup audit logs in YAML format for troubleshooting.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

import yaml

from ..models.deletion_operation import DeletionOperation
from ..models.deletion_record import DeletionRecord


class AuditStorage:
    """Audit log storage and retrieval.

    Stores cleanup operation audit logs as YAML files organized by year/month.
    Supports querying operations by date range and retrieving detailed operation logs.

    Storage structure:
        <storage_dir>/
            2026/
                10/
                    cleanup-op_123.yaml
                    cleanup-op_456.yaml

    Attributes:
        storage_dir: Base directory for audit logs
    """

    def __init__(self, storage_dir: Optional[str] = None) -> None:
        """Initialize audit storage.

        Args:
            storage_dir: Base directory for audit logs (default: ~/.trackedclient/audit-logs)
        """
        if storage_dir is None:
            storage_dir = str(Path.home() / ".trackedclient" / "audit-logs")

        self.storage_dir = Path(storage_dir)
        self.storage_dir.mkdir(parents=True, exist_ok=True)

    def log_operation(self, operation: DeletionOperation, records: List[DeletionRecord]) -> Path:
        """Log cleanup operation to audit storage.

        Overwrites existing log if operation ID already exists.

        Args:
            operation: Cleanup operation to log
            records: Deletion records for this operation

        Returns:
            Path of the written audit file
        """
        year_month_dir = self.storage_dir / str(operation.timestamp.year) / f"{operation.timestamp.month:02d}"
        year_month_dir.mkdir(parents=True, exist_ok=True)

        audit_data = {
            "metadata": {
                "version": "1.0",
                "log_type": "tracked_cleanup",
                "created_at": datetime.now(timezone.utc).isoformat(),
            },
            "operation": operation.to_dict(),
            "records": [record.to_dict() for record in records],
        }

        audit_file = year_month_dir / f"cleanup-{operation.operation_id}.yaml"
        with open(audit_file, "w") as f:
            yaml.safe_dump(audit_data, f, default_flow_style=False, sort_keys=False)
        return audit_file

    def get_operation(self, operation_id: str) -> Optional[dict]:
        """Retrieve operation audit log by ID.

        Args:
            operation_id: Operation ID to retrieve

        Returns:
            Audit log dictionary if found, None otherwise
        """
        for audit_file in self.storage_dir.glob(f"*/*/cleanup-{operation_id}.yaml"):
            with open(audit_file, "r") as f:
                return yaml.safe_load(f)

        return None

    def query_operations(self, since: Optional[datetime] = None, until: Optional[datetime] = None) -> List[dict]:
        """Query operations within date range.

        Args:
            since: Start time (inclusive, timezone-aware), None for all
            until: End time (inclusive, timezone-aware), None for all

        Returns:
            Operation audit logs matching criteria, oldest directory first
        """
        results = []

        for year_dir in sorted(self.storage_dir.glob("*")):
            if not year_dir.is_dir():
                continue

            for month_dir in sorted(year_dir.glob("*")):
                if not month_dir.is_dir():
                    continue

                for audit_file in sorted(month_dir.glob("cleanup-*.yaml")):
                    with open(audit_file, "r") as f:
                        audit_data = yaml.safe_load(f)

                    timestamp = datetime.fromisoformat(audit_data["operation"]["timestamp"])

                    if since and timestamp < since:
                        continue
                    if until and timestamp > until:
                        continue

                    results.append(audit_data)

        return results
