"""Tests for AuditStorage class.

Test coverage for cleanup audit log storage and retrieval with YAML format.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest
import yaml

from trackedclient.models.deletion_operation import DeletionOperation, OperationStatus
from trackedclient.models.deletion_record import DeletionRecord, DeletionStatus
from trackedclient.tracking.audit import AuditStorage


def _operation(operation_id: str, timestamp: datetime) -> DeletionOperation:
    operation = DeletionOperation(
        operation_id=operation_id,
        timestamp=timestamp,
        status=OperationStatus.EXECUTING,
        total_objects=2,
        succeeded_count=1,
        failed_count=1,
    )
    operation.finish(timestamp)
    return operation


def _records(operation_id: str) -> list:
    ts = datetime(2026, 10, 19, 15, 31, 0, tzinfo=timezone.utc)
    return [
        DeletionRecord(
            record_id="rec_001",
            operation_id=operation_id,
            api_version="v1",
            kind="ConfigMap",
            name="test",
            namespace="default",
            uid="uid-1",
            timestamp=ts,
            status=DeletionStatus.SUCCEEDED,
        ),
        DeletionRecord(
            record_id="rec_002",
            operation_id=operation_id,
            api_version="v1",
            kind="Secret",
            name="test-secret",
            namespace="default",
            uid="uid-2",
            timestamp=ts,
            status=DeletionStatus.FAILED,
            error_code="Not Found",
            error_message='secrets "test-secret" not found',
        ),
    ]


class TestAuditStorage:
    """Test suite for AuditStorage class."""

    @pytest.fixture
    def temp_storage_dir(self, tmp_path: Path) -> Path:
        return tmp_path / "audit-logs"

    @pytest.fixture
    def audit_storage(self, temp_storage_dir: Path) -> AuditStorage:
        return AuditStorage(storage_dir=str(temp_storage_dir))

    def test_init_creates_storage_directory(self, temp_storage_dir: Path) -> None:
        assert not temp_storage_dir.exists()

        AuditStorage(storage_dir=str(temp_storage_dir))

        assert temp_storage_dir.is_dir()

    def test_log_operation_creates_yaml_file(self, audit_storage: AuditStorage, temp_storage_dir: Path) -> None:
        """Test logging writes operation and records under year/month."""
        operation = _operation("op_123", datetime(2026, 10, 19, 15, 30, 0, tzinfo=timezone.utc))

        audit_file = audit_storage.log_operation(operation, _records("op_123"))

        assert audit_file == temp_storage_dir / "2026" / "10" / "cleanup-op_123.yaml"
        with open(audit_file) as f:
            data = yaml.safe_load(f)
        assert data["metadata"]["log_type"] == "tracked_cleanup"
        assert data["operation"]["status"] == "partial"
        assert [r["status"] for r in data["records"]] == ["succeeded", "failed"]
        assert data["records"][1]["error_code"] == "Not Found"

    def test_get_operation(self, audit_storage: AuditStorage) -> None:
        operation = _operation("op_456", datetime(2026, 9, 1, tzinfo=timezone.utc))
        audit_storage.log_operation(operation, _records("op_456"))

        data = audit_storage.get_operation("op_456")

        assert data is not None
        assert data["operation"]["operation_id"] == "op_456"

    def test_get_operation_not_found(self, audit_storage: AuditStorage) -> None:
        assert audit_storage.get_operation("op_missing") is None

    def test_query_operations_by_date_range(self, audit_storage: AuditStorage) -> None:
        """Test query filters on operation timestamp."""
        for operation_id, month in (("op_aug", 8), ("op_sep", 9), ("op_oct", 10)):
            operation = _operation(operation_id, datetime(2026, month, 15, tzinfo=timezone.utc))
            audit_storage.log_operation(operation, [])

        results = audit_storage.query_operations(
            since=datetime(2026, 9, 1, tzinfo=timezone.utc),
            until=datetime(2026, 10, 31, tzinfo=timezone.utc),
        )

        assert [r["operation"]["operation_id"] for r in results] == ["op_sep", "op_oct"]

    def test_query_operations_all(self, audit_storage: AuditStorage) -> None:
        audit_storage.log_operation(_operation("op_1", datetime(2026, 1, 1, tzinfo=timezone.utc)), [])

        assert len(audit_storage.query_operations()) == 1
