"""Integration tests for tracked cleanup.

End-to-end tests of create-then-cleanup against an in-memory object store.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest
from kubernetes.dynamic.exceptions import ConflictError, NotFoundError

from tests.fixtures.fake_store import FakeObjectClient
from tests.fixtures.objects import create_config_map, create_secret, create_unstructured
from trackedclient.errors import TrackedDeletionError
from trackedclient.models.deletion_operation import OperationStatus
from trackedclient.tracking.audit import AuditStorage
from trackedclient.tracking.client import TrackedClient


class TestCleanupWorkflowIntegration:
    """Integration tests for create and delete_all_tracked."""

    @pytest.fixture
    def store(self) -> FakeObjectClient:
        return FakeObjectClient()

    @pytest.fixture
    def tracked_client(self, store: FakeObjectClient) -> TrackedClient:
        return TrackedClient(store)

    def test_config_map_and_secret_are_cleaned_up(
        self, tracked_client: TrackedClient, store: FakeObjectClient
    ) -> None:
        """Test both objects are gone after cleanup and nothing stays tracked."""
        tracked_client.create(create_config_map(name="test"))
        tracked_client.create(create_secret(name="test-secret"))
        assert store.exists("v1", "ConfigMap", "test", "default")
        assert store.exists("v1", "Secret", "test-secret", "default")

        tracked_client.delete_all_tracked()

        assert not store.exists("v1", "ConfigMap", "test", "default")
        assert not store.exists("v1", "Secret", "test-secret", "default")
        assert tracked_client.tracked_objects() == []
        with pytest.raises(NotFoundError):
            tracked_client.get("v1", "ConfigMap", "test", namespace="default")

    def test_out_of_band_delete_reports_failure_and_clears_log(
        self, tracked_client: TrackedClient, store: FakeObjectClient
    ) -> None:
        """Test an object removed elsewhere shows up as one failure."""
        tracked_client.create(create_config_map(name="test"))
        store.delete(create_config_map(name="test"))

        with pytest.raises(TrackedDeletionError) as exc_info:
            tracked_client.delete_all_tracked()

        assert len(exc_info.value.errors) == 1
        assert isinstance(exc_info.value.errors[0], NotFoundError)
        assert tracked_client.tracked_objects() == []

    def test_recreated_object_is_protected_by_uid(
        self, tracked_client: TrackedClient, store: FakeObjectClient
    ) -> None:
        """Test an object recreated under the same name survives cleanup."""
        tracked_client.create(create_config_map(name="test"))
        store.delete(create_config_map(name="test"))
        replacement = store.create(create_config_map(name="test"))

        with pytest.raises(TrackedDeletionError) as exc_info:
            tracked_client.delete_all_tracked()

        assert isinstance(exc_info.value.errors[0], ConflictError)
        stored = store.get("v1", "ConfigMap", "test", namespace="default")
        assert stored["metadata"]["uid"] == replacement["metadata"]["uid"]

    def test_partial_failure_deletes_the_rest(self, tracked_client: TrackedClient, store: FakeObjectClient) -> None:
        """Test M failures out of N leave exactly N-M objects deleted."""
        names = [f"cm-{i}" for i in range(5)]
        for name in names:
            tracked_client.create(create_config_map(name=name))
        for name in ("cm-1", "cm-3"):
            store.delete(create_config_map(name=name))
        before = len(store.objects)

        with pytest.raises(TrackedDeletionError) as exc_info:
            tracked_client.delete_all_tracked()

        assert exc_info.value.failed_count == 2
        assert before - len(store.objects) == 3
        assert store.objects == {}
        assert "cm-1" in str(exc_info.value)
        assert "cm-3" in str(exc_info.value)

    def test_failed_create_is_not_tracked(self, tracked_client: TrackedClient, store: FakeObjectClient) -> None:
        """Test a create rejected by the store leaves the log unchanged."""
        tracked_client.create(create_unstructured(name="w1"))

        with pytest.raises(ConflictError):
            tracked_client.create(create_unstructured(name="w1"))

        assert len(tracked_client.tracked_objects()) == 1
        tracked_client.delete_all_tracked()
        assert len(store.delete_calls) == 1

    def test_concurrent_creates_are_all_tracked(
        self, tracked_client: TrackedClient, store: FakeObjectClient
    ) -> None:
        """Test K concurrent creates leave exactly K tracked objects."""
        count = 50

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(lambda i: tracked_client.create(create_config_map(name=f"cm-{i}")), range(count)))

        assert len(tracked_client.tracked_objects()) == count
        operation = tracked_client.delete_all_tracked()
        assert operation.succeeded_count == count
        assert store.objects == {}

    def test_cleanup_is_audited(self, store: FakeObjectClient, tmp_path: Path) -> None:
        """Test a partial cleanup is written to the audit log."""
        audit_storage = AuditStorage(str(tmp_path / "audit"))
        tracked_client = TrackedClient(store, audit_storage=audit_storage)
        tracked_client.create(create_config_map(name="test"))
        tracked_client.create(create_secret(name="test-secret"))
        store.delete(create_secret(name="test-secret"))

        with pytest.raises(TrackedDeletionError) as exc_info:
            tracked_client.delete_all_tracked()

        operation_id = exc_info.value.records[0].operation_id
        audit = audit_storage.get_operation(operation_id)
        assert audit["operation"]["status"] == OperationStatus.PARTIAL.value
        assert audit["operation"]["failed_count"] == 1
        assert [r["kind"] for r in audit["records"]] == ["ConfigMap", "Secret"]
