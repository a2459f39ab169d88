"""Tracked client.

Wraps an object client, remembers every object created through it and
deletes them all on request.
"""

from __future__ import annotations

import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import yaml

from ..errors import SnapshotError, TrackedDeletionError, UnregisteredKindError, error_details
from ..kube.client import ObjectClient
from ..kube.options import CreateOptions, DeleteOptions, Preconditions
from ..kube.scheme import object_key, to_unstructured
from ..models.deletion_operation import DeletionOperation, OperationStatus
from ..models.deletion_record import DeletionRecord, DeletionStatus
from ..models.tracked_object import TrackedObject
from .audit import AuditStorage

logger = logging.getLogger(__name__)


class TrackedClient:
    """Object client that tracks created objects for bulk deletion.

    Only create is intercepted. Every other attribute (get, list, update,
    patch, update_status, patch_status, delete, watch, scheme, ...) is the
    wrapped client's own and behaves exactly as it does there.

    The tracking log belongs to this instance and is guarded by a single lock:
    create holds it for the append only, delete_all_tracked for the whole
    delete-and-clear pass.

    Attributes:
        client: Wrapped object client
        audit_storage: Where cleanup operations are logged (optional)
    """

    def __init__(self, client: ObjectClient, audit_storage: Optional[AuditStorage] = None) -> None:
        self.client = client
        self.audit_storage = audit_storage
        self._tracked: List[TrackedObject] = []
        self._lock = threading.Lock()

    def __getattr__(self, name: str) -> Any:
        # Only called for attributes not found on the wrapper itself
        client = self.__dict__.get("client")
        if client is None:
            raise AttributeError(name)
        return getattr(client, name)

    def create(
        self,
        obj: Any,
        options: Optional[CreateOptions] = None,
        request_timeout: Optional[float] = None,
    ) -> Dict[str, Any]:
        """Create an object and track it for later deletion.

        Args:
            obj: Typed model or unstructured dict
            options: Create options (optional)
            request_timeout: Per-request timeout in seconds (optional)

        Returns:
            The created object as returned by the wrapped client

        Raises:
            SnapshotError: If the object was created but could not be tracked
        """
        created = self.client.create(obj, options=options, request_timeout=request_timeout)

        if options is not None and options.dry_run:
            # Nothing was persisted
            return created

        tracked = self._capture(obj, created)
        with self._lock:
            self._tracked.append(tracked)

        logger.debug(f"Tracking {tracked} uid={tracked.uid}")
        return created

    def _capture(self, obj: Any, created: Any) -> TrackedObject:
        """Build the snapshot of a created object.

        apiVersion and kind come from the type of the object the caller passed
        in, since the created copy may not carry them. The created copy's own
        fields are used only when the type is unknown to the scheme.
        """
        try:
            data = to_unstructured(created)
            try:
                api_version, kind = self.client.scheme.gvk_for_object(obj)
            except UnregisteredKindError:
                if not data.get("apiVersion") or not data.get("kind"):
                    raise
                api_version, kind = data["apiVersion"], data["kind"]
            return TrackedObject.capture(data, api_version, kind)
        except SnapshotError as e:
            logger.error(f"Created {_describe(created)} but could not track it: {e}")
            raise
        except ValueError as e:
            logger.error(f"Created {_describe(created)} but could not track it: {e}")
            raise SnapshotError(f"Created {_describe(created)} but could not track it: {e}") from e

    def tracked_objects(self) -> List[TrackedObject]:
        """Return the objects currently tracked, in creation order."""
        with self._lock:
            return list(self._tracked)

    def delete_all_tracked(
        self,
        options: Optional[DeleteOptions] = None,
        request_timeout: Optional[float] = None,
    ) -> DeletionOperation:
        """Delete every tracked object and clear the tracking log.

        Each delete carries a UID precondition so an object recreated under
        the same name is left alone. A failed delete does not stop the others,
        and the log is cleared whatever the outcome.

        Args:
            options: Delete options applied to every delete (optional);
                any preconditions in them are replaced by the UID precondition
            request_timeout: Per-request timeout in seconds (optional)

        Returns:
            Summary of the cleanup, with status completed

        Raises:
            TrackedDeletionError: If one or more deletes failed
        """
        options = options or DeleteOptions()
        errors: List[Exception] = []
        records: List[DeletionRecord] = []

        with self._lock:
            operation = DeletionOperation(
                operation_id=f"op_{uuid.uuid4()}",
                timestamp=datetime.now(timezone.utc),
                status=OperationStatus.EXECUTING,
                total_objects=len(self._tracked),
                dry_run=options.dry_run,
                options=options.to_body(),
            )

            try:
                for tracked in self._tracked:
                    guarded = options.with_preconditions(Preconditions(uid=tracked.uid))
                    try:
                        self.client.delete(tracked.to_dict(), options=guarded, request_timeout=request_timeout)
                    except Exception as e:
                        errors.append(e)
                        records.append(self._record(operation, tracked, e))
                        logger.warning(f"Failed to delete tracked {tracked}: {e}")
                    else:
                        records.append(self._record(operation, tracked))
                        logger.debug(f"Deleted tracked {tracked}")
            finally:
                self._tracked = []

            operation.succeeded_count = operation.total_objects - len(errors)
            operation.failed_count = len(errors)
            operation.finish(datetime.now(timezone.utc))

        if operation.total_objects and self.audit_storage is not None:
            self._log_audit(operation, records)

        if errors:
            logger.error(f"Failed to delete {len(errors)} of {operation.total_objects} tracked objects")
            raise TrackedDeletionError(errors, records) from errors[0]

        logger.info(f"Deleted {operation.total_objects} tracked objects")
        return operation

    @staticmethod
    def _record(
        operation: DeletionOperation, tracked: TrackedObject, error: Optional[Exception] = None
    ) -> DeletionRecord:
        error_code, error_message = error_details(error) if error is not None else (None, None)
        return DeletionRecord(
            record_id=f"rec_{uuid.uuid4()}",
            operation_id=operation.operation_id,
            api_version=tracked.api_version,
            kind=tracked.kind,
            name=tracked.name,
            namespace=tracked.namespace,
            uid=tracked.uid,
            timestamp=datetime.now(timezone.utc),
            status=DeletionStatus.FAILED if error is not None else DeletionStatus.SUCCEEDED,
            error_code=error_code,
            error_message=error_message,
        )

    def _log_audit(self, operation: DeletionOperation, records: List[DeletionRecord]) -> None:
        try:
            audit_file = self.audit_storage.log_operation(operation, records)
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to write audit log for {operation.operation_id}: {e}")
        else:
            logger.debug(f"Wrote audit log {audit_file}")


def _describe(obj: Any) -> str:
    if not isinstance(obj, dict):
        return type(obj).__name__
    namespace, name = object_key(obj)
    kind = obj.get("kind") or "object"
    return f"{kind} {namespace}/{name}" if namespace else f"{kind} {name}"
