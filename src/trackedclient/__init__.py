"""Kubernetes object client that tracks what it creates.

Typical use in test fixtures:

    client = trackedclient.new()
    client.create(config_map)
    ...
    client.delete_all_tracked()
"""

from __future__ import annotations

from typing import Optional

from .config import Config
from .errors import SnapshotError, TrackedClientError, TrackedDeletionError, UnregisteredKindError
from .kube.client import KubernetesClient, ObjectClient, create_dynamic_client
from .kube.options import CreateOptions, DeleteOptions, Preconditions
from .kube.scheme import Scheme, default_scheme
from .models.tracked_object import TrackedObject
from .tracking import AuditStorage, TrackedClient

__all__ = [
    "new",
    "Config",
    "TrackedClient",
    "KubernetesClient",
    "ObjectClient",
    "AuditStorage",
    "TrackedObject",
    "Scheme",
    "default_scheme",
    "CreateOptions",
    "DeleteOptions",
    "Preconditions",
    "TrackedClientError",
    "SnapshotError",
    "UnregisteredKindError",
    "TrackedDeletionError",
]


def new(
    config: Optional[Config] = None,
    scheme: Optional[Scheme] = None,
    audit_storage: Optional[AuditStorage] = None,
) -> TrackedClient:
    """Create a tracked client connected to a cluster.

    Args:
        config: Connection settings (default: Config.load())
        scheme: Type registry for typed models (default: default_scheme())
        audit_storage: Cleanup audit log storage (default: from config.audit_dir, if set)

    Returns:
        TrackedClient wrapping a KubernetesClient
    """
    if config is None:
        config = Config.load()

    if audit_storage is None and config.audit_dir:
        audit_storage = AuditStorage(config.audit_dir)

    kube_client = KubernetesClient(
        create_dynamic_client(config),
        scheme=scheme,
        field_manager=config.field_manager,
    )
    return TrackedClient(kube_client, audit_storage=audit_storage)
