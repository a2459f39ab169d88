"""Creation tracking and bulk cleanup.

Classes:
    TrackedClient: Wraps an object client and deletes everything it created
    AuditStorage: Audit log storage and retrieval for cleanup operations
"""

from __future__ import annotations

from .audit import AuditStorage
from .client import TrackedClient

__all__ = [
    "TrackedClient",
    "AuditStorage",
]
