"""Tracked object model.

Snapshot of an object captured right after it was created through the
tracked client.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class TrackedObject:
    """Kind-agnostic snapshot of a created object.

    The stored document is a private deep copy; to_dict() hands out copies so
    the snapshot cannot change after capture.

    Attributes:
        tracked_at: When the snapshot was captured (UTC)
    """

    _data: Dict[str, Any] = field(repr=False)
    tracked_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc), compare=False)

    @classmethod
    def capture(cls, obj: Dict[str, Any], api_version: str, kind: str) -> "TrackedObject":
        """Capture a snapshot of an unstructured object.

        Args:
            obj: Unstructured object as stored by the server
            api_version: API group/version to stamp on the snapshot
            kind: Kind to stamp on the snapshot

        Returns:
            New TrackedObject

        Raises:
            ValueError: If the object has no metadata.name
        """
        data = copy.deepcopy(obj)
        data["apiVersion"] = api_version
        data["kind"] = kind
        metadata = data.get("metadata")
        if not isinstance(metadata, dict) or not metadata.get("name"):
            raise ValueError(f"{kind} has no metadata.name")
        return cls(_data=data)

    @property
    def api_version(self) -> str:
        return self._data["apiVersion"]

    @property
    def kind(self) -> str:
        return self._data["kind"]

    @property
    def name(self) -> str:
        return self._data["metadata"]["name"]

    @property
    def namespace(self) -> Optional[str]:
        return self._data["metadata"].get("namespace")

    @property
    def uid(self) -> Optional[str]:
        return self._data["metadata"].get("uid")

    def to_dict(self) -> Dict[str, Any]:
        """Return a copy of the captured document."""
        return copy.deepcopy(self._data)

    def __str__(self) -> str:
        if self.namespace:
            return f"{self.kind} {self.namespace}/{self.name}"
        return f"{self.kind} {self.name}"
