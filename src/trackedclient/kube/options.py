"""Request options for create and delete calls."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Dict, Optional

PROPAGATION_POLICIES = ("Orphan", "Background", "Foreground")


@dataclass(frozen=True)
class CreateOptions:
    """Options applied to a create request.

    Attributes:
        dry_run: Ask the server to validate without persisting
        field_manager: Name of the actor making the change (optional)
    """

    dry_run: bool = False
    field_manager: Optional[str] = None

    def to_params(self) -> Dict[str, Any]:
        """Build query parameters for the dynamic client."""
        params: Dict[str, Any] = {}
        if self.dry_run:
            params["dry_run"] = "All"
        if self.field_manager:
            params["field_manager"] = self.field_manager
        return params


@dataclass(frozen=True)
class Preconditions:
    """Conditions the target must satisfy for a delete to proceed."""

    uid: Optional[str] = None
    resource_version: Optional[str] = None

    def to_dict(self) -> Dict[str, str]:
        data = {}
        if self.uid is not None:
            data["uid"] = self.uid
        if self.resource_version is not None:
            data["resourceVersion"] = self.resource_version
        return data


@dataclass(frozen=True)
class DeleteOptions:
    """Options applied to a delete request.

    Validation rules:
        - grace_period_seconds must be >= 0 if provided
        - propagation_policy must be Orphan, Background or Foreground

    Attributes:
        grace_period_seconds: Seconds before the object is removed (optional)
        propagation_policy: How dependents are garbage collected (optional)
        dry_run: Ask the server to validate without deleting
        preconditions: Must match the stored object or the delete is refused
    """

    grace_period_seconds: Optional[int] = None
    propagation_policy: Optional[str] = None
    dry_run: bool = False
    preconditions: Optional[Preconditions] = None

    def __post_init__(self) -> None:
        if self.grace_period_seconds is not None and self.grace_period_seconds < 0:
            raise ValueError("grace_period_seconds cannot be negative")
        if self.propagation_policy is not None and self.propagation_policy not in PROPAGATION_POLICIES:
            raise ValueError(
                f"Invalid propagation policy: {self.propagation_policy}. "
                f"Must be one of {', '.join(PROPAGATION_POLICIES)}."
            )

    def with_preconditions(self, preconditions: Preconditions) -> "DeleteOptions":
        """Return a copy with the given preconditions replacing any existing ones."""
        return dataclasses.replace(self, preconditions=preconditions)

    def to_body(self) -> Dict[str, Any]:
        """Build a meta/v1 DeleteOptions request body."""
        body: Dict[str, Any] = {"apiVersion": "v1", "kind": "DeleteOptions"}
        if self.grace_period_seconds is not None:
            body["gracePeriodSeconds"] = self.grace_period_seconds
        if self.propagation_policy is not None:
            body["propagationPolicy"] = self.propagation_policy
        if self.dry_run:
            body["dryRun"] = ["All"]
        if self.preconditions is not None:
            preconditions = self.preconditions.to_dict()
            if preconditions:
                body["preconditions"] = preconditions
        return body
