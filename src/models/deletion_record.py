"""Deletion record model.

Individual resource removal attempt with result and metadata.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from .resource import Resource


class DeletionStatus(Enum):
    """Individual resource removal status."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    DRY_RUN = "dry-run"


@dataclass(frozen=True)
class RemovalResult:
    """Outcome returned by a resource remover for one resource."""

    success: bool
    error: Optional[str] = None

    @classmethod
    def ok(cls) -> "RemovalResult":
        return cls(success=True)

    @classmethod
    def failed(cls, error: str) -> "RemovalResult":
        return cls(success=False, error=error)


@dataclass
class DeletionRecord:
    """Deletion record entity.

    Represents one resource's outcome within a DeletionOperation, in the order
    the resource appeared in the deletion plan.

    Validation rules:
        - status=succeeded or dry-run: no error_message
        - status=failed: requires error_message
        - position must be >= 0

    Attributes:
        resource: Resource the record is about
        position: Zero-based index in the deletion plan
        status: Removal outcome (succeeded, failed, dry-run)
        error_message: Human-readable error if failed (optional)
        timestamp: When removal was attempted (UTC)
    """

    resource: Resource
    position: int
    status: DeletionStatus
    error_message: Optional[str] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def success(self) -> bool:
        return self.status in (DeletionStatus.SUCCEEDED, DeletionStatus.DRY_RUN)

    @property
    def resource_arn(self) -> str:
        return self.resource.arn

    def validate(self) -> bool:
        """Validate record invariants.

        Returns:
            True if validation passes

        Raises:
            ValueError: If any validation rule fails
        """
        if self.status == DeletionStatus.FAILED:
            if not self.error_message:
                raise ValueError("Failed status requires error_message")
        elif self.error_message:
            raise ValueError(f"{self.status.value} status cannot have an error message")

        if self.position < 0:
            raise ValueError("Position cannot be negative")

        return True
