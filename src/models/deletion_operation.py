"""Deletion operation model.

Represents a complete deletion run with its filters, mode and per-resource records.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from .deletion_record import DeletionRecord, DeletionStatus


class OperationMode(Enum):
    """Operation execution mode."""

    DRY_RUN = "dry-run"
    EXECUTE = "execute"


class OperationStatus(Enum):
    """Operation execution status."""

    PLANNED = "planned"
    COMPLETED = "completed"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass
class DeletionOperation:
    """Deletion operation entity.

    State transitions:
        dry-run  → planned
        execute  → completed (all succeeded, or nothing to delete)
        execute  → partial (some failed)
        execute  → failed (all failed)

    Attributes:
        operation_id: Unique identifier for the operation
        timestamp: When the operation was initiated (UTC)
        mode: dry-run or execute
        status: Final status
        total_resources: Resources in the deletion plan
        succeeded_count: Resources removed (or simulated in dry-run)
        failed_count: Resources whose removal failed
        region: AWS region used for removal calls (optional)
        aws_profile: AWS profile used for credentials (optional)
        filters: Tag filters and match mode that selected the resources (optional)
        records: Per-resource records in plan order
        started_at: When removal started (optional)
        completed_at: When removal finished (optional)
        duration_seconds: Total duration (optional)
    """

    operation_id: str
    timestamp: datetime
    mode: OperationMode
    status: OperationStatus
    total_resources: int
    succeeded_count: int = 0
    failed_count: int = 0
    region: Optional[str] = None
    aws_profile: Optional[str] = None
    filters: Optional[dict] = field(default=None)
    records: List[DeletionRecord] = field(default_factory=list)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    duration_seconds: Optional[float] = None

    @property
    def is_dry_run(self) -> bool:
        return self.mode == OperationMode.DRY_RUN

    @property
    def failed_records(self) -> List[DeletionRecord]:
        return [record for record in self.records if record.status == DeletionStatus.FAILED]

    @property
    def exit_code(self) -> int:
        """Process exit code: 0 for a dry-run or an all-success run, 1 otherwise."""
        if self.is_dry_run or self.failed_count == 0:
            return 0
        return 1

    def validate(self) -> bool:
        """Validate operation invariants.

        Validation rules:
            - succeeded_count + failed_count == total_resources
            - one record per planned resource
            - completed_at must be after started_at
            - dry-run mode must have planned status and no failures

        Returns:
            True if validation passes

        Raises:
            ValueError: If any validation rule fails
        """
        if self.succeeded_count + self.failed_count != self.total_resources:
            raise ValueError("Resource counts don't match total")

        if len(self.records) != self.total_resources:
            raise ValueError("Record count doesn't match total")

        if self.completed_at and self.started_at:
            if self.completed_at < self.started_at:
                raise ValueError("Completion time before start time")

        if self.mode == OperationMode.DRY_RUN:
            if self.status != OperationStatus.PLANNED:
                raise ValueError("Dry-run mode must have planned status")
            if self.failed_count:
                raise ValueError("Dry-run mode cannot have failures")

        return True
