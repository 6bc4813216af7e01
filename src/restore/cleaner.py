"""Resource cleaner for deletion runs.

Main orchestrator for tag-selected resource removal with preview (dry-run)
and execution modes.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, List, Optional, Sequence

from src.models.deletion_operation import DeletionOperation, OperationMode, OperationStatus
from src.models.deletion_record import DeletionRecord, DeletionStatus, RemovalResult
from src.models.resource import Resource
from src.restore.deleter import ResourceDeleter
from src.restore.inference import NamingContext
from src.restore.priority import get_optimal_deletion_order

logger = logging.getLogger(__name__)

RecordCallback = Callable[[DeletionRecord], None]


class ConfirmationRequiredError(ValueError):
    """Raised when a destructive run is attempted without confirmation."""


class ResourceCleaner:
    """Resource cleaner orchestrator.

    Computes the deletion plan and hands resources to the remover one at a
    time, in plan order. A failure on one resource is recorded and the run
    moves on to the next, so every planned resource is attempted exactly once.

    Attributes:
        remover: Object with remove(resource, region=, profile=, dry_run=) -> RemovalResult
        naming: App/stage context for dependency inference
    """

    def __init__(self, remover: Optional[Any] = None, naming: Optional[NamingContext] = None) -> None:
        """Initialize resource cleaner.

        Args:
            remover: Resource remover (default: ResourceDeleter)
            naming: App/stage context for dependency inference (optional)
        """
        self.remover = remover if remover is not None else ResourceDeleter()
        self.naming = naming

    def plan(self, resources: Sequence[Resource]) -> List[Resource]:
        """Compute the ordered deletion plan for discovered resources."""
        return get_optimal_deletion_order(resources, naming=self.naming)

    def preview(
        self,
        plan: Sequence[Resource],
        region: Optional[str] = None,
        aws_profile: Optional[str] = None,
        filters: Optional[dict] = None,
        on_record: Optional[RecordCallback] = None,
    ) -> DeletionOperation:
        """Simulate a deletion run without calling the remover.

        Args:
            plan: Ordered deletion plan
            region: AWS region (recorded only)
            aws_profile: AWS profile (recorded only)
            filters: Tag filters that selected the resources (recorded only)
            on_record: Callback invoked with each record as it is produced

        Returns:
            DeletionOperation in planned status with one dry-run record per resource
        """
        started_at = datetime.now(timezone.utc)
        records = []

        for position, resource in enumerate(plan):
            record = DeletionRecord(resource=resource, position=position, status=DeletionStatus.DRY_RUN)
            logger.info(f"[dry-run] Would delete {resource.kind}: {resource.resource_id}")
            records.append(record)
            if on_record is not None:
                on_record(record)

        completed_at = datetime.now(timezone.utc)

        return DeletionOperation(
            operation_id=f"op_{uuid.uuid4()}",
            timestamp=started_at,
            mode=OperationMode.DRY_RUN,
            status=OperationStatus.PLANNED,
            total_resources=len(records),
            succeeded_count=len(records),
            failed_count=0,
            region=region,
            aws_profile=aws_profile,
            filters=filters,
            records=records,
            started_at=started_at,
            completed_at=completed_at,
            duration_seconds=(completed_at - started_at).total_seconds(),
        )

    def execute(
        self,
        plan: Sequence[Resource],
        confirmed: bool = False,
        dry_run: bool = False,
        region: Optional[str] = None,
        aws_profile: Optional[str] = None,
        filters: Optional[dict] = None,
        on_record: Optional[RecordCallback] = None,
    ) -> DeletionOperation:
        """Remove every resource in the plan, sequentially and in order.

        Args:
            plan: Ordered deletion plan
            confirmed: Must be True to remove a non-empty plan
            dry_run: Simulate instead of removing (see preview)
            region: AWS region passed to the remover
            aws_profile: AWS profile passed to the remover
            filters: Tag filters that selected the resources (recorded only)
            on_record: Callback invoked with each record as it is produced

        Returns:
            DeletionOperation with per-resource records

        Raises:
            ConfirmationRequiredError: If the plan is non-empty and not confirmed
        """
        if dry_run:
            return self.preview(plan, region=region, aws_profile=aws_profile, filters=filters, on_record=on_record)

        # Require confirmation for destructive operations
        if plan and not confirmed:
            raise ConfirmationRequiredError(
                f"Deleting {len(plan)} resource(s) requires explicit confirmation. "
                "Set confirmed=True or use --force."
            )

        started_at = datetime.now(timezone.utc)
        succeeded_count = 0
        failed_count = 0
        records = []

        for position, resource in enumerate(plan):
            result = self._remove_resource(resource, region, aws_profile)

            if result.success:
                succeeded_count += 1
                record = DeletionRecord(resource=resource, position=position, status=DeletionStatus.SUCCEEDED)
            else:
                failed_count += 1
                record = DeletionRecord(
                    resource=resource,
                    position=position,
                    status=DeletionStatus.FAILED,
                    error_message=result.error or "Resource deletion failed",
                )
            records.append(record)
            if on_record is not None:
                on_record(record)

        # Determine final status
        if failed_count > 0:
            if succeeded_count > 0:
                final_status = OperationStatus.PARTIAL
            else:
                final_status = OperationStatus.FAILED
        else:
            final_status = OperationStatus.COMPLETED

        completed_at = datetime.now(timezone.utc)
        logger.info(
            f"Deletion finished: {succeeded_count} succeeded, {failed_count} failed "
            f"of {len(plan)} resource(s)"
        )

        return DeletionOperation(
            operation_id=f"op_{uuid.uuid4()}",
            timestamp=started_at,
            mode=OperationMode.EXECUTE,
            status=final_status,
            total_resources=len(plan),
            succeeded_count=succeeded_count,
            failed_count=failed_count,
            region=region,
            aws_profile=aws_profile,
            filters=filters,
            records=records,
            started_at=started_at,
            completed_at=completed_at,
            duration_seconds=(completed_at - started_at).total_seconds(),
        )

    def _remove_resource(
        self,
        resource: Resource,
        region: Optional[str],
        aws_profile: Optional[str],
    ) -> RemovalResult:
        """Remove a single resource, converting remover exceptions into failed results."""
        try:
            result = self.remover.remove(resource, region=region, profile=aws_profile, dry_run=False)
        except Exception as e:
            logger.error(f"Remover raised for {resource.arn}: {e}")
            return RemovalResult.failed(str(e) or type(e).__name__)

        if not result.success:
            logger.warning(f"Failed to delete {resource.kind} {resource.resource_id}: {result.error}")

        return result
