"""Tests for DeletionOperation model.

Test coverage for deletion run entity with mode/status transitions and validation.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import List

import pytest

from src.models.deletion_operation import DeletionOperation, OperationMode, OperationStatus
from src.models.deletion_record import DeletionRecord, DeletionStatus
from tests.fixtures.resources import create_function

NOW = datetime(2025, 11, 11, 15, 30, 0, tzinfo=timezone.utc)


def _records(*statuses: DeletionStatus) -> List[DeletionRecord]:
    return [
        DeletionRecord(
            resource=create_function(f"fn-{index}"),
            position=index,
            status=status,
            error_message="boom" if status == DeletionStatus.FAILED else None,
        )
        for index, status in enumerate(statuses)
    ]


class TestDeletionOperation:
    """Test suite for DeletionOperation model."""

    def test_create_dry_run_operation(self) -> None:
        """Test creating a planned dry-run operation."""
        operation = DeletionOperation(
            operation_id="op_123",
            timestamp=NOW,
            mode=OperationMode.DRY_RUN,
            status=OperationStatus.PLANNED,
            total_resources=2,
            succeeded_count=2,
            records=_records(DeletionStatus.DRY_RUN, DeletionStatus.DRY_RUN),
        )

        assert operation.is_dry_run is True
        assert operation.exit_code == 0
        assert operation.failed_records == []
        assert operation.validate() is True

    def test_completed_execute_operation(self) -> None:
        """Test an execute run where every resource succeeded."""
        operation = DeletionOperation(
            operation_id="op_124",
            timestamp=NOW,
            mode=OperationMode.EXECUTE,
            status=OperationStatus.COMPLETED,
            total_resources=1,
            succeeded_count=1,
            region="us-east-1",
            aws_profile="dev",
            filters={"tags": [{"key": "sst:stage", "value": "dev"}], "tag_match": "AND"},
            records=_records(DeletionStatus.SUCCEEDED),
            started_at=NOW,
            completed_at=NOW + timedelta(seconds=3),
            duration_seconds=3.0,
        )

        assert operation.is_dry_run is False
        assert operation.exit_code == 0
        assert operation.validate() is True

    def test_partial_operation_exit_code_and_failed_records(self) -> None:
        """Test that any failure makes the exit code nonzero."""
        records = _records(DeletionStatus.SUCCEEDED, DeletionStatus.FAILED)
        operation = DeletionOperation(
            operation_id="op_125",
            timestamp=NOW,
            mode=OperationMode.EXECUTE,
            status=OperationStatus.PARTIAL,
            total_resources=2,
            succeeded_count=1,
            failed_count=1,
            records=records,
        )

        assert operation.exit_code == 1
        assert operation.failed_records == [records[1]]

    def test_validate_counts_mismatch(self) -> None:
        """Test that counts must add up to the total."""
        operation = DeletionOperation(
            operation_id="op_126",
            timestamp=NOW,
            mode=OperationMode.EXECUTE,
            status=OperationStatus.COMPLETED,
            total_resources=2,
            succeeded_count=1,
            records=_records(DeletionStatus.SUCCEEDED),
        )

        with pytest.raises(ValueError, match="Resource counts don't match total"):
            operation.validate()

    def test_validate_record_count_mismatch(self) -> None:
        """Test that there must be one record per planned resource."""
        operation = DeletionOperation(
            operation_id="op_127",
            timestamp=NOW,
            mode=OperationMode.EXECUTE,
            status=OperationStatus.COMPLETED,
            total_resources=2,
            succeeded_count=2,
            records=_records(DeletionStatus.SUCCEEDED),
        )

        with pytest.raises(ValueError, match="Record count doesn't match total"):
            operation.validate()

    def test_validate_completion_before_start(self) -> None:
        """Test that completed_at cannot precede started_at."""
        operation = DeletionOperation(
            operation_id="op_128",
            timestamp=NOW,
            mode=OperationMode.EXECUTE,
            status=OperationStatus.COMPLETED,
            total_resources=0,
            started_at=NOW,
            completed_at=NOW - timedelta(seconds=1),
        )

        with pytest.raises(ValueError, match="Completion time before start time"):
            operation.validate()

    def test_validate_dry_run_requires_planned_status(self) -> None:
        """Test that dry-run operations stay in planned status."""
        operation = DeletionOperation(
            operation_id="op_129",
            timestamp=NOW,
            mode=OperationMode.DRY_RUN,
            status=OperationStatus.COMPLETED,
            total_resources=0,
        )

        with pytest.raises(ValueError, match="Dry-run mode must have planned status"):
            operation.validate()

    def test_validate_dry_run_cannot_fail(self) -> None:
        """Test that dry-run operations never record failures."""
        operation = DeletionOperation(
            operation_id="op_130",
            timestamp=NOW,
            mode=OperationMode.DRY_RUN,
            status=OperationStatus.PLANNED,
            total_resources=1,
            failed_count=1,
            records=_records(DeletionStatus.FAILED),
        )

        with pytest.raises(ValueError, match="Dry-run mode cannot have failures"):
            operation.validate()
