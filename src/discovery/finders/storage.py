"""Storage resource finder."""

from __future__ import annotations

from typing import Sequence

from .base import TaggingApiFinder


class StorageResourceFinder(TaggingApiFinder):
    """Finder for S3 buckets, DynamoDB tables, SQS queues, ElastiCache and RDS."""

    @property
    def category(self) -> str:
        return "storage"

    @property
    def services(self) -> Sequence[str]:
        return ("s3", "dynamodb", "sqs", "elasticache", "rds")
