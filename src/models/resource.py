"""Resource and tag filter models.

A Resource is one discovered AWS object. Resources are immutable once a finder
has built them and live only for the duration of a single run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, Mapping, Optional

from ..aws.arn import parse_arn


@dataclass(frozen=True)
class Resource:
    """A discovered AWS resource.

    Attributes:
        arn: Globally unique identity (ARN)
        service: Service category (e.g., "lambda", "s3")
        region: AWS region ("" for global services that report none)
        resource_type: Sub-kind within the service (e.g., "function", "event-source-mapping")
        resource_id: Provider-local name or id, distinct from the ARN
        tags: Tags reported by the finder (not part of identity)
    """

    arn: str
    service: str
    region: str
    resource_type: str
    resource_id: str
    tags: Mapping[str, str] = field(default_factory=dict, compare=False, hash=False)

    @classmethod
    def from_arn(
        cls,
        arn: str,
        tags: Optional[Mapping[str, str]] = None,
        region: Optional[str] = None,
    ) -> "Resource":
        """Build a Resource from its ARN.

        Args:
            arn: Resource ARN
            tags: Resource tags (optional)
            region: Region override for ARNs that omit it (S3, IAM)

        Returns:
            Resource with service, type and id derived from the ARN

        Raises:
            ValueError: If the string is not an ARN
        """
        parsed = parse_arn(arn)
        return cls(
            arn=arn,
            service=parsed.service,
            region=parsed.region or (region or ""),
            resource_type=parsed.resource_type,
            resource_id=parsed.resource_id,
            tags=dict(tags or {}),
        )

    @property
    def kind(self) -> str:
        """Service and type joined as "service/type"."""
        return f"{self.service}/{self.resource_type}"

    def to_dict(self) -> Dict[str, object]:
        return {
            "arn": self.arn,
            "service": self.service,
            "region": self.region,
            "resource_type": self.resource_type,
            "resource_id": self.resource_id,
            "tags": dict(self.tags),
        }


@dataclass(frozen=True)
class TagFilter:
    """A single key/value tag constraint."""

    key: str
    value: str

    def matches(self, tags: Mapping[str, str]) -> bool:
        return tags.get(self.key) == self.value

    def __str__(self) -> str:
        return f"{self.key}={self.value}"


class TagMatchMode(str, Enum):
    """How multiple tag filters combine."""

    AND = "AND"
    OR = "OR"

    def matches(self, filters: Iterable[TagFilter], tags: Mapping[str, str]) -> bool:
        """Check a resource's tags against a filter set.

        Args:
            filters: Tag filters to apply
            tags: Tags carried by the resource

        Returns:
            True if every filter matches (AND) or at least one does (OR)
        """
        results = (tag_filter.matches(tags) for tag_filter in filters)
        if self is TagMatchMode.AND:
            return all(results)
        return any(results)
