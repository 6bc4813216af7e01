"""Base class for tag-based resource finders."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Sequence

import boto3

from ...models.resource import Resource, TagFilter, TagMatchMode


class BaseResourceFinder(ABC):
    """Abstract base class for resource finders.

    Each finder covers one service category and returns the resources whose
    tags satisfy a filter set. Finders share no mutable state, so discovery
    can run them concurrently.
    """

    def __init__(self, session: boto3.Session, region: str) -> None:
        """Initialize the finder.

        Args:
            session: boto3 session carrying the credentials/profile
            region: AWS region to search
        """
        self.session = session
        self.region = region
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @property
    @abstractmethod
    def category(self) -> str:
        """Service category name (e.g., "compute")."""

    @property
    @abstractmethod
    def services(self) -> Sequence[str]:
        """Services covered by this finder."""

    @property
    def is_global_service(self) -> bool:
        return False

    @abstractmethod
    def find(self, filters: Sequence[TagFilter], match_mode: TagMatchMode = TagMatchMode.AND) -> List[Resource]:
        """Find resources matching the tag filters.

        Args:
            filters: Tag filters (never empty)
            match_mode: AND (all filters) or OR (any filter)

        Returns:
            Matching resources
        """

    def _create_client(self, service_name: str) -> Any:
        region = "us-east-1" if self.is_global_service else self.region
        return self.session.client(service_name, region_name=region)

    @staticmethod
    def _tags_to_dict(tags: Iterable[Dict[str, str]]) -> Dict[str, str]:
        return {tag["Key"]: tag["Value"] for tag in tags}


class TaggingApiFinder(BaseResourceFinder):
    """Finder backed by the Resource Groups Tagging API.

    Queries GetResources once per service with the filters grouped by key,
    then applies the AND/OR match on the returned tags so both modes behave
    the same for every service.
    """

    def find(self, filters: Sequence[TagFilter], match_mode: TagMatchMode = TagMatchMode.AND) -> List[Resource]:
        client = self._create_client("resourcegroupstaggingapi")
        resources: List[Resource] = []

        for service in self.services:
            found = self._find_service(client, service, filters, match_mode)
            self.logger.debug(f"Found {len(found)} {service} resource(s) in {self.region}")
            resources.extend(found)

        return resources

    def _find_service(
        self,
        client: Any,
        service: str,
        filters: Sequence[TagFilter],
        match_mode: TagMatchMode,
    ) -> List[Resource]:
        resources = []
        seen = set()
        for tag_filters in self._api_tag_filters(filters, match_mode):
            paginator = client.get_paginator("get_resources")
            for page in paginator.paginate(TagFilters=tag_filters, ResourceTypeFilters=[service]):
                for mapping in page.get("ResourceTagMappingList", []):
                    arn = mapping["ResourceARN"]
                    tags = self._tags_to_dict(mapping.get("Tags", []))
                    # OR mode issues one query per filter, so the same ARN can come back twice
                    if arn in seen or not match_mode.matches(filters, tags):
                        continue
                    seen.add(arn)
                    resources.append(Resource.from_arn(arn, tags=tags, region=self.region))
        return resources

    @staticmethod
    def _api_tag_filters(filters: Sequence[TagFilter], match_mode: TagMatchMode) -> List[List[Dict[str, Any]]]:
        """Build the TagFilters argument(s) for GetResources.

        The API ANDs across keys and ORs values within a key, so AND mode is a
        single call with every key and OR mode is one call per filter.
        """
        if match_mode is TagMatchMode.OR:
            return [[{"Key": tag_filter.key, "Values": [tag_filter.value]}] for tag_filter in filters]

        values_by_key: Dict[str, List[str]] = {}
        for tag_filter in filters:
            values = values_by_key.setdefault(tag_filter.key, [])
            if tag_filter.value not in values:
                values.append(tag_filter.value)
        return [[{"Key": key, "Values": values} for key, values in values_by_key.items()]]
