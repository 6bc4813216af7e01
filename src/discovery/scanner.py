"""Parallel resource discovery across finders."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence, Type

import boto3

from ..aws.client import create_session
from ..models.resource import Resource, TagFilter, TagMatchMode
from .finders import (
    BaseResourceFinder,
    ComputeResourceFinder,
    IdentityResourceFinder,
    NetworkingResourceFinder,
    StorageResourceFinder,
)

logger = logging.getLogger(__name__)

DEFAULT_FINDERS: Sequence[Type[BaseResourceFinder]] = (
    ComputeResourceFinder,
    StorageResourceFinder,
    NetworkingResourceFinder,
    IdentityResourceFinder,
)


class DiscoveryError(Exception):
    """A finder failed; the resource set would be incomplete."""

    def __init__(self, category: str, cause: BaseException) -> None:
        super().__init__(f"Discovery failed for {category} resources: {cause}")
        self.category = category
        self.cause = cause


class ResourceDiscovery:
    """Runs every finder concurrently and merges their results.

    Each finder is an independent unit of work. Results are concatenated in
    finder order once all finders have completed; if any finder fails the
    whole discovery fails and no partial set is returned.
    """

    def __init__(self, finders: Sequence[BaseResourceFinder], max_workers: int = 8) -> None:
        """Initialize discovery.

        Args:
            finders: Finder instances to run
            max_workers: Maximum concurrent finders
        """
        self.finders = list(finders)
        self.max_workers = max_workers

    @classmethod
    def for_region(
        cls,
        region: str,
        profile: Optional[str] = None,
        session: Optional[boto3.Session] = None,
        max_workers: int = 8,
    ) -> "ResourceDiscovery":
        """Build discovery with the default finders for one region."""
        session = session or create_session(profile_name=profile, region_name=region)
        return cls([finder_class(session=session, region=region) for finder_class in DEFAULT_FINDERS], max_workers)

    def find(self, filters: Sequence[TagFilter], match_mode: TagMatchMode = TagMatchMode.AND) -> List[Resource]:
        """Find resources matching the tag filters across all finders.

        Args:
            filters: Tag filters (must not be empty)
            match_mode: AND or OR

        Returns:
            Resources in finder order, duplicates (same ARN) removed

        Raises:
            ValueError: If no filters are given
            DiscoveryError: If any finder fails
        """
        if not filters:
            raise ValueError("At least one tag filter is required")

        if not self.finders:
            return []

        logger.debug(f"Running {len(self.finders)} finder(s) with {match_mode.value} match on {len(filters)} tag(s)")

        workers = max(1, min(self.max_workers, len(self.finders)))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(finder.find, filters, match_mode) for finder in self.finders]

            results = []
            for finder, future in zip(self.finders, futures):
                try:
                    results.append(future.result())
                except Exception as e:
                    logger.error(f"{finder.category} finder failed: {e}")
                    raise DiscoveryError(finder.category, e) from e

        resources: List[Resource] = []
        seen = set()
        for found in results:
            for resource in found:
                if resource.arn in seen:
                    continue
                seen.add(resource.arn)
                resources.append(resource)

        logger.info(f"Discovered {len(resources)} resource(s)")
        return resources
