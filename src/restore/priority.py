"""Service-priority reconciliation of the topological deletion order.

The dependency graph only covers what inference can see. The priority table
is the explicit policy for everything else: resources are stably re-sorted by
priority (lower first), so the graph decides order only between resources of
equal priority.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from ..models.resource import Resource
from .dependency import build_resource_graph, topological_sort
from .inference import NamingContext

logger = logging.getLogger(__name__)

DEFAULT_PRIORITY = 99.0

SERVICE_PRIORITIES: Dict[str, float] = {
    "events": 1,
    "lambda": 2,
    "apigateway": 3,
    "logs": 4,
    "cloudwatch": 4,
    "s3": 5,
    "dynamodb": 5,
    "sqs": 5,
    "elasticache": 5,
    "rds": 5,
    "ec2": 6,
    "servicediscovery": 6,
    "iam": 7,
}

# Event source mappings go before the functions they feed, functions before other lambda resources
RESOURCE_TYPE_PRIORITIES: Dict[Tuple[str, str], float] = {
    ("lambda", "event-source-mapping"): 1.5,
    ("lambda", "function"): 2.5,
}


def resource_priority(resource: Resource) -> float:
    """Priority for a resource (lower is deleted earlier)."""
    override = RESOURCE_TYPE_PRIORITIES.get((resource.service, resource.resource_type))
    if override is not None:
        return override
    return float(SERVICE_PRIORITIES.get(resource.service, DEFAULT_PRIORITY))


def reconcile_priorities(topo_order: Sequence[Resource]) -> List[Resource]:
    """Stably sort a topological order by service priority.

    Args:
        topo_order: Resources in topological deletion order

    Returns:
        Resources sorted by priority; equal priorities keep their incoming order
    """
    return sorted(topo_order, key=resource_priority)


def get_optimal_deletion_order(
    resources: Sequence[Resource],
    naming: Optional[NamingContext] = None,
) -> List[Resource]:
    """Compute the deletion plan for a resource set.

    Builds the dependency graph, sorts it topologically and applies service
    priorities.

    Args:
        resources: Discovered resources
        naming: App/stage context for name-based dependency inference

    Returns:
        Ordered deletion plan with one entry per distinct resource
    """
    if not resources:
        return []

    graph = build_resource_graph(resources, naming=naming)
    plan = reconcile_priorities(topological_sort(graph))
    logger.debug(f"Deletion plan computed for {len(plan)} resource(s)")
    return plan
