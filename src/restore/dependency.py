"""Dependency graph construction and deletion ordering.

The graph keeps a single adjacency mapping (resource ARN -> ARNs it depends on).
Dependents and dependent counts are derived from it when needed, so the two
directions can never disagree.

Deletion order uses Kahn's algorithm on remaining dependents: a resource is
safe to remove once nothing left in the graph depends on it.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from ..models.resource import Resource
from .inference import NamingContext, ResourceIndex, infer_dependencies

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResourceNode:
    """Read-only view of one graph node."""

    resource: Resource
    dependencies: Tuple[str, ...]
    dependents: Tuple[str, ...]


class ResourceGraph:
    """Dependency graph over discovered resources.

    Attributes:
        nodes: ARN -> Resource, in discovery (insertion) order
        edges: ARN -> ARNs the resource depends on, in insertion order
    """

    def __init__(self) -> None:
        self.nodes: Dict[str, Resource] = {}
        self.edges: Dict[str, List[str]] = {}

    def __len__(self) -> int:
        return len(self.nodes)

    def __contains__(self, arn: object) -> bool:
        return arn in self.nodes

    def __iter__(self) -> Iterator[str]:
        return iter(self.nodes)

    def add_resource(self, resource: Resource) -> bool:
        """Add a node; returns False if the ARN is already present."""
        if resource.arn in self.nodes:
            return False
        self.nodes[resource.arn] = resource
        self.edges[resource.arn] = []
        return True

    def add_dependency(self, resource_arn: str, dependency_arn: str) -> bool:
        """Record that resource_arn depends on dependency_arn.

        Edges to or from unknown nodes, self-edges and duplicates are ignored.

        Returns:
            True if a new edge was added
        """
        if resource_arn not in self.nodes or dependency_arn not in self.nodes:
            return False
        if resource_arn == dependency_arn:
            return False

        dependencies = self.edges[resource_arn]
        if dependency_arn in dependencies:
            return False

        dependencies.append(dependency_arn)
        return True

    def dependencies_of(self, arn: str) -> List[str]:
        return list(self.edges.get(arn, []))

    def dependents_of(self, arn: str) -> List[str]:
        return [source for source, targets in self.edges.items() if arn in targets]

    def dependent_counts(self) -> Dict[str, int]:
        counts = {arn: 0 for arn in self.nodes}
        for targets in self.edges.values():
            for target in targets:
                counts[target] += 1
        return counts

    def node(self, arn: str) -> ResourceNode:
        """Return the node view for an ARN.

        Raises:
            KeyError: If the ARN is not in the graph
        """
        return ResourceNode(
            resource=self.nodes[arn],
            dependencies=tuple(self.edges[arn]),
            dependents=tuple(self.dependents_of(arn)),
        )

    @property
    def edge_count(self) -> int:
        return sum(len(targets) for targets in self.edges.values())


def build_resource_graph(
    resources: Sequence[Resource],
    naming: Optional[NamingContext] = None,
) -> ResourceGraph:
    """Build the dependency graph for a resource set.

    Args:
        resources: Discovered resources (first occurrence of an ARN wins)
        naming: App/stage context for name-based inference

    Returns:
        ResourceGraph with one node per distinct ARN
    """
    graph = ResourceGraph()
    for resource in resources:
        if not graph.add_resource(resource):
            logger.debug(f"Ignoring duplicate resource {resource.arn}")

    index = ResourceIndex(list(graph.nodes.values()), naming=naming)
    for resource in graph.nodes.values():
        for dependency_arn in infer_dependencies(resource, index):
            if graph.add_dependency(resource.arn, dependency_arn):
                logger.debug(f"{resource.arn} depends on {dependency_arn}")

    logger.debug(f"Built dependency graph: {len(graph)} resources, {graph.edge_count} dependencies")
    return graph


def _kahn(graph: ResourceGraph) -> Tuple[List[str], Dict[str, int]]:
    remaining = graph.dependent_counts()
    queue = deque(arn for arn in graph.nodes if remaining[arn] == 0)
    ordered: List[str] = []

    while queue:
        arn = queue.popleft()
        ordered.append(arn)
        for dependency in graph.edges[arn]:
            remaining[dependency] -= 1
            if remaining[dependency] == 0:
                queue.append(dependency)

    return ordered, remaining


def topological_sort(graph: ResourceGraph) -> List[Resource]:
    """Order resources so dependents come before their dependencies.

    Resources left unordered (dependency cycles) are appended in insertion
    order, so the result always holds every resource exactly once.

    Args:
        graph: Dependency graph

    Returns:
        Resources in deletion order
    """
    ordered, _ = _kahn(graph)

    if len(ordered) != len(graph.nodes):
        processed = set(ordered)
        unresolved = [arn for arn in graph.nodes if arn not in processed]
        logger.warning(
            f"Dependency cycle among {len(unresolved)} resource(s); " "falling back to discovery order for them"
        )
        ordered.extend(unresolved)

    return [graph.nodes[arn] for arn in ordered]
