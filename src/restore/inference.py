"""Static dependency inference between discovered resources.

Maps a resource and the full resource set to the ARNs the resource depends on
("A depends on B" means B must survive until A is gone). Inference is purely
heuristic: it reads naming conventions only, never calls AWS, and contributes
nothing when a pattern does not match.

Rules are dispatched through RULES, keyed by (service, resource_type).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

from ..models.resource import Resource

LAMBDA_LOG_GROUP_PREFIX = "/aws/lambda/"

EVENT_RULE_PATTERN = re.compile(r"([A-Z][a-zA-Z0-9]+)(?:Schedule|Handler|Rule)")
IAM_ROLE_PATTERN = re.compile(r"([A-Z][a-zA-Z0-9]+)(?:Role|role)")
RDS_INSTANCE_PATTERN = re.compile(r"^(.+?)(?:-\d+)?$")


@dataclass(frozen=True)
class NamingContext:
    """App and stage names used to build prefixed resource names ("<app>-<stage>-<name>")."""

    app: Optional[str] = None
    stage: Optional[str] = None

    @property
    def prefix(self) -> Optional[str]:
        if self.app and self.stage:
            return f"{self.app}-{self.stage}-"
        return None


class ResourceIndex:
    """Lookup tables over a resource set, built once per graph build."""

    def __init__(self, resources: Sequence[Resource], naming: Optional[NamingContext] = None) -> None:
        self.resources = list(resources)
        self.naming = naming or NamingContext()
        self.functions: Dict[str, Resource] = {}
        self.by_kind: Dict[Tuple[str, str], List[Resource]] = {}

        for resource in self.resources:
            if resource.service == "lambda" and resource.resource_type == "function":
                self.functions[resource.resource_id] = resource
            self.by_kind.setdefault((resource.service, resource.resource_type), []).append(resource)

    def of_kind(self, service: str, resource_type: str) -> List[Resource]:
        return self.by_kind.get((service, resource_type), [])


Rule = Callable[[Resource, ResourceIndex], List[str]]


def _event_source_mapping(resource: Resource, index: ResourceIndex) -> List[str]:
    # Mapping ids look like "<function-name>:<uuid>" or just "<function-name>"
    function_name = resource.resource_id.split(":")[0]
    function = index.functions.get(function_name)
    return [function.arn] if function else []


def _event_rule(resource: Resource, index: ResourceIndex) -> List[str]:
    rule_name = resource.resource_id
    match = EVENT_RULE_PATTERN.search(rule_name)
    if not match:
        return []

    candidate = match.group(1)
    function = index.functions.get(candidate)

    prefix = index.naming.prefix
    if function is None and prefix and f"-{index.naming.stage}-" in rule_name:
        function = index.functions.get(prefix + candidate)

    return [function.arn] if function else []


def _log_group(resource: Resource, index: ResourceIndex) -> List[str]:
    if not resource.resource_id.startswith(LAMBDA_LOG_GROUP_PREFIX):
        return []

    function_name = resource.resource_id[len(LAMBDA_LOG_GROUP_PREFIX) :].split("/")[0]
    function = index.functions.get(function_name)
    return [function.arn] if function else []


def _rds_instance(resource: Resource, index: ResourceIndex) -> List[str]:
    # Cluster members are commonly named "<cluster>-<n>"
    match = RDS_INSTANCE_PATTERN.match(resource.resource_id)
    if not match:
        return []

    cluster_name = match.group(1)
    for cluster in index.of_kind("rds", "cluster"):
        if cluster.resource_id == cluster_name:
            return [cluster.arn]
    return []


def _cache_cluster(resource: Resource, index: ResourceIndex) -> List[str]:
    for group in index.of_kind("elasticache", "replication-group"):
        if resource.resource_id in group.resource_id:
            return [group.arn]
    return []


def _iam_role(resource: Resource, index: ResourceIndex) -> List[str]:
    match = IAM_ROLE_PATTERN.search(resource.resource_id)
    if not match:
        return []

    # The role is deleted after the function that assumes it
    function = index.functions.get(match.group(1))
    return [function.arn] if function else []


def _no_dependencies(resource: Resource, index: ResourceIndex) -> List[str]:
    return []


RULES: Dict[Tuple[str, str], Rule] = {
    ("lambda", "event-source-mapping"): _event_source_mapping,
    ("lambda", "function"): _no_dependencies,
    ("events", "rule"): _event_rule,
    ("logs", "log-group"): _log_group,
    ("rds", "db"): _rds_instance,
    ("elasticache", "cluster"): _cache_cluster,
    ("iam", "role"): _iam_role,
    # Networking resources depend on their VPC, which is not modelled here;
    # removers detach/disassociate what AWS requires at delete time.
    ("ec2", "route-table"): _no_dependencies,
    ("ec2", "subnet"): _no_dependencies,
    ("ec2", "security-group"): _no_dependencies,
    ("ec2", "internet-gateway"): _no_dependencies,
    ("ec2", "nat-gateway"): _no_dependencies,
}


def infer_dependencies(
    resource: Resource,
    all_resources: Union[ResourceIndex, Sequence[Resource]],
    naming: Optional[NamingContext] = None,
) -> List[str]:
    """Infer the ARNs a resource depends on.

    Args:
        resource: Resource to inspect
        all_resources: Full discovered set, or a prebuilt ResourceIndex over it
        naming: App/stage context for prefixed name lookups (ignored when an
            index is passed, which carries its own)

    Returns:
        ARNs of resources this resource depends on (empty when no rule matches)
    """
    if isinstance(all_resources, ResourceIndex):
        index = all_resources
    else:
        index = ResourceIndex(all_resources, naming=naming)

    rule = RULES.get((resource.service, resource.resource_type), _no_dependencies)
    return rule(resource, index)
