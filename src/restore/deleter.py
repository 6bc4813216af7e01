"""AWS resource deletion strategies.

Maps (service, resource type) pairs to their boto3 deletion calls with
preparation steps, error handling and retry logic.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Optional, Tuple

from botocore.exceptions import ClientError

from src.aws.client import create_boto_client
from src.models.deletion_record import RemovalResult
from src.models.resource import Resource

logger = logging.getLogger(__name__)

DEFAULT_REGION = "us-east-1"

# Error codes meaning the resource is already gone
NOT_FOUND_ERROR_CODES = {
    "ResourceNotFoundException",
    "NoSuchEntity",
    "NoSuchBucket",
    "NotFoundException",
    "DBInstanceNotFound",
    "DBClusterNotFoundFault",
    "CacheClusterNotFound",
    "ReplicationGroupNotFoundFault",
    "AWS.SimpleQueueService.NonExistentQueue",
    "InvalidVpcID.NotFound",
    "InvalidSubnetID.NotFound",
    "InvalidGroup.NotFound",
    "InvalidRouteTableID.NotFound",
    "InvalidInternetGatewayID.NotFound",
    "NatGatewayNotFound",
    "NamespaceNotFound",
    "ServiceNotFound",
}

# Error codes worth retrying: something still references the resource, or AWS is busy
RETRYABLE_ERROR_CODES = {
    "DependencyViolation",
    "ResourceInUseException",
    "ResourceConflictException",
    "DeleteConflict",
    "TooManyRequestsException",
    "Throttling",
    "ThrottlingException",
}


class ResourceDeleter:
    """AWS resource remover.

    Removes one resource at a time using the boto3 call registered for its
    (service, resource type). Resources AWS refuses to delete while still
    attached (IAM roles, EventBridge rules, S3 buckets, internet gateways,
    route tables, SQS queues by name) get a preparation step first.
    """

    # (service, resource_type) -> (boto3 service, method, id_field)
    DELETION_METHODS: Dict[Tuple[str, str], Tuple[str, str, str]] = {
        # Compute
        ("lambda", "function"): ("lambda", "delete_function", "FunctionName"),
        ("lambda", "event-source-mapping"): ("lambda", "delete_event_source_mapping", "UUID"),

        # Events and logs
        ("events", "rule"): ("events", "delete_rule", "Name"),
        ("events", "event-bus"): ("events", "delete_event_bus", "Name"),
        ("logs", "log-group"): ("logs", "delete_log_group", "logGroupName"),
        ("cloudwatch", "alarm"): ("cloudwatch", "delete_alarms", "AlarmNames"),

        # API Gateway
        ("apigateway", "rest-api"): ("apigateway", "delete_rest_api", "restApiId"),
        ("apigateway", "api"): ("apigatewayv2", "delete_api", "ApiId"),

        # Storage
        ("s3", "bucket"): ("s3", "delete_bucket", "Bucket"),
        ("dynamodb", "table"): ("dynamodb", "delete_table", "TableName"),
        ("sqs", "queue"): ("sqs", "delete_queue", "QueueUrl"),
        ("rds", "db"): ("rds", "delete_db_instance", "DBInstanceIdentifier"),
        ("rds", "cluster"): ("rds", "delete_db_cluster", "DBClusterIdentifier"),
        ("elasticache", "cluster"): ("elasticache", "delete_cache_cluster", "CacheClusterId"),
        ("elasticache", "replication-group"): ("elasticache", "delete_replication_group", "ReplicationGroupId"),

        # Networking
        ("ec2", "vpc"): ("ec2", "delete_vpc", "VpcId"),
        ("ec2", "subnet"): ("ec2", "delete_subnet", "SubnetId"),
        ("ec2", "security-group"): ("ec2", "delete_security_group", "GroupId"),
        ("ec2", "route-table"): ("ec2", "delete_route_table", "RouteTableId"),
        ("ec2", "internet-gateway"): ("ec2", "delete_internet_gateway", "InternetGatewayId"),
        ("ec2", "nat-gateway"): ("ec2", "delete_nat_gateway", "NatGatewayId"),
        ("servicediscovery", "namespace"): ("servicediscovery", "delete_namespace", "Id"),
        ("servicediscovery", "service"): ("servicediscovery", "delete_service", "Id"),

        # IAM
        ("iam", "role"): ("iam", "delete_role", "RoleName"),
    }

    def __init__(self, aws_profile: Optional[str] = None, max_retries: int = 3):
        """Initialize resource deleter.

        Args:
            aws_profile: AWS profile name (optional)
            max_retries: Maximum number of retry attempts (default: 3)
        """
        self.aws_profile = aws_profile
        self.max_retries = max_retries
        self._preparations: Dict[Tuple[str, str], Callable[[Any, Resource], None]] = {
            ("iam", "role"): self._detach_role,
            ("events", "rule"): self._remove_rule_targets,
            ("s3", "bucket"): self._empty_bucket,
            ("ec2", "internet-gateway"): self._detach_internet_gateway,
            ("ec2", "route-table"): self._disassociate_route_table,
        }

    def supports(self, resource: Resource) -> bool:
        return (resource.service, resource.resource_type) in self.DELETION_METHODS

    def remove(
        self,
        resource: Resource,
        region: Optional[str] = None,
        profile: Optional[str] = None,
        dry_run: bool = False,
    ) -> RemovalResult:
        """Remove an AWS resource.

        Args:
            resource: Resource to remove
            region: Region for the API call (default: the resource's own region)
            profile: AWS profile overriding the deleter's default (optional)
            dry_run: Report success without calling AWS

        Returns:
            RemovalResult with success flag and error message on failure
        """
        if dry_run:
            if not self.supports(resource):
                logger.warning(f"[dry-run] No deletion method for {resource.kind}: {resource.resource_id}")
            logger.info(f"[dry-run] Would delete {resource.kind}: {resource.resource_id}")
            return RemovalResult.ok()

        if not self.supports(resource):
            error_msg = f"Unsupported resource type: {resource.kind}"
            logger.warning(error_msg)
            return RemovalResult.failed(error_msg)

        service, method, id_field = self.DELETION_METHODS[(resource.service, resource.resource_type)]
        region_name = region or resource.region or DEFAULT_REGION
        profile_name = profile or self.aws_profile
        last_error: Optional[str] = None

        for attempt in range(self.max_retries):
            try:
                success, error = self._attempt_deletion(
                    service=service,
                    method=method,
                    id_field=id_field,
                    resource=resource,
                    region=region_name,
                    profile=profile_name,
                )

                if success:
                    logger.info(f"Successfully deleted {resource.kind}: {resource.resource_id}")
                    return RemovalResult.ok()
                elif error and error.split(":", 1)[0] in RETRYABLE_ERROR_CODES:
                    last_error = error
                    if attempt < self.max_retries - 1:
                        wait_time = 2**attempt  # Exponential backoff
                        logger.debug(
                            f"{error} for {resource.resource_id}, "
                            f"retrying in {wait_time}s (attempt {attempt + 1}/{self.max_retries})"
                        )
                        time.sleep(wait_time)
                        continue
                else:
                    return RemovalResult.failed(error or "Unknown error")

            except Exception as e:
                error_msg = f"Unexpected error deleting {resource.kind} {resource.resource_id}: {str(e)}"
                logger.error(error_msg)
                if attempt < self.max_retries - 1:
                    time.sleep(2**attempt)
                    continue
                return RemovalResult.failed(error_msg)

        error_msg = f"Failed to delete {resource.kind} {resource.resource_id} after {self.max_retries} attempts"
        if last_error:
            error_msg = f"{error_msg}: {last_error}"
        logger.error(error_msg)
        return RemovalResult.failed(error_msg)

    def _attempt_deletion(
        self,
        service: str,
        method: str,
        id_field: str,
        resource: Resource,
        region: str,
        profile: Optional[str],
    ) -> tuple[bool, Optional[str]]:
        """Attempt a single deletion operation.

        Returns:
            Tuple of (success: bool, error_message: Optional[str]); retryable
            errors are prefixed with their AWS error code
        """
        try:
            client = create_boto_client(
                service_name=service,
                region_name=region,
                profile_name=profile,
            )

            preparation = self._preparations.get((resource.service, resource.resource_type))
            if preparation is not None:
                preparation(client, resource)

            params = self._build_deletion_params(client=client, id_field=id_field, resource=resource)

            deletion_method = getattr(client, method)
            deletion_method(**params)

            return (True, None)

        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            error_message = e.response.get("Error", {}).get("Message", str(e))

            if error_code in NOT_FOUND_ERROR_CODES:
                logger.info(f"Resource {resource.resource_id} already deleted")
                return (True, None)
            elif error_code in RETRYABLE_ERROR_CODES:
                logger.debug(f"{error_code} for {resource.resource_id}: {error_message}")
                return (False, f"{error_code}: {error_message}")
            else:
                logger.error(f"Failed to delete {resource.resource_id}: {error_code} - {error_message}")
                return (False, f"{error_code}: {error_message}")

    def _build_deletion_params(self, client: Any, id_field: str, resource: Resource) -> dict[str, Any]:
        """Build deletion parameters for the boto3 call.

        Args:
            client: boto3 client for the resource's service
            id_field: Parameter name for the resource identifier
            resource: Resource being deleted

        Returns:
            Dictionary of parameters for the boto3 method call
        """
        resource_id = resource.resource_id

        # Plural form indicates a list parameter (e.g., AlarmNames)
        if id_field.endswith("s"):
            return {id_field: [resource_id]}

        kind = (resource.service, resource.resource_type)

        if kind == ("lambda", "event-source-mapping"):
            # Ids may carry the owning function name: "<function>:<uuid>"
            return {id_field: resource_id.split(":")[-1]}
        elif kind == ("events", "rule"):
            params = {id_field: resource_id.rsplit("/", 1)[-1]}
            if "/" in resource_id:
                params["EventBusName"] = resource_id.rsplit("/", 1)[0]
            return params
        elif kind == ("sqs", "queue"):
            queue_url = client.get_queue_url(QueueName=resource_id)["QueueUrl"]
            return {id_field: queue_url}
        elif kind == ("rds", "db"):
            # Skip final snapshot for faster deletion
            return {
                id_field: resource_id,
                "SkipFinalSnapshot": True,
                "DeleteAutomatedBackups": True,
            }
        elif kind == ("rds", "cluster"):
            return {id_field: resource_id, "SkipFinalSnapshot": True}
        elif kind == ("elasticache", "replication-group"):
            return {id_field: resource_id, "RetainPrimaryCluster": False}

        return {id_field: resource_id}

    def _detach_role(self, client: Any, resource: Resource) -> None:
        """Detach managed policies, delete inline policies and leave instance profiles."""
        role_name = resource.resource_id

        for page in client.get_paginator("list_attached_role_policies").paginate(RoleName=role_name):
            for policy in page.get("AttachedPolicies", []):
                client.detach_role_policy(RoleName=role_name, PolicyArn=policy["PolicyArn"])

        for page in client.get_paginator("list_role_policies").paginate(RoleName=role_name):
            for policy_name in page.get("PolicyNames", []):
                client.delete_role_policy(RoleName=role_name, PolicyName=policy_name)

        for page in client.get_paginator("list_instance_profiles_for_role").paginate(RoleName=role_name):
            for profile in page.get("InstanceProfiles", []):
                client.remove_role_from_instance_profile(
                    InstanceProfileName=profile["InstanceProfileName"], RoleName=role_name
                )

    def _remove_rule_targets(self, client: Any, resource: Resource) -> None:
        """Remove all targets from an EventBridge rule (rules with targets cannot be deleted)."""
        params = self._build_deletion_params(client=client, id_field="Rule", resource=resource)
        targets = client.list_targets_by_rule(**params).get("Targets", [])
        if targets:
            client.remove_targets(Ids=[target["Id"] for target in targets], **params)

    def _empty_bucket(self, client: Any, resource: Resource) -> None:
        """Delete every object version and delete marker in a bucket."""
        bucket = resource.resource_id
        for page in client.get_paginator("list_object_versions").paginate(Bucket=bucket):
            objects = [
                {"Key": item["Key"], "VersionId": item["VersionId"]}
                for item in page.get("Versions", []) + page.get("DeleteMarkers", [])
            ]
            if objects:
                client.delete_objects(Bucket=bucket, Delete={"Objects": objects, "Quiet": True})

    def _detach_internet_gateway(self, client: Any, resource: Resource) -> None:
        response = client.describe_internet_gateways(InternetGatewayIds=[resource.resource_id])
        for gateway in response.get("InternetGateways", []):
            for attachment in gateway.get("Attachments", []):
                client.detach_internet_gateway(InternetGatewayId=resource.resource_id, VpcId=attachment["VpcId"])

    def _disassociate_route_table(self, client: Any, resource: Resource) -> None:
        response = client.describe_route_tables(RouteTableIds=[resource.resource_id])
        for table in response.get("RouteTables", []):
            for association in table.get("Associations", []):
                # The main route table association goes away with the VPC
                if not association.get("Main"):
                    client.disassociate_route_table(AssociationId=association["RouteTableAssociationId"])
