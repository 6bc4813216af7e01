"""ARN parsing.

Splits AWS ARNs into the service, region, resource type and provider-local id
used throughout the deletion engine.

ARN shapes handled:
    arn:aws:lambda:us-east-1:123456789012:function:my-function
    arn:aws:dynamodb:us-east-1:123456789012:table/my-table
    arn:aws:logs:us-east-1:123456789012:log-group:/aws/lambda/my-function:*
    arn:aws:apigateway:us-east-1::/restapis/a1b2c3
    arn:aws:s3:::my-bucket
    arn:aws:iam::123456789012:role/service-role/MyRole
"""

from __future__ import annotations

from dataclasses import dataclass

# Resource type for ARNs whose resource part is a bare name
BARE_RESOURCE_TYPES = {
    "s3": "bucket",
    "sqs": "queue",
    "sns": "topic",
}

# AWS spellings -> engine resource types
RESOURCE_TYPE_ALIASES = {
    "replicationgroup": "replication-group",
    "restapis": "rest-api",
    "apis": "api",
    "natgateway": "nat-gateway",
}


@dataclass(frozen=True)
class ParsedArn:
    """Components of an ARN."""

    partition: str
    service: str
    region: str
    account_id: str
    resource_type: str
    resource_id: str


def parse_arn(arn: str) -> ParsedArn:
    """Parse an ARN into its components.

    Args:
        arn: ARN string

    Returns:
        ParsedArn with normalised resource type and local id

    Raises:
        ValueError: If the string is not a well-formed ARN
    """
    parts = arn.split(":", 5)
    if len(parts) != 6 or parts[0] != "arn" or not parts[2]:
        raise ValueError(f"Invalid ARN: {arn!r}")

    _, partition, service, region, account_id, resource = parts
    resource_type, resource_id = _split_resource(service, resource)

    return ParsedArn(
        partition=partition,
        service=service,
        region=region,
        account_id=account_id,
        resource_type=RESOURCE_TYPE_ALIASES.get(resource_type, resource_type),
        resource_id=resource_id,
    )


def _split_resource(service: str, resource: str) -> tuple[str, str]:
    """Split the resource part of an ARN into (type, id)."""
    # API Gateway: /restapis/<id>[/stages/...]
    if resource.startswith("/"):
        segments = resource.strip("/").split("/")
        return segments[0], segments[1] if len(segments) > 1 else ""

    if service == "logs" and resource.startswith("log-group:"):
        name = resource[len("log-group:") :]
        if name.endswith(":*"):
            name = name[:-2]
        return "log-group", name

    slash = resource.find("/")
    colon = resource.find(":")

    if slash == -1 and colon == -1:
        return BARE_RESOURCE_TYPES.get(service, service), resource

    if colon == -1 or (slash != -1 and slash < colon):
        resource_type, rest = resource.split("/", 1)
        if service == "iam":
            # Drop the IAM path: role/service-role/MyRole -> MyRole
            rest = rest.rsplit("/", 1)[-1]
        return resource_type, rest

    resource_type, rest = resource.split(":", 1)
    if service == "lambda" and resource_type == "function":
        # Drop version/alias qualifiers
        rest = rest.split(":", 1)[0]
    return resource_type, rest
