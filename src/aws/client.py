"""boto3 session and client construction."""

from __future__ import annotations

import logging
from typing import Any, Optional

import boto3
from botocore.config import Config as BotoConfig

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 5


def create_session(profile_name: Optional[str] = None, region_name: Optional[str] = None) -> boto3.Session:
    """Create a boto3 session.

    Args:
        profile_name: AWS profile name (optional, falls back to the default chain)
        region_name: Default region for clients created from the session

    Returns:
        boto3 Session
    """
    logger.debug(f"Creating boto3 session (profile={profile_name or 'default'}, region={region_name})")
    return boto3.Session(profile_name=profile_name, region_name=region_name)


def create_boto_client(
    service_name: str,
    region_name: Optional[str] = None,
    profile_name: Optional[str] = None,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> Any:
    """Create a boto3 client with adaptive retries.

    Args:
        service_name: boto3 service name (e.g., "lambda")
        region_name: AWS region
        profile_name: AWS profile name (optional)
        max_attempts: Total attempts botocore makes for throttled calls

    Returns:
        boto3 client for the service
    """
    session = create_session(profile_name=profile_name, region_name=region_name)
    return session.client(
        service_name,
        region_name=region_name,
        config=BotoConfig(retries={"max_attempts": max_attempts, "mode": "adaptive"}),
    )
