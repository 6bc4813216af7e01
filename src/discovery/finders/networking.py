"""Networking resource finder."""

from __future__ import annotations

from typing import Sequence

from .base import TaggingApiFinder


class NetworkingResourceFinder(TaggingApiFinder):
    """Finder for API Gateway, EventBridge, CloudWatch Logs/alarms, EC2 networking and Cloud Map."""

    @property
    def category(self) -> str:
        return "networking"

    @property
    def services(self) -> Sequence[str]:
        return ("apigateway", "events", "logs", "ec2", "servicediscovery", "cloudwatch")
