"""Identity resource finder (IAM roles)."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from botocore.exceptions import ClientError

from ...models.resource import Resource, TagFilter, TagMatchMode
from .base import BaseResourceFinder


class IdentityResourceFinder(BaseResourceFinder):
    """Finder for IAM roles.

    The Resource Groups Tagging API does not cover IAM, so roles are listed
    directly and their tags fetched one role at a time.
    """

    @property
    def category(self) -> str:
        return "identity"

    @property
    def services(self) -> Sequence[str]:
        return ("iam",)

    @property
    def is_global_service(self) -> bool:
        return True

    def find(self, filters: Sequence[TagFilter], match_mode: TagMatchMode = TagMatchMode.AND) -> List[Resource]:
        """Find IAM roles matching the tag filters.

        Returns:
            Matching roles (region is left empty, IAM is global)
        """
        client = self._create_client("iam")
        resources = []

        paginator = client.get_paginator("list_roles")
        for page in paginator.paginate():
            for role in page.get("Roles", []):
                tags = self._role_tags(client, role["RoleName"])
                if tags is None or not match_mode.matches(filters, tags):
                    continue
                resources.append(Resource.from_arn(role["Arn"], tags=tags))

        self.logger.debug(f"Found {len(resources)} IAM role(s)")
        return resources

    def _role_tags(self, client: Any, role_name: str) -> Optional[Dict[str, str]]:
        """Fetch a role's tags; None if the role disappeared while listing."""
        tags: Dict[str, str] = {}
        try:
            paginator = client.get_paginator("list_role_tags")
            for page in paginator.paginate(RoleName=role_name):
                tags.update(self._tags_to_dict(page.get("Tags", [])))
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") == "NoSuchEntity":
                self.logger.debug(f"Role {role_name} deleted during discovery")
                return None
            raise
        return tags
