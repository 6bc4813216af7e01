"""Per-category resource finders."""

from __future__ import annotations

from .base import BaseResourceFinder, TaggingApiFinder
from .compute import ComputeResourceFinder
from .identity import IdentityResourceFinder
from .networking import NetworkingResourceFinder
from .storage import StorageResourceFinder

__all__ = [
    "BaseResourceFinder",
    "TaggingApiFinder",
    "ComputeResourceFinder",
    "StorageResourceFinder",
    "NetworkingResourceFinder",
    "IdentityResourceFinder",
]
