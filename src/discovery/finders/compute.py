"""Compute resource finder (Lambda functions and event source mappings)."""

from __future__ import annotations

from typing import Sequence

from .base import TaggingApiFinder


class ComputeResourceFinder(TaggingApiFinder):
    """Finder for Lambda functions and event source mappings."""

    @property
    def category(self) -> str:
        return "compute"

    @property
    def services(self) -> Sequence[str]:
        return ("lambda",)
