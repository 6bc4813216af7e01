"""Dependency-ordered resource deletion.

This module turns a discovered resource set into an ordered deletion plan and
executes it with dry-run, confirmation and per-resource failure isolation.

Classes:
    ResourceCleaner: Main orchestrator for deletion runs
    ResourceDeleter: Per-resource boto3 removal strategies
    ResourceGraph: Dependency graph over discovered resources
    DeletionReporter: Rich console output for plans and results
"""

from __future__ import annotations

__all__ = [
    "ResourceCleaner",
    "ResourceDeleter",
    "ResourceGraph",
    "DeletionReporter",
]
