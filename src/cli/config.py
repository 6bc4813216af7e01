"""CLI configuration.

Settings are resolved in order: built-in defaults, then the YAML config file
($TAGSWEEP_CONFIG or ~/.tagsweep/config.yaml), then environment variables.
Command-line options override all of them.

Example config file:

    aws_profile: dev
    region: eu-west-1
    log_level: WARNING
    app: insights
    stage: dev
    max_workers: 4
    max_retries: 5
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".tagsweep" / "config.yaml"

# Environment variable -> config field
ENV_VARS = {
    "AWS_DEFAULT_REGION": "region",
    "AWS_REGION": "region",
    "AWS_PROFILE": "aws_profile",
    "TAGSWEEP_LOG_LEVEL": "log_level",
    "TAGSWEEP_APP": "app",
    "TAGSWEEP_STAGE": "stage",
    "TAGSWEEP_MAX_WORKERS": "max_workers",
    "TAGSWEEP_MAX_RETRIES": "max_retries",
}

INT_FIELDS = {"max_workers", "max_retries"}


@dataclass
class Config:
    """Resolved CLI settings."""

    aws_profile: Optional[str] = None
    region: str = "us-east-1"
    log_level: str = "INFO"
    app: Optional[str] = None
    stage: Optional[str] = None
    max_workers: int = 8
    max_retries: int = 3

    @classmethod
    def load(cls, path: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None) -> "Config":
        """Load configuration from file and environment.

        Args:
            path: Config file path (default: $TAGSWEEP_CONFIG or ~/.tagsweep/config.yaml)
            environ: Environment mapping (default: os.environ)

        Returns:
            Config instance

        Raises:
            ValueError: If the config file is not valid YAML, not a mapping, or has bad values
        """
        environ = os.environ if environ is None else environ
        if path is None:
            path = Path(environ["TAGSWEEP_CONFIG"]) if environ.get("TAGSWEEP_CONFIG") else DEFAULT_CONFIG_PATH

        values: Dict[str, Any] = {}
        values.update(cls._read_file(path))

        # Later entries in ENV_VARS win (AWS_REGION over AWS_DEFAULT_REGION)
        for env_name, field_name in ENV_VARS.items():
            if environ.get(env_name):
                values[field_name] = environ[env_name]

        return cls._from_values(values)

    @staticmethod
    def _read_file(path: Path) -> Dict[str, Any]:
        if not path.exists():
            return {}

        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid config file {path}: {e}")

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValueError(f"Invalid config file {path}: expected a mapping")

        logger.debug(f"Loaded config from {path}")
        return data

    @classmethod
    def _from_values(cls, values: Mapping[str, Any]) -> "Config":
        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}

        for key, value in values.items():
            if key not in known:
                logger.warning(f"Ignoring unknown config key: {key}")
                continue
            if key in INT_FIELDS:
                try:
                    value = int(value)
                except (TypeError, ValueError):
                    raise ValueError(f"Config value {key} must be an integer, got {value!r}")
                if value < 1:
                    raise ValueError(f"Config value {key} must be at least 1")
            kwargs[key] = value

        return cls(**kwargs)
