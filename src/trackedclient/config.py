"""Configuration loading for the tracked client."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".trackedclient" / "config.yaml"
ENV_PREFIX = "TRACKEDCLIENT_"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_TRUE_VALUES = ("1", "true", "yes", "on")


@dataclass
class Config:
    """Client configuration.

    Values come from the YAML config file first, then TRACKEDCLIENT_*
    environment variables override them.

    Attributes:
        kubeconfig: Path to the kubeconfig file (default: kubernetes client default)
        context: Kubeconfig context to use (default: current context)
        in_cluster: Use the pod's service account instead of a kubeconfig
        field_manager: Field manager name sent with create requests (optional)
        log_level: Logging level name
        audit_dir: Directory for cleanup audit logs; None disables auditing
    """

    kubeconfig: Optional[str] = None
    context: Optional[str] = None
    in_cluster: bool = False
    field_manager: Optional[str] = None
    log_level: str = "INFO"
    audit_dir: Optional[str] = None

    def __post_init__(self) -> None:
        self.log_level = str(self.log_level).upper()
        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"Invalid log level: {self.log_level}. Must be one of {', '.join(LOG_LEVELS)}.")

    @classmethod
    def load(cls, path: Optional[str] = None) -> "Config":
        """Load configuration from file and environment.

        Args:
            path: Config file path (default: ~/.trackedclient/config.yaml)

        Returns:
            Loaded configuration

        Raises:
            ValueError: If the file is not a YAML mapping or holds invalid values
        """
        config_path = Path(path) if path else DEFAULT_CONFIG_PATH
        data: Dict[str, Any] = {}

        if config_path.exists():
            with open(config_path, "r") as f:
                loaded = yaml.safe_load(f) or {}
            if not isinstance(loaded, dict):
                raise ValueError(f"Config file {config_path} must contain a mapping")
            data.update(loaded)
            logger.debug(f"Loaded config from {config_path}")
        elif path:
            raise FileNotFoundError(f"Config file not found: {config_path}")

        data.update(cls._from_env())

        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(sorted(unknown))}")

        if isinstance(data.get("in_cluster"), str):
            data["in_cluster"] = data["in_cluster"].lower() in _TRUE_VALUES

        return cls(**data)

    @staticmethod
    def _from_env() -> Dict[str, Any]:
        overrides = {}
        for name in ("kubeconfig", "context", "in_cluster", "field_manager", "log_level", "audit_dir"):
            value = os.environ.get(ENV_PREFIX + name.upper())
            if value is not None:
                overrides[name] = value
        return overrides
