"""Configuration loading for oc-revert.

Precedence (lowest to highest): built-in defaults, YAML config file,
environment variables, command-line options.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import MISSING, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "OC_REVERT_CONFIG"
DEFAULT_CONFIG_PATHS = [
    Path(".oc-revert.yaml"),
    Path.home() / ".oc-revert" / "config.yaml",
]

# Environment variable -> config field
ENV_OVERRIDES = {
    "OC_REVERT_KUBECONFIG": "kubeconfig",
    "OC_REVERT_BASELINE_DIR": "baseline_dir",
    "OC_REVERT_OC_BINARY": "oc_binary",
    "OC_REVERT_WAIT_TIMEOUT": "wait_timeout",
    "OC_REVERT_LOG_LEVEL": "log_level",
}

# Fields that accept an explicit null
NULLABLE_FIELDS = {"kubeconfig"}


class ConfigError(Exception):
    """Raised when the configuration file or an override is invalid."""


@dataclass
class Config:
    """Runtime configuration passed to every component at construction."""

    kubeconfig: Optional[str] = "./.kube/config"
    baseline_dir: str = ".oc-baseline"
    oc_binary: str = "oc"
    config_namespace: str = "openshift-config"
    wait_timeout: int = 180
    request_timeout: int = 60
    role_binding_name: str = "self-provisioners"
    role_name: str = "self-provisioner"
    role_group: str = "system:authenticated:oauth"
    protected_namespace_prefixes: List[str] = field(default_factory=lambda: ["kube-", "openshift"])
    protected_namespace_names: List[str] = field(default_factory=lambda: ["default", "redhat-operators"])
    protected_secret_names: List[str] = field(default_factory=list)
    protected_template_names: List[str] = field(default_factory=list)
    protected_namespace_patterns: List[str] = field(default_factory=list)
    protected_secret_patterns: List[str] = field(default_factory=list)
    protected_template_patterns: List[str] = field(default_factory=list)
    log_level: str = "INFO"

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> "Config":
        """Load configuration from file and environment.

        Args:
            config_path: Explicit config file (optional, otherwise $OC_REVERT_CONFIG
                or the first existing default path)

        Returns:
            Populated Config

        Raises:
            ConfigError: If the file cannot be parsed or holds invalid values
        """
        config = cls()

        path = cls._resolve_path(config_path)
        if path is not None:
            logger.debug(f"Loading configuration from {path}")
            config.update(cls._read_file(path))

        env_values = {
            field_name: os.environ[env_var] for env_var, field_name in ENV_OVERRIDES.items() if env_var in os.environ
        }
        if env_values:
            config.update(env_values)

        return config

    @staticmethod
    def _resolve_path(config_path: Optional[str]) -> Optional[Path]:
        if config_path:
            path = Path(config_path)
            if not path.exists():
                raise ConfigError(f"Config file not found: {path}")
            return path

        if os.environ.get(CONFIG_ENV_VAR):
            return Config._resolve_path(os.environ[CONFIG_ENV_VAR])

        for candidate in DEFAULT_CONFIG_PATHS:
            if candidate.exists():
                return candidate
        return None

    @staticmethod
    def _read_file(path: Path) -> Dict[str, Any]:
        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")
        return data

    def update(self, values: Dict[str, Any]) -> None:
        """Apply overrides, coercing strings from the environment.

        Raises:
            ConfigError: On unknown keys or values of the wrong type
        """
        known = {f.name: f for f in fields(self)}

        for key, value in values.items():
            key = key.replace("-", "_")
            if key not in known:
                raise ConfigError(f"Unknown configuration key: {key}")

            default = known[key].default
            if known[key].default_factory is not MISSING:
                default = known[key].default_factory()

            if value is None and key in NULLABLE_FIELDS:
                setattr(self, key, None)
            elif isinstance(default, int):
                if isinstance(value, bool):
                    raise ConfigError(f"{key} must be an integer, got {value!r}")
                try:
                    setattr(self, key, int(value))
                except (TypeError, ValueError) as e:
                    raise ConfigError(f"{key} must be an integer, got {value!r}") from e
            elif isinstance(default, list):
                if isinstance(value, str):
                    value = [item.strip() for item in value.split(",") if item.strip()]
                if not isinstance(value, list) or not all(_is_scalar(item) for item in value):
                    raise ConfigError(f"{key} must be a list of strings, got {value!r}")
                if key.endswith("_patterns"):
                    _check_patterns(key, value)
                setattr(self, key, [str(item) for item in value])
            else:
                if not _is_scalar(value):
                    raise ConfigError(f"{key} must be a string, got {value!r}")
                setattr(self, key, str(value))

        if self.wait_timeout <= 0:
            raise ConfigError("wait_timeout must be positive")


def _is_scalar(value: Any) -> bool:
    return isinstance(value, (str, int, float)) and not isinstance(value, bool)


def _check_patterns(key: str, patterns: List[Any]) -> None:
    for pattern in patterns:
        try:
            re.compile(str(pattern))
        except re.error as e:
            raise ConfigError(f"{key} holds an invalid regular expression {pattern!r}: {e}") from e
