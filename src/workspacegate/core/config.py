"""workspacegate configuration management.

Configuration is resolved from defaults, an optional YAML file
(~/.workspacegate/config.yaml, or the path in WORKSPACEGATE_CONFIG), and
finally WORKSPACEGATE_* environment variables.
"""

import os
from pathlib import Path

from pydantic import Field, field_validator

from ..errors import ConfigError
from .config_base import ConfigModel

CONFIG_FILE = Path.home() / ".workspacegate" / "config.yaml"

ENV_PREFIX = "WORKSPACEGATE_"


class GateConfig(ConfigModel):
    """Settings for talking to the workspace resource API.

    Defaults match the analytics workspace CRDs.
    """

    api_group: str = "xlscsde.nhs.uk"
    """Custom resource API group."""

    api_version: str = "v1"

    workspace_plural: str = "analyticsworkspaces"

    binding_plural: str = "analyticsworkspacebindings"

    username_label: str = "xlscsde.nhs.uk/username"
    """Label carrying the sanitized username on pre-labeled bindings."""

    namespace: str | None = None
    """Restrict binding lists to one namespace (cluster-wide when unset)."""

    interactive_client_name: str = "guacamole"
    """Client whose logins must match the session the workspace was chosen in."""

    kubeconfig: str | None = None
    """Kubeconfig path used when not running in-cluster."""

    request_timeout: float = Field(default=10.0, gt=0)
    """Per-call timeout in seconds for resource API requests."""

    patch_max_attempts: int = Field(default=3, ge=1)

    patch_initial_delay: float = Field(default=0.2, ge=0)
    """First retry delay in seconds; doubles on each attempt."""

    settle_timeout: float = Field(default=3.0, ge=0)
    """Upper bound on waiting for the selected binding to become ready."""

    settle_interval: float = Field(default=0.5, gt=0)

    @field_validator("api_group", "api_version", "workspace_plural", "binding_plural", "username_label")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value

    @classmethod
    def get_config_path(cls) -> Path:
        """Get the configuration file path.

        Returns:
            WORKSPACEGATE_CONFIG if set, otherwise ~/.workspacegate/config.yaml
        """
        override = os.environ.get(f"{ENV_PREFIX}CONFIG")
        if override:
            return Path(override)
        return CONFIG_FILE

    @classmethod
    def env_overrides(cls) -> dict[str, str]:
        """Collect WORKSPACEGATE_<FIELD> variables for known fields.

        For example WORKSPACEGATE_NAMESPACE -> namespace.
        """
        overrides = {}
        for name in cls.model_fields:
            value = os.environ.get(f"{ENV_PREFIX}{name.upper()}")
            if value is not None:
                overrides[name] = value
        return overrides

    @classmethod
    def load(cls, path: Path | None = None, include_env: bool = True) -> "GateConfig":
        """Load configuration from file and environment.

        A missing default config file is not an error; an explicitly given
        path that does not exist is. With ``include_env=False`` only the file
        is read, which is what gets written back when editing it.

        Raises:
            ConfigError: If the file or any value is invalid
        """
        overrides = cls.env_overrides() if include_env else {}
        if path is not None:
            return cls.from_yaml(path, **overrides)

        config_path = cls.get_config_path()
        if config_path.exists():
            return cls.from_yaml(config_path, **overrides)
        if config_path != CONFIG_FILE:
            raise ConfigError(f"Configuration file not found: {config_path}")
        return cls.validate_data(overrides, source="environment")

    def save(self, path: Path | None = None) -> Path:
        """Save configuration, creating the parent directory if needed."""
        config_path = path or self.get_config_path()
        self.to_yaml(config_path)
        return config_path
