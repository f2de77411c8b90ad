"""Base configuration model with YAML loading capabilities."""

from pathlib import Path
from typing import TypeVar

import yaml
from pydantic import BaseModel, ValidationError

from ..errors import ConfigError

T = TypeVar("T", bound="ConfigModel")


class ConfigModel(BaseModel):
    """Base model with YAML loading/saving capabilities."""

    @classmethod
    def from_yaml(cls: type[T], path: Path, **overrides) -> T:
        """
        Load and validate configuration from YAML file.

        Args:
            path: Path to YAML configuration file
            **overrides: Values applied on top of the file contents

        Returns:
            Validated configuration model instance

        Raises:
            ConfigError: On file not found, invalid YAML, or validation errors
        """
        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")

        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(cls._format_yaml_error(e, path)) from e
        except OSError as e:
            raise ConfigError(f"Error reading configuration file {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Invalid {cls.__name__} configuration: {path.name} must be a mapping")

        data.update(overrides)
        return cls.validate_data(data, source=path.name)

    @classmethod
    def validate_data(cls: type[T], data: dict, source: str = "<data>") -> T:
        """Validate a mapping, converting pydantic errors to ConfigError."""
        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigError(cls._format_validation_error(e, source)) from e

    def to_yaml(self, path: Path):
        """
        Write configuration to YAML file.

        Args:
            path: Path to write YAML file
        """
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.safe_dump(
                self.model_dump(by_alias=True, exclude_unset=False),
                f,
                default_flow_style=False,
                sort_keys=False,
            )

    def to_yaml_string(self) -> str:
        """
        Convert configuration to YAML string.

        Returns:
            YAML formatted string of the configuration
        """
        return yaml.dump(
            self.model_dump(by_alias=True, exclude_unset=False),
            default_flow_style=False,
            sort_keys=False,
        )

    @classmethod
    def _format_validation_error(cls, error: ValidationError, source: str) -> str:
        """Render validation errors one field per line."""
        lines = [f"Invalid {cls.__name__} configuration: {source}"]

        for err in error.errors():
            field_path = " → ".join(str(loc) for loc in err["loc"])
            if "missing" in err["type"]:
                lines.append(f"  Missing required field: {field_path}")
            else:
                lines.append(f"  {field_path}: {err['msg']}")

        return "\n".join(lines)

    @classmethod
    def _format_yaml_error(cls, error: yaml.YAMLError, path: Path) -> str:
        """Describe a YAML parsing error with its position when known."""
        message = f"Invalid YAML syntax in: {path.name}"

        if hasattr(error, "problem_mark"):
            mark = error.problem_mark
            message += f" (line {mark.line + 1}, column {mark.column + 1})"

        return f"{message}\n{error}"
