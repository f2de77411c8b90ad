"""Configuration management CLI commands."""

import typer
from rich.syntax import Syntax

from ..core.config import GateConfig
from ..errors import ConfigError
from .display import console, error, info, section, success, warning
from .utils import get_config_or_exit

app = typer.Typer(help="Manage workspacegate configuration")


@app.command()
def init(
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file"),
):
    """Write a configuration file with default values."""
    path = GateConfig.get_config_path()
    if path.exists() and not force:
        warning(f"{path} already exists, use --force to overwrite")
        raise typer.Exit(0)

    GateConfig().save(path)
    success(f"Configuration saved to {path}")


@app.command()
def show():
    """Display the effective configuration (file plus environment)."""
    config = get_config_or_exit()

    syntax = Syntax(config.to_yaml_string(), "yaml", theme="monokai", line_numbers=False)
    section(f"Configuration from {GateConfig.get_config_path()}")
    console.print(syntax)


@app.command()
def set(
    key: str = typer.Argument(..., help="Configuration key (e.g., namespace, settle_timeout)"),
    value: str = typer.Argument(..., help="Value to set"),
):
    """Set a configuration value.

    Examples:
        wsgate config set namespace analytics
        wsgate config set settle_timeout 5
    """
    # Environment overrides are not written back to the file
    config = get_config_or_exit(include_env=False)

    if key not in GateConfig.model_fields:
        error(f"Unknown configuration key: {key}")
        info(f"Valid keys: {', '.join(GateConfig.model_fields)}")
        raise typer.Exit(1)

    data = config.model_dump()
    data[key] = None if value.lower() in ["none", "null", ""] else value

    try:
        updated = GateConfig.validate_data(data, source=key)
    except ConfigError as e:
        error(str(e))
        raise typer.Exit(1)

    path = updated.save()
    success(f"Set {key} in {path}")
