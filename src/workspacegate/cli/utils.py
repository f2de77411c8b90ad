"""Shared utilities for CLI commands."""

import logging

import typer

from ..core.config import GateConfig
from ..errors import ConfigError, TransportError
from ..services.resource_client import KubernetesResourceClient, ResourceClient
from .display import error, info


def configure_logging(verbose: bool) -> None:
    """Send library logs to stderr when --verbose is given."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def get_config_or_exit(include_env: bool = True) -> GateConfig:
    """Load configuration or exit with a readable message.

    Raises:
        typer.Exit: If the configuration is invalid
    """
    try:
        return GateConfig.load(include_env=include_env)
    except ConfigError as e:
        error(str(e))
        info("Run 'wsgate config init' to create a configuration file")
        raise typer.Exit(1)


def build_client(config: GateConfig) -> ResourceClient:
    """Create the resource client used by commands.

    Raises:
        typer.Exit: If Kubernetes credentials could not be loaded
    """
    try:
        return KubernetesResourceClient.from_config(config)
    except TransportError as e:
        error(str(e))
        raise typer.Exit(1)
