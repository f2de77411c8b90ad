"""wsgate CLI entry point."""

import typer
from rich.table import Table

from ..errors import ConsistencyFault, TransportError
from ..services.discovery import BindingDiscovery
from ..services.enforcer import ActiveBindingEnforcer
from ..services.resolver import WorkspaceResolver
from . import config as config_cli
from . import utils
from .display import console, error, info, success, warning

app = typer.Typer(
    name="wsgate",
    help="Inspect and activate workspace bindings",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich"
)

app.add_typer(
    config_cli.app,
    name="config",
    help="⚙️ Configure workspacegate settings"
)


@app.callback()
def _root(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show library logs"),
):
    utils.configure_logging(verbose)


def _discovery():
    config = utils.get_config_or_exit()
    client = utils.build_client(config)
    return config, client, BindingDiscovery(client, config.username_label)


@app.command()
def bindings(username: str = typer.Argument(..., help="Username as known to the identity provider")):
    """List the workspace bindings discovered for a user."""
    _, _, discovery = _discovery()
    try:
        found = discovery.find_all_bindings_for_user(username)
    except TransportError as e:
        error(f"Could not list bindings: {e}")
        raise typer.Exit(1)

    if not found:
        warning(f"No workspace bindings found for '{username}'")
        return

    table = Table(title=f"Workspace bindings for {username}")
    table.add_column("Namespace", style="dim")
    table.add_column("Binding", style="cyan")
    table.add_column("Workspace")
    table.add_column("Labeled")
    table.add_column("Replicas", justify="right")
    table.add_column("Ready", justify="right")
    for binding in found:
        table.add_row(
            binding.namespace,
            binding.name,
            binding.workspace,
            "yes" if binding.username_label is not None else "no",
            str(binding.replicas),
            str(binding.status_replicas if binding.status_replicas is not None else "-"),
        )
    console.print(table)


@app.command()
def workspaces(username: str = typer.Argument(..., help="Username as known to the identity provider")):
    """List the selectable workspaces for a user, as the selection form shows them."""
    _, client, discovery = _discovery()
    try:
        bound = WorkspaceResolver(client).resolve_workspaces(discovery.find_all_bindings_for_user(username))
    except TransportError as e:
        error(f"Could not list workspaces: {e}")
        raise typer.Exit(1)

    if not bound:
        warning(f"No workspaces available for '{username}'")
        return

    table = Table(title=f"Workspaces for {username}")
    table.add_column("Selection", style="cyan")
    table.add_column("Display name")
    for entry in bound:
        table.add_row(entry.selection_key, entry.display_name)
    console.print(table)


@app.command()
def activate(
    username: str = typer.Argument(..., help="Owner of the bindings"),
    binding: str = typer.Argument(..., help="Binding to make the only active one"),
    wait: bool = typer.Option(True, "--wait/--no-wait", help="Wait for the binding to report ready"),
):
    """Scale one binding to 1 and every other binding of the user to 0."""
    config, client, discovery = _discovery()
    enforcer = ActiveBindingEnforcer(
        client,
        discovery,
        max_attempts=config.patch_max_attempts,
        initial_delay=config.patch_initial_delay,
    )

    try:
        result = enforcer.set_active(binding, username)
    except ConsistencyFault as e:
        error(str(e))
        raise typer.Exit(1)
    except TransportError as e:
        error(f"Activation incomplete: {e}")
        info("Re-run the command to finish reconciling")
        raise typer.Exit(1)

    for name in result.skipped:
        warning(f"Binding '{name}' disappeared during activation")
    success(f"Activated '{binding}' for '{username}' ({len(result.patched)} bindings patched)")

    if wait:
        if enforcer.wait_until_ready(result.active, config.settle_timeout, config.settle_interval):
            success(f"Binding '{binding}' is ready")
        else:
            warning(f"Binding '{binding}' not ready after {config.settle_timeout:.1f}s")


@app.command()
def version():
    """Show workspacegate version."""
    from .. import __version__
    info(f"workspacegate version: {__version__}")


def main():
    """Main CLI entry point."""
    try:
        app()
    except KeyboardInterrupt:
        warning("\nInterrupted by user")
        raise typer.Exit(1)


if __name__ == "__main__":
    main()
