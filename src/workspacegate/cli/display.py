"""Console output helpers for CLI commands."""
from rich.console import Console

console = Console()


def success(message: str) -> None:
    console.print(f"[green]✓ {message}[/green]")


def warning(message: str) -> None:
    console.print(f"[yellow]⚠️  {message}[/yellow]")


def error(message: str) -> None:
    console.print(f"[red]❌ {message}[/red]")


def info(message: str) -> None:
    console.print(message)


def section(title: str) -> None:
    """Print a bold header preceded by a blank line."""
    console.print(f"\n[bold]{title}[/bold]")
