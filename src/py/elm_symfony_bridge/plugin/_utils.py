"""Console output helpers shared by the plugin and the CLI."""

__all__ = (
    "console",
    "log_fail",
    "log_info",
    "log_success",
    "log_warn",
    "report_result",
)

from typing import TYPE_CHECKING

from litestar.cli._utils import console  # pyright: ignore[reportPrivateImportUsage]
from rich.markup import escape

if TYPE_CHECKING:
    from elm_symfony_bridge.codegen import GenerationResult

_TICK = "[bold green]✓[/]"
_INFO = "[cyan]•[/]"
_WARN = "[yellow]![/]"
_FAIL = "[red]x[/]"


def log_success(message: str) -> None:
    """Print a success message with consistent styling."""

    console.print(f"{_TICK} {message}")


def log_info(message: str) -> None:
    """Print an informational message with consistent styling."""

    console.print(f"{_INFO} {message}")


def log_warn(message: str) -> None:
    """Print a warning message with consistent styling."""

    console.print(f"{_WARN} {message}")


def log_fail(message: str) -> None:
    """Print an error message with consistent styling."""

    console.print(f"{_FAIL} {message}")


def report_result(result: "GenerationResult | None") -> None:
    """Print a summary of a generation run.

    Args:
        result: The run's result, or None when the call was coalesced into another run.
    """
    if result is None:
        log_info("Generation already in progress, reusing its output")
        return
    if result.written_files:
        log_success(f"Elm modules generated → {', '.join(result.written_files)}")
    elif result.succeeded:
        log_info("Elm modules up to date")
    for artifact, error in result.errors.items():
        log_fail(f"{escape(artifact)}: {escape(error)}")
