"""bosprobe Typer CLI entrypoint."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import typer
from rich.console import Console
from rich.text import Text

from bosprobe.cli.commands import probe as probe_command

PROJECT_ROOT = Path(__file__).resolve().parents[3]

stderr_console = Console(stderr=True)
stdout_console = Console(stderr=False, highlight=False, soft_wrap=True)

app = typer.Typer(
    help="Diagnose upload and download failures against BOS object storage",
    rich_markup_mode="rich",
    no_args_is_help=True,
)


def _keyboard_interrupt_banner() -> Text:
    return Text.from_markup(
        "\n"
        "╭───────────────────────────────╮\n"
        "│[red]  Keyboard interrupt received  [/red]│\n"
        "│[red]       bosprobe stopping       [/red]│\n"
        "╰───────────────────────────────╯\n"
    )


probe_command.register(
    app,
    stdout_console=stdout_console,
    stderr_console=stderr_console,
    keyboard_interrupt_banner=_keyboard_interrupt_banner,
)


@app.command(help="Show the installed bosprobe package version.")
def version() -> None:
    """Print the bosprobe version discovered from the package metadata."""
    from importlib import metadata

    try:
        resolved_version = metadata.version("bosprobe")
    except metadata.PackageNotFoundError:
        pyproject = PROJECT_ROOT / "pyproject.toml"
        if not pyproject.exists():
            stdout_console.print("Version information unavailable")
            return
        import tomllib

        data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
        resolved_version = data.get("project", {}).get("version", "unknown")
    stdout_console.print(resolved_version)


def main(argv: Sequence[str] | None = None) -> None:
    """Run the Typer application with ``argv`` or the process arguments."""

    args = list(argv) if argv is not None else None
    app(args=args, prog_name="bosprobe")


__all__ = ["PROJECT_ROOT", "app", "main", "stderr_console", "stdout_console"]
