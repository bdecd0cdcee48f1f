"""CLI entry point wrapper.

The :func:`main` function proxies to the Typer application exported by
:mod:`bosprobe.cli.app`; it is the target of the ``bosprobe`` console script.
"""

from __future__ import annotations

from bosprobe.cli.app import main as _app_main


def main(argv: list[str] | None = None) -> None:
    """Invoke the CLI.

    Parameters
    ----------
    argv:
        Optional list of arguments to pass to Typer. When ``None`` the
        process arguments are used.
    """

    _app_main(argv)


__all__ = ["main"]
