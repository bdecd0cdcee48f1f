"""Command modules registered on the bosprobe Typer app."""
