"""Package data helpers for bosprobe."""

from collections.abc import Iterator
from importlib import resources as _resources

__all__ = ["iter_message_locales", "read_messages"]

_MESSAGES_DIR = "messages"


def iter_message_locales() -> Iterator[str]:
    """Yield the locales that ship a message catalog."""
    root = _resources.files(__name__).joinpath(_MESSAGES_DIR)
    for entry in root.iterdir():
        if entry.is_file() and entry.name.endswith(".toml"):
            yield entry.name[: -len(".toml")]


def read_messages(locale: str) -> str | None:
    entry = _resources.files(__name__).joinpath(_MESSAGES_DIR, f"{locale}.toml")
    if not entry.is_file():
        return None
    return entry.read_text(encoding="utf-8")
