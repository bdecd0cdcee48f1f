"""Common boolean coercion helpers and path constants."""

from __future__ import annotations

from pathlib import Path

TRUTHY_STRINGS = {"1", "true", "yes", "on"}
FALSY_STRINGS = {"0", "false", "no", "off"}

CONFIG_BASENAME = "config"
DEFAULT_CONFIG_FILENAME = f"{CONFIG_BASENAME}.toml"
LOCAL_CONFIG_FILENAME = f"{CONFIG_BASENAME}.local.toml"

DEFAULT_CONFIG_DIR = Path("~/.bosprobe")
DEFAULT_CACHE_FILENAME = "bucket_endpoint_cache"


def coerce_bool(value: object | None, *, default: bool = False) -> bool:
    """Convert common truthy/falsey string markers into booleans.

    Falls back to ``default`` when the value is ``None`` or ambiguous.
    """

    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in TRUTHY_STRINGS:
            return True
        if normalized in FALSY_STRINGS:
            return False
        return default
    if isinstance(value, (int, float)):
        return bool(value)
    return default


def coerce_positive_int(candidate: object | None, *, default: int) -> int:
    """Return ``candidate`` as a positive int, or ``default`` when it is not one."""

    if candidate is None:
        return default
    try:
        value = int(candidate)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default


__all__ = [
    "coerce_bool",
    "coerce_positive_int",
    "TRUTHY_STRINGS",
    "FALSY_STRINGS",
    "CONFIG_BASENAME",
    "DEFAULT_CONFIG_FILENAME",
    "LOCAL_CONFIG_FILENAME",
    "DEFAULT_CONFIG_DIR",
    "DEFAULT_CACHE_FILENAME",
]
