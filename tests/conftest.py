from __future__ import annotations

from collections.abc import Iterator

import pytest

from bosprobe.infrastructure.finisher import FINISHER

_ISOLATED_ENV = (
    "BCE_ACCESS_KEY_ID",
    "BCE_SECRET_ACCESS_KEY",
    "BOSPROBE_CONFIG",
    "BOSPROBE_LOCALE",
    "BOSPROBE_REFERENCE_HOST",
    "BOSPROBE_DEFAULT_ENDPOINT",
    "BOSPROBE_USE_HTTPS",
    "BOSPROBE_CACHE_FILE",
    "BOSPROBE_LOG_DIR",
    "BOSPROBE_DEBUG",
    "BOSPROBE_LOG_LEVEL",
    "BOSPROBE_LOG_FORMAT",
    "BOSPROBE_LOG_FILE",
)


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("bosprobe")
    group.addoption(
        "--online",
        action="store_true",
        dest="bosprobe_online",
        help="Also run tests marked 'online' (real network tools and endpoints).",
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "online: needs real network tools or endpoints")
    config.addinivalue_line("markers", "offline: runs without network access")
    config.addinivalue_line("markers", "integration: exercises a live BOS deployment")


def _is_integration_path(s: str) -> bool:
    s = s.replace("\\", "/")
    return s.startswith("tests/integration/") or "/tests/integration/" in s


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    for item in items:
        node_str = str(getattr(item, "fspath", item.nodeid))
        item.add_marker(
            pytest.mark.online if _is_integration_path(node_str) else pytest.mark.offline
        )

    if config.getoption("bosprobe_online"):
        return

    deselect = [i for i in items if "online" in i.keywords]
    if not deselect:
        return
    config.hook.pytest_deselected(items=deselect)
    items[:] = [i for i in items if i not in deselect]


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ISOLATED_ENV:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _empty_finisher() -> Iterator[None]:
    FINISHER.execute()
    yield
    FINISHER.execute()
