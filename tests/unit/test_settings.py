from __future__ import annotations

import logging
from pathlib import Path

import pytest

from bosprobe.config.constants import coerce_bool, coerce_positive_int
from bosprobe.config.settings import (
    DEFAULT_ENDPOINT,
    DEFAULT_LOCALE,
    DEFAULT_PING_COUNT,
    LoggingInputs,
    ProbeInputs,
    apply_cli_overrides,
    credentials_from_settings,
    load_settings,
    logging_from_settings,
    probe_from_settings,
    region_domains_from_settings,
)


def _write_config(path: Path, body: str) -> Path:
    path.write_text(body, encoding="utf-8")
    return path


def test_defaults_without_config(tmp_path: Path) -> None:
    settings = load_settings(str(tmp_path / "absent.toml"))

    probe = probe_from_settings(settings)
    logging_settings = logging_from_settings(settings)

    assert probe.locale == DEFAULT_LOCALE
    assert probe.default_endpoint == DEFAULT_ENDPOINT
    assert probe.ping_count == DEFAULT_PING_COUNT
    assert probe.cache_file.name == "bucket_endpoint_cache"
    assert probe.log_dir == Path(".")
    assert probe.warnings == ()
    assert logging_settings.level == logging.WARNING
    assert logging_settings.file_path is None


def test_values_from_config_file(tmp_path: Path) -> None:
    config = _write_config(
        tmp_path / "config.toml",
        "\n".join(
            [
                "[credentials]",
                'access_key = "file-ak"',
                'secret_key = "file-sk"',
                "",
                "[probe]",
                'locale = "zh"',
                'reference_host = "example.com"',
                'default_endpoint = "gz.bcebos.com"',
                "use_https = true",
                "ping_count = 2",
                "traceroute_max_hops = 9",
                f'cache_file = "{(tmp_path / "c.ini").as_posix()}"',
                "cache_ttl = 60",
                "",
                "[domains]",
                'bj = "bj.internal.example"',
                "",
                "[domains.fsh]",
                'endpoint = "fsh.internal.example"',
                "",
                "[logging]",
                'level = "DEBUG"',
                'format = "json"',
            ]
        )
        + "\n",
    )

    settings = load_settings(str(config))
    probe = probe_from_settings(settings)

    assert probe.locale == "zh"
    assert probe.reference_host == "example.com"
    assert probe.default_endpoint == "gz.bcebos.com"
    assert probe.use_https is True
    assert (probe.ping_count, probe.traceroute_max_hops, probe.cache_ttl) == (2, 9, 60)
    assert probe.cache_file == tmp_path / "c.ini"
    assert credentials_from_settings(settings) == ("file-ak", "file-sk")
    assert region_domains_from_settings(settings) == {
        "bj": "bj.internal.example",
        "fsh": "fsh.internal.example",
    }
    logging_settings = logging_from_settings(settings)
    assert logging_settings.level == logging.DEBUG
    assert logging_settings.format == "json"


def test_local_sibling_overrides_base(tmp_path: Path) -> None:
    config = _write_config(tmp_path / "config.toml", '[probe]\nlocale = "zh"\nping_count = 3\n')
    _write_config(tmp_path / "config.local.toml", '[probe]\nlocale = "en"\n')

    probe = probe_from_settings(load_settings(str(config)))

    assert probe.locale == "en"
    assert probe.ping_count == 3


def test_environment_overrides_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config = _write_config(tmp_path / "config.toml", '[probe]\nlog_dir = "/from/file"\n')
    monkeypatch.setenv("BOSPROBE_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("BOSPROBE_DEFAULT_ENDPOINT", "su.bcebos.com")

    probe = probe_from_settings(load_settings(str(config)))

    assert probe.log_dir == tmp_path / "logs"
    assert probe.default_endpoint == "su.bcebos.com"


def test_cli_overrides_win(tmp_path: Path) -> None:
    config = _write_config(tmp_path / "config.toml", '[probe]\nlocale = "zh"\ndebug = false\n')
    settings = load_settings(str(config))

    apply_cli_overrides(
        settings,
        probe_inputs=ProbeInputs(locale="en", debug=True),
        logging_inputs=LoggingInputs(level="ERROR"),
    )

    probe = probe_from_settings(settings)
    assert (probe.locale, probe.debug) == ("en", True)
    assert logging_from_settings(settings).level == logging.ERROR


def test_invalid_values_produce_warnings(tmp_path: Path) -> None:
    config = _write_config(
        tmp_path / "config.toml",
        '[probe]\nlocale = "fr"\nping_count = -1\ndefault_endpoint = "https://bj.bcebos.com/"\n',
    )

    probe = probe_from_settings(load_settings(str(config)))

    assert probe.locale == DEFAULT_LOCALE
    assert probe.ping_count == DEFAULT_PING_COUNT
    assert probe.default_endpoint == "bj.bcebos.com"
    assert len(probe.warnings) == 3


def test_unsupported_log_format_raises(tmp_path: Path) -> None:
    config = _write_config(tmp_path / "config.toml", '[logging]\nformat = "xml"\n')

    with pytest.raises(ValueError, match="Unsupported log format"):
        logging_from_settings(load_settings(str(config)))


@pytest.mark.parametrize(
    ("value", "expected"),
    [("yes", True), ("Off", False), (1, True), (None, False), ("maybe", False)],
)
def test_coerce_bool(value: object, expected: bool) -> None:
    assert coerce_bool(value) is expected


@pytest.mark.parametrize(("value", "expected"), [("7", 7), (0, 5), ("x", 5), (None, 5), (3, 3)])
def test_coerce_positive_int(value: object, expected: int) -> None:
    assert coerce_positive_int(value, default=5) == expected
