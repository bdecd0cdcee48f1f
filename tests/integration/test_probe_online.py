import os
import shutil
from pathlib import Path

import pytest
from typer.testing import CliRunner

from bosprobe.cli.app import app
from bosprobe.infrastructure.net_tools import NetTools

pytestmark = [pytest.mark.integration, pytest.mark.online]


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("BOSPROBE_CACHE_FILE", str(tmp_path / "cache.ini"))
    monkeypatch.setenv("BOSPROBE_CONFIG", str(tmp_path / "config.toml"))
    return tmp_path


@pytest.fixture
def live_bucket(monkeypatch: pytest.MonkeyPatch) -> str:
    """Bucket and credentials taken from BOSPROBE_ONLINE_* variables."""

    bucket = os.getenv("BOSPROBE_ONLINE_BUCKET")
    access_key = os.getenv("BOSPROBE_ONLINE_AK")
    secret_key = os.getenv("BOSPROBE_ONLINE_SK")
    if not (bucket and access_key and secret_key):
        pytest.skip("BOSPROBE_ONLINE_BUCKET/AK/SK not configured; skipping live probes")
    monkeypatch.setenv("BCE_ACCESS_KEY_ID", access_key)
    monkeypatch.setenv("BCE_SECRET_ACCESS_KEY", secret_key)
    return bucket


def test_ping_localhost() -> None:
    if shutil.which("ping") is None:
        pytest.skip("ping is not installed")

    result = NetTools().ping("127.0.0.1", 1)

    assert result.ok, result.error
    assert "127.0.0.1" in result.output


def test_live_upload_then_download(workspace: Path, live_bucket: str) -> None:
    runner = CliRunner()

    upload = runner.invoke(app, ["upload", "-b", live_bucket, "-o", "bosprobe-online/"])
    assert upload.exit_code == 0, upload.output
    assert "[upload succeeded]" in upload.output

    download = runner.invoke(app, ["download", "-b", live_bucket, "-t", "out/"])
    assert download.exit_code == 0, download.output
    assert any((workspace / "out").iterdir())
    assert list(workspace.glob("bosprobe*.log"))
