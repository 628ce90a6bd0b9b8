"""Shared test fixtures."""

import pytest
from unittest.mock import patch

from eotrle.log import set_level, set_sink


@pytest.fixture
def eotrle_home(tmp_path, monkeypatch):
    """point ~/.eotrle/ and the project root at a temp dir."""
    home = tmp_path / "home"
    project = tmp_path / "project"
    project.mkdir()
    monkeypatch.chdir(project)
    for key in ("EOTRLE_ESCAPE_MARKER", "EOTRLE_STRICT", "EOTRLE_VERIFY", "EOTRLE_METRICS"):
        monkeypatch.delenv(key, raising=False)
    with patch("eotrle.paths.GLOBAL_CONFIG_FILE", home / "config.json"), \
         patch("eotrle.paths.METRICS_FILE", home / "metrics.jsonl"):
        yield home


@pytest.fixture(autouse=True)
def _reset_log():
    yield
    set_level("info")
    set_sink(None)
