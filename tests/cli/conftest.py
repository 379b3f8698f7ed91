"""Shared fixtures for CLI tests."""

import logging
from argparse import Namespace

import pytest

CONFIG = """\
jira:
  instance: example.atlassian.net
  username: me@example.com
  token: secret
tickit:
  page-size: 20
"""


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    """A usable tickit config, isolated from the real home and environment."""
    monkeypatch.setenv("HOME", str(tmp_path))
    for var in ("TICKIT_INSTANCE", "TICKIT_USERNAME", "TICKIT_TOKEN", "JIRA_API_TOKEN"):
        monkeypatch.delenv(var, raising=False)
    path = tmp_path / "tickit.yaml"
    path.write_text(CONFIG)
    return path


@pytest.fixture
def cli_tracker(tracker, monkeypatch):
    """Make every CLI command talk to the in-memory tracker."""
    monkeypatch.setattr("tickit.cli._common.make_client", lambda config: tracker)
    return tracker


@pytest.fixture
def make_args(config_file):
    """Build a Namespace like argparse would, with the common flags filled in."""

    def make(**kwargs):
        values = {"config": str(config_file), "json": False, "verbose": 0}
        values.update(kwargs)
        return Namespace(**values)

    return make


@pytest.fixture(autouse=True)
def reset_logging():
    """Commands point the root logger at a captured stderr; drop it afterwards."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    root.setLevel(level)
