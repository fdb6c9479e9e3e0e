from datetime import UTC, datetime

import pytest
from click.testing import CliRunner

from jrny.cli import cli
from jrny.core.config import CONF, Config
from jrny.core.revisions import RevisionRecord
from jrny.core.templates import CONF_TEMPLATE
from tests.utils import FakeRevisionStore


@pytest.fixture
def temp_workspace(tmp_path):
    """Create a temporary workspace directory"""
    workspace = tmp_path / "workspace"
    workspace.mkdir()
    return workspace


@pytest.fixture
def config_path(temp_workspace):
    """Write the default jrny.toml and an empty revisions directory"""
    path = temp_workspace / CONF
    path.write_text(CONF_TEMPLATE, encoding="utf-8")
    (temp_workspace / "revisions").mkdir()
    return path


@pytest.fixture
def config(config_path):
    """Configuration loaded from the default template"""
    return Config.from_filepath(config_path)


@pytest.fixture
def fake_store():
    """Empty in-memory revision store"""
    return FakeRevisionStore()


@pytest.fixture
def make_record():
    """Factory for applied-revision records"""

    def _make(revision_id: int, title: str, checksum: str, filename: str | None = None):
        return RevisionRecord(
            id=revision_id,
            title=title,
            filename=filename or f"{revision_id:03d}.1577836800.{title}.sql",
            checksum=checksum,
            created_at=datetime(2020, 1, 1, tzinfo=UTC),
            applied_on=datetime(2020, 1, 2, tzinfo=UTC),
        )

    return _make


@pytest.fixture
def run_jrny(monkeypatch):
    """Invoke the jrny CLI, optionally from another working directory"""
    runner = CliRunner()

    def _run(*args: str, cwd=None):
        if cwd is not None:
            monkeypatch.chdir(cwd)
        return runner.invoke(cli, list(args))

    return _run
