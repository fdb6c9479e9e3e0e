"""
CLI tests for jrny commands, with the database replaced by an in-memory store.
"""

from pathlib import Path

import pytest

import jrny.cli as cli_module
from jrny import __version__
from jrny.core.config import CONF, ENV
from tests.utils import FakeRevisionStore, write_revision


@pytest.fixture
def patched_store(monkeypatch, fake_store):
    """Route review/embark to the in-memory store, recording connection options."""
    calls = []

    def _open_store(config, env_file, database_url):
        calls.append((env_file, database_url))
        return fake_store

    monkeypatch.setattr(cli_module, "_open_store", _open_store)
    fake_store.open_calls = calls
    return fake_store


def test_version(run_jrny) -> None:
    result = run_jrny("--version")
    assert result.exit_code == 0
    assert __version__ in result.output


def test_help_lists_commands(run_jrny) -> None:
    result = run_jrny("--help")
    assert result.exit_code == 0
    for command in ("begin", "plan", "review", "embark", "split"):
        assert command in result.output


class TestBegin:
    def test_begin_creates_project(self, run_jrny, tmp_path: Path) -> None:
        root = tmp_path / "project"

        result = run_jrny("begin", str(root))

        assert result.exit_code == 0, result.output
        assert "A journey has begun" in result.output
        assert (root / CONF).is_file()
        assert (root / ENV).is_file()
        assert (root / "revisions").is_dir()

    def test_begin_existing_project_fails(self, run_jrny, config_path: Path) -> None:
        result = run_jrny("begin", str(config_path.parent))

        assert result.exit_code == 1
        assert "Could not begin" in result.output


class TestPlan:
    def test_plan_from_project_directory(
        self, run_jrny, config, temp_workspace: Path
    ) -> None:
        result = run_jrny("plan", "create users", cwd=temp_workspace)

        assert result.exit_code == 0, result.output
        created = list(config.revisions.directory.glob("001.*.create-users.sql"))
        assert len(created) == 1

    def test_plan_with_conf_file(
        self, run_jrny, config, config_path: Path, tmp_path: Path
    ) -> None:
        result = run_jrny("plan", "-c", str(config_path), "seed", cwd=tmp_path)

        assert result.exit_code == 0, result.output
        assert len(list(config.revisions.directory.glob("*.seed.sql"))) == 1

    def test_plan_without_config_fails(self, run_jrny, temp_workspace: Path) -> None:
        result = run_jrny("plan", "x", cwd=temp_workspace)

        assert result.exit_code == 1
        assert "Could not plan revision" in result.output


class TestReview:
    def test_review_clean(self, run_jrny, config, temp_workspace: Path, patched_store) -> None:
        write_revision(config, 1, "one", "select 1;")

        result = run_jrny("review", cwd=temp_workspace)

        assert result.exit_code == 0, result.output
        assert "1 pending" in result.output
        assert patched_store.closed

    def test_review_with_problems_exits_nonzero(
        self, run_jrny, config, temp_workspace: Path, monkeypatch, make_record
    ) -> None:
        write_revision(config, 1, "one", "select 1;")
        store = FakeRevisionStore(records=[make_record(1, "one", "stale")])
        monkeypatch.setattr(cli_module, "_open_store", lambda config, env_file, url: store)

        result = run_jrny("review", cwd=temp_workspace)

        assert result.exit_code == 1
        assert "Problems found" in result.output
        assert store.closed

    def test_review_forwards_connection_options(
        self, run_jrny, config, temp_workspace: Path, patched_store
    ) -> None:
        result = run_jrny(
            "review", "-e", "other-env.toml", "-d", "postgresql://u@db/app", cwd=temp_workspace
        )

        assert result.exit_code == 0, result.output
        assert patched_store.open_calls == [(Path("other-env.toml"), "postgresql://u@db/app")]

    def test_review_new_project_with_database_url(
        self, run_jrny, tmp_path: Path, monkeypatch, fake_store
    ) -> None:
        root = tmp_path / "project"
        assert run_jrny("begin", str(root)).exit_code == 0
        urls = []

        def _store(environment, table):
            urls.append(environment.database.url)
            return fake_store

        monkeypatch.setattr(cli_module, "PostgresRevisionStore", _store)

        result = run_jrny("review", "-d", "postgresql://u@db/app", cwd=root)

        assert result.exit_code == 0, result.output
        assert urls == ["postgresql+psycopg://u@db/app"]

    def test_review_without_environment_fails(
        self, run_jrny, config, temp_workspace: Path
    ) -> None:
        result = run_jrny("review", cwd=temp_workspace)

        assert result.exit_code == 1
        assert "Configuration error" in result.output


class TestEmbark:
    def test_embark_applies_revisions(
        self, run_jrny, config, temp_workspace: Path, patched_store
    ) -> None:
        write_revision(config, 1, "one", "create table a (id int);")
        write_revision(config, 2, "two", "insert into a values (1);")

        result = run_jrny("embark", cwd=temp_workspace)

        assert result.exit_code == 0, result.output
        assert [revision_id for revision_id, _ in patched_store.executed] == [1, 2]
        assert patched_store.closed

    def test_embark_failure_exits_nonzero(
        self, run_jrny, config, temp_workspace: Path, monkeypatch
    ) -> None:
        write_revision(config, 1, "one", "select 1;")
        store = FakeRevisionStore(fail_on=1)
        monkeypatch.setattr(cli_module, "_open_store", lambda config, env_file, url: store)

        result = run_jrny("embark", cwd=temp_workspace)

        assert result.exit_code == 1
        assert "Embark failed" in result.output
        assert store.closed

    def test_embark_lex_error_exits_nonzero(
        self, run_jrny, config, temp_workspace: Path, patched_store
    ) -> None:
        write_revision(config, 1, "broken", 'select "unclosed from t;')

        result = run_jrny("embark", cwd=temp_workspace)

        assert result.exit_code == 1
        assert "Embark failed" in result.output
        assert patched_store.executed == []


class TestSplit:
    def test_split_plain(self, run_jrny, tmp_path: Path) -> None:
        path = tmp_path / "script.sql"
        path.write_text("select 1; -- one\nselect ';';", encoding="utf-8")

        result = run_jrny("split", "--plain", str(path))

        assert result.exit_code == 0, result.output
        assert "Statement 1/2" in result.output
        assert "select ';';" in result.output
        assert "-- one" not in result.output

    def test_split_highlighted(self, run_jrny, tmp_path: Path) -> None:
        path = tmp_path / "script.sql"
        path.write_text("select 1;", encoding="utf-8")

        result = run_jrny("split", str(path))

        assert result.exit_code == 0, result.output
        assert "Statement 1/1" in result.output

    def test_split_lex_error(self, run_jrny, tmp_path: Path) -> None:
        path = tmp_path / "broken.sql"
        path.write_text("select 1; /* open", encoding="utf-8")

        result = run_jrny("split", str(path))

        assert result.exit_code == 1
        assert "Could not split file" in result.output

    def test_split_missing_file(self, run_jrny, tmp_path: Path) -> None:
        result = run_jrny("split", str(tmp_path / "missing.sql"))
        assert result.exit_code == 2
