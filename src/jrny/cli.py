"""
Click-based CLI for jrny.
"""

import sys
from pathlib import Path
from typing import NoReturn

import click
from rich.console import Console
from rich.markup import escape

from . import __version__
from .commands import (
    BeginError,
    EmbarkError,
    PlanError,
    ReviewError,
    SplitError,
    begin_project,
    embark,
    plan_revision,
    review_revisions,
    split_file,
)
from .core.config import CONF, Config, resolve_environment
from .core.executor import PostgresRevisionStore
from .domain.errors import JrnyError

console = Console()

conf_file_option = click.option(
    "--conf-file",
    "-c",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help=f"Path to the .toml configuration file (default: ./{CONF})",
)
env_file_option = click.option(
    "--env-file",
    "-e",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to the .toml environment file (default: jrny-env.toml next to the config)",
)
database_url_option = click.option(
    "--database-url",
    "-d",
    default=None,
    help="Database connection string, overriding the environment file",
)


def _fail(label: str, err: Exception) -> NoReturn:
    console.print(f"[red]✗ {label}:[/red] {escape(str(err))}")
    sys.exit(1)


def _load_config(conf_file: Path | None) -> Config:
    return Config.from_filepath(conf_file or Path.cwd() / CONF)


def _open_store(
    config: Config, env_file: Path | None, database_url: str | None
) -> PostgresRevisionStore:
    environment = resolve_environment(config, env_file=env_file, database_url=database_url)
    return PostgresRevisionStore(environment, config.table)


@click.group(
    epilog="Use `jrny COMMAND --help` for details on a command.",
)
@click.version_option(version=__version__, prog_name="jrny")
def cli() -> None:
    """PostgreSQL schema revisions made simple - just add SQL!

    Revision files must not change or disappear once applied, and revisions
    are applied in the same order in every environment.
    """
    pass


@cli.command()
@click.argument("directory", type=click.Path(file_okay=False, path_type=Path))
def begin(directory: Path) -> None:
    """Create files and directories for a new journey"""
    try:
        begin_project(directory)
    except BeginError as e:
        _fail("Could not begin", e)


@cli.command()
@conf_file_option
@click.argument("title")
def plan(conf_file: Path | None, title: str) -> None:
    """Create a new .sql revision file

    Surround TITLE with quotation marks to include whitespace.
    """
    try:
        config = _load_config(conf_file)
        plan_revision(config, title)
    except (JrnyError, PlanError) as e:
        _fail("Could not plan revision", e)


@cli.command()
@conf_file_option
@env_file_option
@database_url_option
def review(conf_file: Path | None, env_file: Path | None, database_url: str | None) -> None:
    """List revisions with creation and application dates and any problems"""
    try:
        config = _load_config(conf_file)
        store = _open_store(config, env_file, database_url)
    except JrnyError as e:
        _fail("Configuration error", e)

    try:
        result = review_revisions(config, store)
    except ReviewError as e:
        _fail("Review failed", e)
    finally:
        store.close()

    if result.has_errors:
        sys.exit(1)


@cli.command(name="embark")
@conf_file_option
@env_file_option
@database_url_option
def embark_command(
    conf_file: Path | None, env_file: Path | None, database_url: str | None
) -> None:
    """Review revisions and apply pending ones if no problems are found"""
    try:
        config = _load_config(conf_file)
        store = _open_store(config, env_file, database_url)
    except JrnyError as e:
        _fail("Configuration error", e)

    try:
        embark(config, store)
    except EmbarkError as e:
        _fail("Embark failed", e)
    finally:
        store.close()


@cli.command()
@click.option("--plain", is_flag=True, help="Print statements without syntax highlighting")
@click.argument("sql_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def split(plain: bool, sql_file: Path) -> None:
    """Print the statements a SQL file is split into"""
    try:
        split_file(sql_file, highlight=not plain)
    except SplitError as e:
        _fail("Could not split file", e)


if __name__ == "__main__":
    cli()
