"""
Configuration Layer

Reads the project configuration (``jrny.toml``) and the environment file
(``jrny-env.toml``) into validated models.
"""

import re
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, ValidationError, field_validator
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError

from jrny.domain.errors import ConfigError

CONF = "jrny.toml"
ENV = "jrny-env.toml"
ENV_EX = "jrny-env.example.toml"

DEFAULT_REVISIONS_DIR = "revisions"
DEFAULT_TABLE_SCHEMA = "public"
DEFAULT_TABLE_NAME = "jrny_revision"

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_$]*$")

# Scheme aliases accepted for PostgreSQL connection strings
_POSTGRES_SCHEMES = {"postgres", "postgresql"}
_DEFAULT_DRIVER = "psycopg"


def _read_toml(path: Path, *, not_found_code: str, invalid_code: str) -> dict[str, Any]:
    """Load a TOML file, mapping I/O and syntax failures onto ConfigError."""
    if not path.is_file():
        raise ConfigError(message=f"File not found: {path}", code=not_found_code)
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as err:
        raise ConfigError(message=f"Invalid TOML in {path}: {err}", code=invalid_code) from err
    except OSError as err:
        raise ConfigError(message=f"Could not read {path}: {err}", code=invalid_code) from err


def _describe(err: ValidationError) -> str:
    parts = []
    for error in err.errors():
        location = ".".join(str(item) for item in error["loc"])
        parts.append(f"{location}: {error['msg']}")
    return "; ".join(parts)


def normalize_database_url(url: str) -> str:
    """Validate a PostgreSQL URL and pin the psycopg driver if none is given."""
    try:
        parsed = make_url(url)
    except ArgumentError as err:
        raise ValueError(f"Invalid database URL: {err}") from err

    dialect, _, driver = parsed.drivername.partition("+")
    if dialect.lower() not in _POSTGRES_SCHEMES:
        raise ValueError(f"Unsupported database dialect '{dialect}', expected postgresql")

    parsed = parsed.set(drivername=f"postgresql+{driver or _DEFAULT_DRIVER}")
    # render_as_string keeps the password; str(url) would mask it
    return parsed.render_as_string(hide_password=False)


class RevisionsSettings(BaseModel):
    """Where revision files live."""

    model_config = ConfigDict(extra="forbid")

    directory: Path = Field(default=Path(DEFAULT_REVISIONS_DIR))


class TableSettings(BaseModel):
    """Where applied revisions are recorded in the database."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    schema_name: str = Field(default=DEFAULT_TABLE_SCHEMA, alias="schema")
    name: str = Field(default=DEFAULT_TABLE_NAME)

    @field_validator("schema_name", "name")
    @classmethod
    def _plain_identifier(cls, value: str) -> str:
        if not _IDENTIFIER.match(value):
            raise ValueError(f"'{value}' is not a plain SQL identifier")
        return value

    @property
    def qualified_name(self) -> str:
        return f'"{self.schema_name}"."{self.name}"'


class Config(BaseModel):
    """Project configuration loaded from ``jrny.toml``.

    Attributes:
        revisions: Revision directory settings (resolved to an absolute path)
        table: Revision tracking table settings
    """

    model_config = ConfigDict(extra="forbid")

    revisions: RevisionsSettings = Field(default_factory=RevisionsSettings)
    table: TableSettings = Field(default_factory=TableSettings)
    _path: Path | None = PrivateAttr(default=None)

    @classmethod
    def from_filepath(cls, path: Path) -> "Config":
        """Read and validate a configuration file.

        Relative revision directories are resolved against the directory
        containing the configuration file.

        Raises:
            ConfigError: ``config_not_found`` or ``invalid_config``
        """
        data = _read_toml(path, not_found_code="config_not_found", invalid_code="invalid_config")
        try:
            config = cls.model_validate(data)
        except ValidationError as err:
            raise ConfigError(
                message=f"Invalid configuration in {path}: {_describe(err)}",
                code="invalid_config",
            ) from err

        root = path.resolve().parent
        directory = config.revisions.directory
        if not directory.is_absolute():
            config.revisions.directory = root / directory
        config._path = path.resolve()
        return config

    @property
    def root_dir(self) -> Path:
        """Directory holding the configuration file (or the cwd when unknown)."""
        return self._path.parent if self._path else Path.cwd()


class DatabaseEnvironment(BaseModel):
    """Database connection settings."""

    model_config = ConfigDict(extra="forbid")

    url: str

    @field_validator("url")
    @classmethod
    def _normalize_url(cls, value: str) -> str:
        return normalize_database_url(value)


class Environment(BaseModel):
    """Per-machine environment loaded from ``jrny-env.toml``."""

    model_config = ConfigDict(extra="forbid")

    database: DatabaseEnvironment | None = None

    @classmethod
    def from_filepath(cls, path: Path) -> "Environment":
        """Read and validate an environment file.

        A file without a database section loads with ``database`` unset, so
        a connection string can be supplied separately.

        Raises:
            ConfigError: ``env_not_found`` or ``invalid_environment``
        """
        data = _read_toml(
            path, not_found_code="env_not_found", invalid_code="invalid_environment"
        )
        try:
            return cls.model_validate(data)
        except ValidationError as err:
            raise ConfigError(
                message=f"Invalid environment in {path}: {_describe(err)}",
                code="invalid_environment",
            ) from err

    @classmethod
    def from_database_url(cls, url: str) -> "Environment":
        """Build an environment from a bare connection string."""
        try:
            return cls(database=DatabaseEnvironment(url=url))
        except ValidationError as err:
            raise ConfigError(
                message=f"Invalid database URL: {_describe(err)}",
                code="invalid_environment",
            ) from err


def resolve_environment(
    config: Config, env_file: Path | None = None, database_url: str | None = None
) -> Environment:
    """Pick the environment for a command.

    The environment file (explicit, or ``jrny-env.toml`` next to the config) is
    validated whenever it exists, even if ``database_url`` overrides it. The
    file may be missing, or lack a database section, only when a URL is
    supplied.

    Raises:
        ConfigError: If no usable environment can be found
    """
    env_path = env_file or config.root_dir / ENV
    env_from_file: Environment | None
    try:
        env_from_file = Environment.from_filepath(env_path)
    except ConfigError as err:
        if err.code != "env_not_found":
            raise
        env_from_file = None

    if database_url:
        return Environment.from_database_url(database_url)
    if env_from_file is None:
        raise ConfigError(
            message=(
                f"Environment file not found: {env_path}. "
                "Create it or pass --database-url."
            ),
            code="env_not_found",
        )
    if env_from_file.database is None:
        raise ConfigError(
            message=(
                f"No database section in {env_path}. "
                "Add one or pass --database-url."
            ),
            code="database_not_configured",
        )
    return env_from_file
