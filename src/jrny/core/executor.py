"""
Revision Store

Applies scanned revisions to PostgreSQL and reads back which revisions have
been applied. Each revision runs in its own transaction together with the
insert of its tracking row, so a revision is either fully applied and
recorded or not applied at all.
"""

import time
from typing import Protocol

from pydantic import BaseModel, Field
from sqlalchemy import Engine, create_engine, text
from sqlalchemy.exc import SQLAlchemyError

from jrny.domain.errors import ConfigError, DatabaseError
from jrny.parser import Statement

from .config import Environment, TableSettings
from .revisions import RevisionFile, RevisionRecord

# Raw driver execution: revision SQL must not be scanned for bind parameters
_RAW = {"no_parameters": True}


class RevisionExecutionError(DatabaseError):
    """Raised when a revision fails to apply; its transaction is rolled back.

    Attributes:
        revision_id: Id of the failing revision
        statement_index: 0-based index of the failing statement, or None if the
            tracking row could not be written
    """

    def __init__(self, revision: RevisionFile, statement_index: int | None, cause: Exception):
        where = (
            f"statement {statement_index + 1}"
            if statement_index is not None
            else "recording the revision"
        )
        super().__init__(
            message=f"Revision {revision.filename} failed at {where}: {cause}",
            code="revision_failed",
        )
        self.revision_id = revision.id
        self.statement_index = statement_index


class AppliedRevision(BaseModel):
    """Outcome of applying one revision."""

    revision_id: int = Field(..., description="Revision id")
    filename: str = Field(..., description="Revision filename")
    statement_count: int = Field(default=0, description="Statements executed")
    execution_time_ms: int = Field(default=0, description="Execution time in milliseconds")


class RevisionStore(Protocol):
    """Port for reading and writing applied revisions."""

    def ensure_table(self) -> None: ...

    def load_records(self) -> list[RevisionRecord]: ...

    def apply_revision(
        self, revision: RevisionFile, statements: list[Statement]
    ) -> AppliedRevision: ...


class PostgresRevisionStore:
    """Revision store backed by a PostgreSQL tracking table.

    Attributes:
        engine: SQLAlchemy engine for the target database
        table: Location of the tracking table
    """

    def __init__(
        self, environment: Environment, table: TableSettings, engine: Engine | None = None
    ) -> None:
        if engine is None:
            if environment.database is None:
                raise ConfigError(
                    message="No database connection string configured",
                    code="database_not_configured",
                )
            engine = create_engine(environment.database.url)
        self.table = table
        self.engine = engine

    def ensure_table(self) -> None:
        """Create the tracking schema and table if they do not exist."""
        try:
            with self.engine.begin() as connection:
                connection.execute(
                    text(f'CREATE SCHEMA IF NOT EXISTS "{self.table.schema_name}"')
                )
                connection.execute(
                    text(
                        f"CREATE TABLE IF NOT EXISTS {self.table.qualified_name} (\n"
                        "    id          integer     PRIMARY KEY,\n"
                        "    applied_on  timestamptz NOT NULL DEFAULT now(),\n"
                        "    created_at  timestamptz NOT NULL,\n"
                        "    checksum    text        NOT NULL,\n"
                        "    filename    text        NOT NULL,\n"
                        "    title       text        NOT NULL\n"
                        ")"
                    )
                )
        except SQLAlchemyError as err:
            raise DatabaseError(
                message=f"Could not create revision table {self.table.qualified_name}: {err}",
                code="table_setup_failed",
            ) from err

    def load_records(self) -> list[RevisionRecord]:
        """Return applied revisions ordered by id."""
        query = text(
            "SELECT id, title, filename, checksum, created_at, applied_on "
            f"FROM {self.table.qualified_name} ORDER BY id"
        )
        try:
            with self.engine.connect() as connection:
                rows = connection.execute(query).mappings().all()
        except SQLAlchemyError as err:
            raise DatabaseError(
                message=f"Could not read revision table {self.table.qualified_name}: {err}",
                code="table_read_failed",
            ) from err
        return [RevisionRecord.model_validate(dict(row)) for row in rows]

    def apply_revision(
        self, revision: RevisionFile, statements: list[Statement]
    ) -> AppliedRevision:
        """Execute a revision's statements in order and record it, atomically.

        Raises:
            RevisionExecutionError: If any statement or the tracking insert fails
        """
        insert = text(
            f"INSERT INTO {self.table.qualified_name} "
            "(id, title, filename, checksum, created_at) "
            "VALUES (:id, :title, :filename, :checksum, :created_at)"
        )
        start_time = time.time()
        failed_index: int | None = None

        try:
            with self.engine.begin() as connection:
                for index, statement in enumerate(statements):
                    failed_index = index
                    connection.exec_driver_sql(statement.text, execution_options=_RAW)
                failed_index = None
                connection.execute(
                    insert,
                    {
                        "id": revision.id,
                        "title": revision.title,
                        "filename": revision.filename,
                        "checksum": revision.checksum,
                        "created_at": revision.created_at,
                    },
                )
        except SQLAlchemyError as err:
            raise RevisionExecutionError(revision, failed_index, err) from err

        return AppliedRevision(
            revision_id=revision.id,
            filename=revision.filename,
            statement_count=len(statements),
            execution_time_ms=int((time.time() - start_time) * 1000),
        )

    def close(self) -> None:
        self.engine.dispose()
