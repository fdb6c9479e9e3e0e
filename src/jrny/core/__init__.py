"""
Core Infrastructure

Configuration, project layout, revision files and the database-backed
revision store.
"""

from .config import (
    CONF,
    ENV,
    ENV_EX,
    Config,
    DatabaseEnvironment,
    Environment,
    RevisionsSettings,
    TableSettings,
    resolve_environment,
)
from .executor import AppliedRevision, PostgresRevisionStore, RevisionExecutionError, RevisionStore
from .project import ProjectPaths
from .revisions import (
    AnnotatedRevision,
    RevisionFile,
    RevisionRecord,
    annotate_revisions,
    compute_checksum,
    load_revision_files,
    next_revision_id,
    revision_filename,
)

__all__ = [
    # Config
    "CONF",
    "ENV",
    "ENV_EX",
    "Config",
    "DatabaseEnvironment",
    "Environment",
    "RevisionsSettings",
    "TableSettings",
    "resolve_environment",
    # Project
    "ProjectPaths",
    # Revisions
    "AnnotatedRevision",
    "RevisionFile",
    "RevisionRecord",
    "annotate_revisions",
    "compute_checksum",
    "load_revision_files",
    "next_revision_id",
    "revision_filename",
    # Store
    "AppliedRevision",
    "PostgresRevisionStore",
    "RevisionExecutionError",
    "RevisionStore",
]
