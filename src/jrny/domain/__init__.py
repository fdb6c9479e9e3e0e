"""Domain-level error taxonomy and result envelopes."""

from .errors import ConfigError, DatabaseError, JrnyError, ProjectError, RevisionError

__all__ = [
    "JrnyError",
    "ConfigError",
    "ProjectError",
    "RevisionError",
    "DatabaseError",
]
