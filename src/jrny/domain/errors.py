"""Unified error taxonomy for jrny commands and collaborators."""

from dataclasses import dataclass


@dataclass(slots=True)
class JrnyError(Exception):
    """Base class for all jrny failures."""

    message: str
    code: str

    def __str__(self) -> str:
        return self.message


class ConfigError(JrnyError):
    """Raised when the configuration or environment files cannot be used."""


class ProjectError(JrnyError):
    """Raised when project files or directories are in an unusable state."""


class RevisionError(JrnyError):
    """Raised for problems with revision files on disk."""


class DatabaseError(JrnyError):
    """Raised when the revision store cannot be read or written."""
