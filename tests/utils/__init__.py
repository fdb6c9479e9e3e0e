"""Shared test helpers."""

from .fake_store import FakeRevisionStore
from .revisions import write_revision

__all__ = ["FakeRevisionStore", "write_revision"]
