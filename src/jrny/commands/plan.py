"""
Plan Command

Creates the next revision file in the revisions directory.
"""

from datetime import UTC, datetime
from pathlib import Path

from rich.console import Console

from jrny.core.config import Config
from jrny.core.revisions import load_revision_files, next_revision_id, revision_filename
from jrny.core.templates import REVISION_TEMPLATE
from jrny.domain.errors import JrnyError

console = Console()


class PlanError(Exception):
    """Raised when a revision file cannot be created"""


def plan_revision(
    config: Config,
    title: str,
    contents: str | None = None,
    now: datetime | None = None,
) -> Path:
    """Create a new revision file

    The id is one past the highest existing id; the filename records the
    creation time as a unix timestamp.

    Args:
        config: Project configuration
        title: Revision title; whitespace becomes dashes in the filename
        contents: Initial file contents (default: a commented template)
        now: Creation time override

    Returns:
        Path of the new revision file

    Raises:
        PlanError: If the revision cannot be created
    """
    try:
        directory = config.revisions.directory
        revisions = load_revision_files(directory)
        revision_id = next_revision_id(revisions)
        filename = revision_filename(revision_id, now or datetime.now(UTC), title)
        path = directory / filename

        with path.open("x", encoding="utf-8") as handle:
            if contents is None:
                contents = REVISION_TEMPLATE.format(title=title)
            handle.write(contents)
    except JrnyError as err:
        raise PlanError(str(err)) from err
    except OSError as err:
        raise PlanError(f"Could not create revision file: {err}") from err

    console.print(f"[green]✓[/green] Created revision {revision_id}: [cyan]{path}[/cyan]")
    return path
