"""
Review Command

Compares revision files with the revisions recorded in the database and
reports anything that would make applying further revisions unsafe.
"""

from dataclasses import dataclass, field
from datetime import datetime

from rich.console import Console
from rich.table import Table

from jrny.core.config import Config
from jrny.core.executor import RevisionStore
from jrny.core.revisions import AnnotatedRevision, annotate_revisions, load_revision_files
from jrny.domain.errors import JrnyError

console = Console()


class ReviewError(Exception):
    """Raised when revisions cannot be reviewed"""


@dataclass(slots=True)
class ReviewResult:
    """Annotated revisions in id order."""

    revisions: list[AnnotatedRevision] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return any(revision.has_errors for revision in self.revisions)

    @property
    def pending(self) -> list[AnnotatedRevision]:
        return [revision for revision in self.revisions if revision.is_pending]

    @property
    def applied_count(self) -> int:
        return sum(1 for revision in self.revisions if revision.applied_on is not None)


def collect_review(config: Config, store: RevisionStore) -> ReviewResult:
    """Load files and records and annotate them, without printing."""
    store.ensure_table()
    records = store.load_records()
    files = load_revision_files(config.revisions.directory)
    return ReviewResult(revisions=annotate_revisions(files, records))


def _format_time(value: datetime | None) -> str:
    if value is None:
        return "[yellow]pending[/yellow]"
    return value.strftime("%Y-%m-%d %H:%M:%S")


def print_review(result: ReviewResult) -> None:
    """Render the review as a table followed by a summary line."""
    if not result.revisions:
        console.print("[yellow]No revisions found[/yellow]")
        return

    table = Table(title="Revisions", show_header=True, header_style="bold magenta")
    table.add_column("Id", style="dim", justify="right")
    table.add_column("Title", style="cyan")
    table.add_column("Created")
    table.add_column("Applied")
    table.add_column("Problems", style="red")

    for revision in result.revisions:
        notes = [f"[dim]{note}[/dim]" for note in revision.notes]
        table.add_row(
            str(revision.id),
            revision.title,
            _format_time(revision.created_at),
            _format_time(revision.applied_on),
            "\n".join(revision.problems() + notes),
        )
    console.print(table)

    if result.has_errors:
        console.print("[red]✗ Problems found; no revisions can be applied until fixed[/red]")
    else:
        console.print(
            f"[green]✓[/green] {result.applied_count} applied, {len(result.pending)} pending"
        )


def review_revisions(config: Config, store: RevisionStore) -> ReviewResult:
    """Review revisions against the database

    Args:
        config: Project configuration
        store: Revision store for the target database

    Returns:
        ReviewResult with every revision annotated

    Raises:
        ReviewError: If files or records cannot be loaded
    """
    try:
        result = collect_review(config, store)
    except JrnyError as err:
        raise ReviewError(str(err)) from err

    print_review(result)
    return result
