"""
Embark Command

Reviews revisions and, if nothing is wrong, applies every pending revision in
id order. All pending scripts are scanned before the first one is executed,
so a malformed script never leaves the database half-migrated.
"""

from dataclasses import dataclass, field

from rich.console import Console

from jrny.core.config import Config
from jrny.core.executor import AppliedRevision, RevisionStore
from jrny.core.revisions import RevisionFile
from jrny.domain.errors import JrnyError
from jrny.parser import LexError, Statement

from .review import ReviewError, review_revisions

console = Console()


class EmbarkError(Exception):
    """Raised when pending revisions cannot be applied"""


class RevisionLexError(EmbarkError):
    """Raised when a pending revision cannot be split into statements"""

    def __init__(self, revision: RevisionFile, error: LexError) -> None:
        super().__init__(f"Revision {revision.filename} could not be parsed: {error}")
        self.revision_id = revision.id
        self.error = error


@dataclass(slots=True)
class EmbarkResult:
    """Revisions applied by one embark run, in order."""

    applied: list[AppliedRevision] = field(default_factory=list)

    @property
    def applied_ids(self) -> list[int]:
        return [revision.revision_id for revision in self.applied]


def scan_pending(revisions: list[RevisionFile]) -> list[tuple[RevisionFile, list[Statement]]]:
    """Scan every pending revision up front.

    Raises:
        RevisionLexError: For the first revision that fails to scan
    """
    scanned = []
    for revision in revisions:
        try:
            scanned.append((revision, revision.statements()))
        except LexError as err:
            raise RevisionLexError(revision, err) from err
    return scanned


def embark(config: Config, store: RevisionStore) -> EmbarkResult:
    """Apply pending revisions

    Args:
        config: Project configuration
        store: Revision store for the target database

    Returns:
        EmbarkResult listing the applied revisions

    Raises:
        EmbarkError: If review finds problems, a revision fails to scan,
            or a revision fails to apply
    """
    try:
        review = review_revisions(config, store)
    except ReviewError as err:
        raise EmbarkError(str(err)) from err

    if review.has_errors:
        raise EmbarkError("Review found problems with existing revisions; nothing was applied")

    pending = [revision.file for revision in review.pending if revision.file is not None]
    if not pending:
        console.print("[green]✓[/green] Nothing to apply")
        return EmbarkResult()

    scanned = scan_pending(pending)

    result = EmbarkResult()
    console.print(f"\n[bold cyan]Applying {len(scanned)} revision(s)...[/bold cyan]\n")
    for revision, statements in scanned:
        console.print(f"[cyan]{revision.filename}[/cyan] ({len(statements)} statements)")
        try:
            applied = store.apply_revision(revision, statements)
        except JrnyError as err:
            console.print(f"  [red]✗[/red] {err}")
            raise EmbarkError(str(err)) from err
        console.print(f"  [green]✓[/green] Applied in {applied.execution_time_ms / 1000:.2f}s")
        result.applied.append(applied)

    console.print(f"\n[green]✓ Applied {len(result.applied)} revision(s)[/green]")
    return result
