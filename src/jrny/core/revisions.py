"""
Revisions

Revision files on disk, revision records from the database, and the review
logic that reconciles the two.
"""

import hashlib
import re
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

from pydantic import BaseModel, Field

from jrny.domain.errors import RevisionError
from jrny.parser import Statement, split_statements

REVISION_SUFFIX = ".sql"

_FILENAME = re.compile(r"^(?P<id>\d+)\.(?P<timestamp>\d+)\.(?P<title>.+)\.sql$")


def compute_checksum(data: bytes) -> str:
    """SHA-256 hex digest of a revision's raw bytes."""
    return hashlib.sha256(data).hexdigest()


def slugify_title(title: str) -> str:
    """Collapse whitespace in a revision title to single dashes."""
    slug = "-".join(title.split())
    if not slug:
        raise RevisionError(message="Revision title must not be empty", code="invalid_title")
    if "/" in slug or "\\" in slug:
        raise RevisionError(
            message=f"Revision title '{title}' must not contain path separators",
            code="invalid_title",
        )
    return slug


def revision_filename(revision_id: int, created_at: datetime, title: str) -> str:
    """Build ``<id>.<unix timestamp>.<title>.sql``."""
    return f"{revision_id:03d}.{int(created_at.timestamp())}.{slugify_title(title)}.sql"


def parse_filename(filename: str) -> tuple[int, datetime, str]:
    """Split a revision filename into (id, created_at, title).

    Raises:
        RevisionError: If the name does not follow the revision pattern
    """
    match = _FILENAME.match(filename)
    if not match or int(match["id"]) < 1:
        raise RevisionError(
            message=(
                f"Invalid revision filename '{filename}': "
                "expected '<id>.<timestamp>.<title>.sql'"
            ),
            code="invalid_revision_filename",
        )
    created_at = datetime.fromtimestamp(int(match["timestamp"]), tz=UTC)
    return int(match["id"]), created_at, match["title"]


@dataclass(slots=True)
class RevisionFile:
    """A revision script found in the revisions directory."""

    id: int
    created_at: datetime
    title: str
    filename: str
    path: Path
    contents: str
    checksum: str

    @classmethod
    def from_path(cls, path: Path) -> "RevisionFile":
        revision_id, created_at, title = parse_filename(path.name)
        raw = path.read_bytes()
        try:
            contents = raw.decode("utf-8")
        except UnicodeDecodeError as err:
            raise RevisionError(
                message=f"Revision {path.name} is not valid UTF-8: {err}",
                code="invalid_encoding",
            ) from err
        return cls(
            id=revision_id,
            created_at=created_at,
            title=title,
            filename=path.name,
            path=path,
            contents=contents,
            checksum=compute_checksum(raw),
        )

    def statements(self) -> list[Statement]:
        """Scan the script into statements.

        Raises:
            LexError: If the script ends inside an unterminated construct
        """
        return split_statements(self.contents)


def load_revision_files(directory: Path) -> list[RevisionFile]:
    """Read every ``.sql`` file in ``directory``, ordered by revision id.

    Raises:
        RevisionError: For a missing directory, a malformed filename, or two
            files sharing an id
    """
    if not directory.is_dir():
        raise RevisionError(
            message=f"Revisions directory not found: {directory}",
            code="revisions_dir_not_found",
        )

    files = [
        RevisionFile.from_path(path)
        for path in sorted(directory.iterdir())
        if path.is_file() and path.suffix == REVISION_SUFFIX
    ]

    seen: dict[int, str] = {}
    for revision in files:
        if revision.id in seen:
            raise RevisionError(
                message=(
                    f"Revisions {seen[revision.id]} and {revision.filename} "
                    f"share id {revision.id}"
                ),
                code="duplicate_revision_id",
            )
        seen[revision.id] = revision.filename

    return sorted(files, key=lambda revision: revision.id)


def next_revision_id(files: list[RevisionFile]) -> int:
    return max((revision.id for revision in files), default=0) + 1


class RevisionRecord(BaseModel):
    """A row of the revision tracking table."""

    id: int = Field(..., description="Revision id")
    title: str = Field(..., description="Revision title")
    filename: str = Field(..., description="Filename at the time of application")
    checksum: str = Field(..., description="SHA-256 of the applied file")
    created_at: datetime = Field(..., description="Timestamp encoded in the filename")
    applied_on: datetime = Field(..., description="When the revision was applied")


@dataclass(slots=True)
class AnnotatedRevision:
    """A revision as seen from both the filesystem and the database."""

    id: int
    title: str
    filename: str
    created_at: datetime
    file: RevisionFile | None = None
    applied_on: datetime | None = None
    checksums_differ: bool = False
    filename_changed: bool = False
    placement_error: bool = False
    notes: list[str] = field(default_factory=list)

    @property
    def on_disk(self) -> bool:
        return self.file is not None

    @property
    def no_file_found(self) -> bool:
        return self.applied_on is not None and self.file is None

    @property
    def is_pending(self) -> bool:
        return self.file is not None and self.applied_on is None

    def problems(self) -> list[str]:
        """Problems that block applying further revisions."""
        problems = []
        if self.checksums_differ:
            problems.append("The file has changed after being applied")
        if self.no_file_found:
            problems.append("No file found for applied revision")
        if self.placement_error:
            problems.append("Revision id precedes that of an applied revision")
        return problems

    @property
    def has_errors(self) -> bool:
        return bool(self.problems())


def annotate_revisions(
    files: list[RevisionFile], records: list[RevisionRecord]
) -> list[AnnotatedRevision]:
    """Merge revision files and applied records by id, in id order."""
    by_id: dict[int, AnnotatedRevision] = {}

    for record in records:
        by_id[record.id] = AnnotatedRevision(
            id=record.id,
            title=record.title,
            filename=record.filename,
            created_at=record.created_at,
            applied_on=record.applied_on,
        )

    records_by_id = {record.id: record for record in records}
    for revision in files:
        annotated = by_id.get(revision.id)
        if annotated is None:
            by_id[revision.id] = AnnotatedRevision(
                id=revision.id,
                title=revision.title,
                filename=revision.filename,
                created_at=revision.created_at,
                file=revision,
            )
            continue
        record = records_by_id[revision.id]
        annotated.file = revision
        annotated.checksums_differ = record.checksum != revision.checksum
        if record.filename != revision.filename:
            annotated.filename_changed = True
            annotated.notes.append(f"Renamed from {record.filename}")

    last_applied = max((record.id for record in records), default=0)
    for annotated in by_id.values():
        if annotated.is_pending and annotated.id < last_applied:
            annotated.placement_error = True

    return [by_id[revision_id] for revision_id in sorted(by_id)]
