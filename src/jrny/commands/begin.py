"""
Begin Command

Creates the configuration files and revisions directory for a new project.
"""

from pathlib import Path

from rich.console import Console

from jrny.core.project import ProjectPaths
from jrny.core.templates import CONF_TEMPLATE, ENV_EX_TEMPLATE, ENV_TEMPLATE
from jrny.domain.errors import JrnyError

console = Console()


class BeginError(Exception):
    """Raised when a project cannot be set up"""


class _BeginCommand:
    """Creates project resources, remembering what it made so it can undo it."""

    def __init__(self, paths: ProjectPaths) -> None:
        self.paths = paths
        self.created: list[Path] = []

    def execute(self) -> None:
        try:
            self._mkdir(self.paths.root_dir)
            self._mkdir(self.paths.revisions_dir)
            self._write(self.paths.conf_file, CONF_TEMPLATE)
            self._write(self.paths.env_file, ENV_TEMPLATE)
            self._write(self.paths.env_ex_file, ENV_EX_TEMPLATE)
        except OSError:
            self.revert()
            raise

    def _mkdir(self, path: Path) -> None:
        if not path.exists():
            path.mkdir()
            self.created.append(path)

    def _write(self, path: Path, contents: str) -> None:
        # ProjectPaths already checked that none of the files exist
        with path.open("x", encoding="utf-8") as handle:
            self.created.append(path)
            handle.write(contents)

    def revert(self) -> None:
        """Remove created files and directories, newest first."""
        for path in reversed(self.created):
            if path.is_dir():
                path.rmdir()
            else:
                path.unlink(missing_ok=True)
        self.created.clear()

    def print_summary(self) -> None:
        console.print("[green]✓[/green] A journey has begun")
        rows = [
            ("  ", self.paths.root_dir),
            ("  ├── ", self.paths.revisions_dir),
            ("  ├── ", self.paths.conf_file),
            ("  ├── ", self.paths.env_file),
            ("  └── ", self.paths.env_ex_file),
        ]
        for prefix, path in rows:
            suffix = " [dim]\\[created][/dim]" if path in self.created else ""
            console.print(f"{prefix}{path}{suffix}")


def begin_project(directory: Path) -> ProjectPaths:
    """Set up a new project in ``directory``

    The directory is created if missing. It may already contain other files,
    but not jrny configuration files, and an existing revisions directory must
    be empty. If anything fails midway, everything created is removed again.

    Args:
        directory: Target project directory

    Returns:
        Paths of the project resources

    Raises:
        BeginError: If the project cannot be set up
    """
    try:
        paths = ProjectPaths.for_new_project(directory)
        command = _BeginCommand(paths)
        command.execute()
    except JrnyError as err:
        raise BeginError(str(err)) from err
    except OSError as err:
        raise BeginError(f"Could not create project files: {err}") from err

    command.print_summary()
    return paths
