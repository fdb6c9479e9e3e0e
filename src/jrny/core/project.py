"""
Project Paths

Locates and validates the files and directories of a new jrny project.
"""

from dataclasses import dataclass
from pathlib import Path

from jrny.domain.errors import ProjectError

from .config import CONF, DEFAULT_REVISIONS_DIR, ENV, ENV_EX


@dataclass(frozen=True, slots=True)
class ProjectPaths:
    """Resolved locations of the files ``jrny begin`` manages."""

    root_dir: Path
    revisions_dir: Path
    conf_file: Path
    env_file: Path
    env_ex_file: Path

    @classmethod
    def for_new_project(cls, root_dir: Path) -> "ProjectPaths":
        """Validate that a project can be started in ``root_dir``.

        The directory may exist and hold unrelated files, but must not contain
        any jrny configuration files already. An existing revisions directory
        is accepted only if it is empty.

        Raises:
            ProjectError: If the target cannot host a new project
        """
        root_dir = root_dir.resolve()
        paths = cls(
            root_dir=root_dir,
            revisions_dir=root_dir / DEFAULT_REVISIONS_DIR,
            conf_file=root_dir / CONF,
            env_file=root_dir / ENV,
            env_ex_file=root_dir / ENV_EX,
        )

        if root_dir.exists() and not root_dir.is_dir():
            raise ProjectError(
                message=f"{root_dir} exists and is not a directory",
                code="path_not_directory",
            )

        existing = [path.name for path in paths.config_files() if path.exists()]
        if existing:
            raise ProjectError(
                message=f"{root_dir} already contains {', '.join(existing)}",
                code="project_exists",
            )

        revisions_dir = paths.revisions_dir
        if revisions_dir.exists():
            if not revisions_dir.is_dir():
                raise ProjectError(
                    message=f"{revisions_dir} exists and is not a directory",
                    code="path_not_directory",
                )
            if any(revisions_dir.iterdir()):
                raise ProjectError(
                    message=f"{revisions_dir} already exists and is not empty",
                    code="revisions_not_empty",
                )

        return paths

    def config_files(self) -> tuple[Path, Path, Path]:
        return (self.conf_file, self.env_file, self.env_ex_file)
