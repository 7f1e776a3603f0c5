"""Read-only index of the text/source files in a local project."""

from __future__ import annotations

import logging
from pathlib import Path

from models.schemas import ProjectFile
from utils.file_filter import MAX_FILE_SIZE, is_ignored_dir, should_include_file

logger = logging.getLogger(__name__)

MAX_SCAN_DEPTH = 5


class ProjectIndex:
    """Enumerates candidate files under a project root and answers lookups.

    The scan result is a snapshot: it is built once by :meth:`scan` and is
    never refreshed behind the caller's back, even if files change on disk.
    """

    def __init__(
        self,
        root: str | Path,
        max_depth: int = MAX_SCAN_DEPTH,
        max_file_size: int = MAX_FILE_SIZE,
    ) -> None:
        self._root = Path(root).resolve()
        self._max_depth = max_depth
        self._max_file_size = max_file_size
        self._files: list[ProjectFile] = []

    @property
    def root(self) -> Path:
        return self._root

    @property
    def files(self) -> list[ProjectFile]:
        return list(self._files)

    def scan(self) -> list[ProjectFile]:
        """Walk the project tree and return the files worth indexing."""
        logger.info("Scanning project at %s", self._root)
        files: list[ProjectFile] = []
        self._scan_directory(self._root, 0, files)
        self._files = files
        logger.info("Found %d relevant files", len(files))
        return self.files

    def _scan_directory(self, directory: Path, depth: int, out: list[ProjectFile]) -> None:
        if depth > self._max_depth:
            return

        try:
            entries = sorted(directory.iterdir(), key=lambda p: p.name)
        except OSError as exc:
            logger.warning("Couldn't scan %s: %s", directory, exc)
            return

        for entry in entries:
            try:
                if entry.is_dir():
                    if not is_ignored_dir(entry.name):
                        self._scan_directory(entry, depth + 1, out)
                    continue
                if not entry.is_file():
                    continue
                size = entry.stat().st_size
            except OSError as exc:
                logger.debug("Skipping %s: %s", entry, exc)
                continue

            if not should_include_file(entry.name, size, self._max_file_size):
                continue
            out.append(
                ProjectFile(
                    name=entry.name,
                    path=str(entry),
                    relative_path=entry.relative_to(self._root).as_posix(),
                    extension=entry.suffix,
                    size=size,
                )
            )

    def find_by_query(self, query: str) -> list[ProjectFile]:
        """Case-insensitive substring match against file name or relative path."""
        needle = query.lower()
        if not needle:
            return []
        return [
            f for f in self._files
            if needle in f.name.lower() or needle in f.relative_path.lower()
        ]

    def read(self, path: str) -> str | None:
        """Return the UTF-8 text of *path*, or None if it cannot be read.

        *path* may be relative to the project root or absolute.
        """
        candidate = Path(path)
        full_path = candidate if candidate.is_absolute() else self._root / candidate
        if not full_path.is_file():
            logger.warning("File not found: %s", path)
            return None
        try:
            return full_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Error reading file %s: %s", path, exc)
            return None

    def files_by_directory(self) -> dict[str, list[ProjectFile]]:
        """Group indexed files by their parent directory ('.' for the root)."""
        grouped: dict[str, list[ProjectFile]] = {}
        for f in self._files:
            directory, sep, _ = f.relative_path.rpartition("/")
            grouped.setdefault(directory if sep else ".", []).append(f)
        return grouped

    def overview(self, per_type_limit: int = 10) -> str:
        """Summarize the project structure grouped by file extension."""
        if not self._files:
            self.scan()

        by_type: dict[str, list[str]] = {}
        for f in self._files:
            by_type.setdefault(f.extension or "no-extension", []).append(f.relative_path)

        lines = [f"Project Summary ({len(self._files)} files):"]
        for ext, paths in by_type.items():
            lines.append("")
            lines.append(f"{ext} files ({len(paths)}):")
            lines.extend(f"  - {p}" for p in paths[:per_type_limit])
            if len(paths) > per_type_limit:
                lines.append(f"  ... and {len(paths) - per_type_limit} more")
        return "\n".join(lines) + "\n"
