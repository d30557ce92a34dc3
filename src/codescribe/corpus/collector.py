"""File selection from the local filesystem.

Turns a directory (or a single file) into an ordered list of unread file
handles, the way a folder upload does: paths are relative to the parent of
the selected directory, so the folder name prefixes every path
(``myproject/src/app.ts``).
"""

from __future__ import annotations

import os
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from codescribe.config import DEFAULT_IGNORED_DIRS
from codescribe.errors import FileReadFailure


@dataclass(frozen=True)
class LocalFile:
    """A file on disk that has not been read yet."""

    path: str  # selection-relative, '/'-separated
    size: int
    location: Path

    def read_text(self) -> str:
        try:
            return self.location.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            raise FileReadFailure(self.path, exc.strerror or str(exc)) from exc


def _local_file(location: Path, base: Path) -> LocalFile:
    rel = location.relative_to(base).as_posix()
    return LocalFile(path=rel, size=location.stat().st_size, location=location)


def collect(root: Path, ignored_dirs: Iterable[str] = DEFAULT_IGNORED_DIRS) -> list[LocalFile]:
    """Return handles for every file under *root* in a stable order.

    Ignored directories are pruned during the walk. Entries are sorted per
    directory (files before subdirectories) so the same tree always yields
    the same selection order.

    Raises:
        FileNotFoundError: If *root* does not exist.
    """
    root = root.resolve()
    if not root.exists():
        raise FileNotFoundError(f"No such file or directory: '{root}'")
    if root.is_file():
        return [_local_file(root, root.parent)]

    ignored = set(ignored_dirs)
    base = root.parent
    files: list[LocalFile] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d not in ignored)
        current = Path(dirpath)
        for name in sorted(filenames):
            location = current / name
            if location.is_file():
                files.append(_local_file(location, base))
    return files
