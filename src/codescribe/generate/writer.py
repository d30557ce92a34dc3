"""Save a generated document to disk.

Responsibilities:
  1. Validate the output path: relative paths are confined to the working
     directory; traversal (../../etc/passwd) is a hard fail.
  2. Overwrite protection: prompt if the file exists (--yes skips).
  3. Write atomically (temp file in the same directory → rename).
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

import typer

from codescribe.generate.document import GeneratedDocument


def validate_output_path(output: str, allowed_base: Path | None = None) -> Path:
    """Resolve *output* and confine relative paths to *allowed_base* (default CWD).

    Absolute paths are accepted as-is: the user chose the location explicitly.

    Raises:
        ValueError: If a relative path escapes the allowed base directory.
    """
    path = Path(output)
    if path.is_absolute():
        return path.resolve()

    base = (allowed_base if allowed_base is not None else Path.cwd()).resolve()
    resolved = (base / path).resolve()
    try:
        resolved.relative_to(base)
    except ValueError:
        raise ValueError(
            f"Output path '{output}' resolves outside the allowed directory "
            f"('{base}'). Path traversal is not permitted."
        )
    return resolved


def check_overwrite(path: Path, yes: bool) -> bool:
    """Return True if writing may proceed; asks the user when *path* exists."""
    if yes or not path.exists():
        return True
    return typer.confirm(f"  File exists: {path.name}\n  Overwrite?", default=False)


def write_document(path: Path, document: GeneratedDocument) -> None:
    """Write *document* to *path* atomically, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    content = document.markdown if document.markdown.endswith("\n") else document.markdown + "\n"

    fd, tmp_path = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(tmp_path, path)
    except Exception:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise
