"""Corpus assembler: filter selected files and concatenate them into one text.

Pipeline:
  1. Drop items inside an ignored directory (exact path-segment match).
  2. Drop items whose lowercased path does not end in an allowed extension.
  3. Read the remaining items concurrently. Read failures are logged and the
     item is dropped; one bad file never aborts the assembly.
  4. Restore selection order and render each item as

        --- START OF FILE <path> ---
        <content>
        <blank line>

The delimiter is a compatibility contract with the generation prompt, which
tells the model how file boundaries are marked. ``split_corpus()`` parses it
back into (path, content) pairs.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Protocol

from codescribe.config import DEFAULT_ALLOWED_EXTENSIONS, DEFAULT_IGNORED_DIRS
from codescribe.corpus.models import Corpus, ManifestEntry, SourceItem

logger = logging.getLogger(__name__)

HEADER_TEMPLATE = "--- START OF FILE {path} ---"
_HEADER_RE = re.compile(r"^--- START OF FILE (.*) ---\n", re.MULTILINE)
_ENTRY_SEPARATOR = "\n\n"


class FileHandle(Protocol):
    """A user-selected file that has not been read yet."""

    path: str
    size: int

    def read_text(self) -> str: ...


# ------------------------------------------------------------------
# Filtering
# ------------------------------------------------------------------


def _directory_segments(path: str) -> list[str]:
    """Return the directory components of *path* (file name excluded)."""
    parts = [p for p in path.replace("\\", "/").split("/") if p]
    return parts[:-1]


def is_ignored(path: str, ignored_dirs: Iterable[str]) -> bool:
    """True if any directory segment of *path* equals an ignored name exactly."""
    ignored = set(ignored_dirs)
    return any(segment in ignored for segment in _directory_segments(path))


def is_allowed(path: str, allowed_extensions: Iterable[str]) -> bool:
    """True if the lowercased *path* ends with one of *allowed_extensions*."""
    lowered = path.lower()
    return any(lowered.endswith(ext.lower()) for ext in allowed_extensions)


def accepts(
    path: str,
    ignored_dirs: Iterable[str] = DEFAULT_IGNORED_DIRS,
    allowed_extensions: Iterable[str] = DEFAULT_ALLOWED_EXTENSIONS,
) -> bool:
    return not is_ignored(path, ignored_dirs) and is_allowed(path, allowed_extensions)


# ------------------------------------------------------------------
# Rendering
# ------------------------------------------------------------------


def render_header(path: str) -> str:
    return HEADER_TEMPLATE.format(path=path)


def render_entry(path: str, content: str) -> str:
    """Render one corpus entry: header line, raw content, blank-line separator."""
    return f"{render_header(path)}\n{content}{_ENTRY_SEPARATOR}"


def split_corpus(text: str, paths: Sequence[str] | None = None) -> list[tuple[str, str]]:
    """Parse corpus *text* back into ``(path, content)`` pairs in order.

    Inverse of the rendering in ``assemble()``: content is returned exactly
    as it was read, without the trailing separator.

    Without *paths*, every line-start header counts as a boundary, so a file
    whose content itself contains a header line (a README describing this
    format, say) is split in two. Pass the manifest paths to only split on
    the expected headers, in manifest order.
    """
    matches = list(_HEADER_RE.finditer(text))
    if paths is not None:
        expected = list(paths)
        kept = []
        for match in matches:
            if len(kept) < len(expected) and match.group(1) == expected[len(kept)]:
                kept.append(match)
        matches = kept
    entries: list[tuple[str, str]] = []
    for i, match in enumerate(matches):
        end = matches[i + 1].start() if i + 1 < len(matches) else len(text)
        body = text[match.end():end]
        if body.endswith(_ENTRY_SEPARATOR):
            body = body[: -len(_ENTRY_SEPARATOR)]
        entries.append((match.group(1), body))
    return entries


# ------------------------------------------------------------------
# Reading
# ------------------------------------------------------------------


def _read_one(handle: FileHandle) -> str | None:
    """Read *handle* as text. Returns None (and logs) on any failure."""
    try:
        return handle.read_text()
    except Exception as exc:
        logger.warning("Skipped %s: %s", handle.path, exc)
        return None


def _read_all(handles: Sequence[FileHandle], max_workers: int) -> list[str | None]:
    """Read all *handles* concurrently; results are indexed by selection order."""
    if not handles:
        return []
    results: list[str | None] = [None] * len(handles)
    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(handles)))) as pool:
        futures = {pool.submit(_read_one, h): idx for idx, h in enumerate(handles)}
        # Completion order is arbitrary; the index restores selection order.
        for future in as_completed(futures):
            results[futures[future]] = future.result()
    return results


# ------------------------------------------------------------------
# Public API
# ------------------------------------------------------------------


def build_corpus(items: Iterable[SourceItem]) -> Corpus:
    """Render already-read *items* into a Corpus, preserving their order."""
    parts: list[str] = []
    manifest: list[ManifestEntry] = []
    for item in items:
        parts.append(render_entry(item.path, item.content))
        manifest.append(ManifestEntry(path=item.path, size=item.size))
    return Corpus(text="".join(parts), manifest=tuple(manifest))


def assemble(
    items: Iterable[FileHandle],
    ignored_dirs: Iterable[str] = DEFAULT_IGNORED_DIRS,
    allowed_extensions: Iterable[str] = DEFAULT_ALLOWED_EXTENSIONS,
    max_workers: int = 8,
) -> Corpus:
    """Filter, read, and concatenate *items* into a Corpus.

    Args:
        items: Selected file handles, in selection order.
        ignored_dirs: Directory names excluded by exact segment match.
        allowed_extensions: Lowercase suffixes (with dot) that are accepted.
        max_workers: Upper bound on concurrent reads.

    Returns:
        Corpus whose manifest and headers follow selection order. Empty
        selections produce ``Corpus(text="", manifest=())``.
    """
    ignored = tuple(ignored_dirs)
    allowed = tuple(allowed_extensions)

    accepted = [h for h in items if accepts(h.path, ignored, allowed)]
    contents = _read_all(accepted, max_workers)

    read_items = [
        SourceItem(path=handle.path, content=content, size=max(0, int(handle.size)))
        for handle, content in zip(accepted, contents)
        if content is not None
    ]
    skipped = len(accepted) - len(read_items)
    if skipped:
        logger.warning("%d of %d selected files could not be read", skipped, len(accepted))

    corpus = build_corpus(read_items)
    logger.debug(
        "Assembled corpus: %d files, %d characters", len(corpus.manifest), len(corpus.text)
    )
    return corpus
