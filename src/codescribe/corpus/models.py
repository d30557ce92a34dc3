"""Domain models for corpus assembly."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class SourceItem:
    """One accepted file after its content has been read.

    Ephemeral: only ``path`` and ``size`` survive in the manifest once the
    corpus text is built.
    """

    path: str
    content: str
    size: int = 0

    def __post_init__(self) -> None:
        if self.size < 0:
            raise ValueError("size must be >= 0")


@dataclass(frozen=True)
class ManifestEntry:
    path: str
    size: int


@dataclass(frozen=True)
class Corpus:
    """Concatenated corpus text plus the ordered manifest of its files."""

    text: str = ""
    manifest: tuple[ManifestEntry, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return not self.text.strip()

    @property
    def total_size(self) -> int:
        return sum(entry.size for entry in self.manifest)
