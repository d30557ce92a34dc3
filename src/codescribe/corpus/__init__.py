"""Codescribe corpus layer — file selection, filtering, and concatenation."""

from codescribe.corpus.assembler import assemble, build_corpus, render_header, split_corpus
from codescribe.corpus.collector import LocalFile, collect
from codescribe.corpus.models import Corpus, ManifestEntry, SourceItem

__all__ = [
    "Corpus",
    "LocalFile",
    "ManifestEntry",
    "SourceItem",
    "assemble",
    "build_corpus",
    "collect",
    "render_header",
    "split_corpus",
]
