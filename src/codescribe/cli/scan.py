"""codescribe scan — preview which files a generation would include.

Usage:
  codescribe scan PATH [--ignore-dir NAME ...] [--ext .py ...]

Shows the manifest (path + size, in selection order) that `codescribe
generate` would send. No model call is made.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from codescribe.cli.errors import err_config, err_path_not_found
from codescribe.config import CodescribeConfig, load_config, normalize_extension
from codescribe.corpus.assembler import assemble
from codescribe.corpus.collector import collect
from codescribe.corpus.models import Corpus
from codescribe.errors import ConfigError

console = Console()

_SIZE_UNITS = ("B", "KB", "MB", "GB")

IgnoreDirOption = Annotated[
    list[str] | None,
    typer.Option("--ignore-dir", help="Directory name to skip (repeatable; replaces defaults)."),
]
ExtOption = Annotated[
    list[str] | None,
    typer.Option("--ext", help="Allowed file extension (repeatable; replaces defaults)."),
]


def format_size(num_bytes: int) -> str:
    """Human-readable size, base 1024, one decimal: 0 B, 512 B, 1.5 KB."""
    if num_bytes <= 0:
        return "0 B"
    value = float(num_bytes)
    unit = 0
    while value >= 1024 and unit < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    return f"{round(value, 1):g} {_SIZE_UNITS[unit]}"


def project_dir_for(path: Path) -> Path:
    return path if path.is_dir() else path.parent


def load_cli_config(
    path: Path,
    ignore_dirs: list[str] | None = None,
    exts: list[str] | None = None,
) -> CodescribeConfig:
    """Load config for *path*, apply CLI overrides, exit 1 on ConfigError."""
    try:
        cfg = load_config(project_dir=project_dir_for(path))
        if ignore_dirs:
            cfg.corpus.ignored_dirs = list(ignore_dirs)
        if exts:
            cfg.corpus.allowed_extensions = [normalize_extension(e) for e in exts]
    except ConfigError as exc:
        console.print(err_config(str(exc)))
        raise typer.Exit(1)
    return cfg


def show_manifest(corpus: Corpus, title: str = "Files") -> None:
    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Path", style="bold")
    table.add_column("Size", justify="right")
    for i, entry in enumerate(corpus.manifest, start=1):
        table.add_row(str(i), entry.path, format_size(entry.size))
    console.print(table)
    console.print(
        f"\n  {len(corpus.manifest)} files · {format_size(corpus.total_size)} · "
        f"{len(corpus.text):,} characters"
    )


def scan_cmd(
    path: Annotated[Path, typer.Argument(help="Project directory or single file.")],
    ignore_dir: IgnoreDirOption = None,
    ext: ExtOption = None,
) -> None:
    """List the files that would be included in the corpus."""
    cfg = load_cli_config(path, ignore_dir, ext)

    try:
        files = collect(path, cfg.corpus.ignored_dirs)
    except FileNotFoundError:
        console.print(err_path_not_found(str(path)))
        raise typer.Exit(1)

    corpus = assemble(
        files,
        ignored_dirs=cfg.corpus.ignored_dirs,
        allowed_extensions=cfg.corpus.allowed_extensions,
        max_workers=cfg.corpus.max_workers,
    )

    if not corpus.manifest:
        console.print("[yellow]No supported source files found.[/]")
        raise typer.Exit(0)

    show_manifest(corpus)
