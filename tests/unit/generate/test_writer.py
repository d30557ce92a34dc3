"""Tests for the document writer."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from codescribe.generate.document import GeneratedDocument
from codescribe.generate.writer import check_overwrite, validate_output_path, write_document


# ------------------------------------------------------------------
# validate_output_path
# ------------------------------------------------------------------


def test_validate_relative_path_inside_base(tmp_path: Path):
    result = validate_output_path("docs/overview.md", allowed_base=tmp_path)
    assert result == (tmp_path / "docs" / "overview.md").resolve()


def test_validate_blocks_traversal(tmp_path: Path):
    with pytest.raises(ValueError, match="traversal"):
        validate_output_path("../../etc/passwd", allowed_base=tmp_path)


def test_validate_absolute_path_accepted(tmp_path: Path):
    target = tmp_path / "out.md"
    assert validate_output_path(str(target)) == target.resolve()


# ------------------------------------------------------------------
# check_overwrite
# ------------------------------------------------------------------


def test_check_overwrite_missing_file(tmp_path: Path):
    assert check_overwrite(tmp_path / "new.md", yes=False)


def test_check_overwrite_yes_skips_prompt(tmp_path: Path):
    existing = tmp_path / "doc.md"
    existing.write_text("old", encoding="utf-8")
    with patch("codescribe.generate.writer.typer.confirm") as mock_confirm:
        assert check_overwrite(existing, yes=True)
    mock_confirm.assert_not_called()


def test_check_overwrite_prompts_when_exists(tmp_path: Path):
    existing = tmp_path / "doc.md"
    existing.write_text("old", encoding="utf-8")
    with patch("codescribe.generate.writer.typer.confirm", return_value=False):
        assert not check_overwrite(existing, yes=False)


# ------------------------------------------------------------------
# write_document
# ------------------------------------------------------------------


def test_write_document_creates_parents(tmp_path: Path):
    target = tmp_path / "a" / "b" / "doc.md"
    write_document(target, GeneratedDocument("# Title"))
    assert target.read_text(encoding="utf-8") == "# Title\n"


def test_write_document_keeps_trailing_newline(tmp_path: Path):
    target = tmp_path / "doc.md"
    write_document(target, GeneratedDocument("# Title\n"))
    assert target.read_text(encoding="utf-8") == "# Title\n"


def test_write_document_leaves_no_temp_files(tmp_path: Path):
    write_document(tmp_path / "doc.md", GeneratedDocument("x"))
    assert [p.name for p in tmp_path.iterdir()] == ["doc.md"]


def test_write_document_overwrites(tmp_path: Path):
    target = tmp_path / "doc.md"
    target.write_text("old", encoding="utf-8")
    write_document(target, GeneratedDocument("new"))
    assert target.read_text(encoding="utf-8") == "new\n"
