"""Tests for the codescribe generate command."""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from unittest.mock import MagicMock, PropertyMock, patch

import pytest
from typer.testing import CliRunner

from codescribe.cli.main import app
from codescribe.credentials import CredentialStore

runner = CliRunner()


# ------------------------------------------------------------------
# Fixtures
# ------------------------------------------------------------------


@pytest.fixture
def project(tmp_path: Path) -> Path:
    root = tmp_path / "demo"
    (root / "src").mkdir(parents=True)
    (root / "node_modules").mkdir()
    (root / "src" / "main.py").write_text("print('hi')\n", encoding="utf-8")
    (root / "node_modules" / "dep.js").write_text("skip", encoding="utf-8")
    (root / "README.md").write_text("# Demo\n", encoding="utf-8")
    return root


@pytest.fixture
def creds(tmp_path: Path) -> Path:
    path = tmp_path / "creds.json"
    CredentialStore(path, use_env=False).set("test-key")
    return path


def _response(content):
    mock_response = MagicMock()
    mock_response.choices[0].message.content = content
    return mock_response


@contextmanager
def _mock_llm(*responses, error: Exception | None = None):
    """Patch litellm.completion and token counting for the generate pipeline."""
    side_effect = error if error is not None else [_response(r) for r in responses]
    with patch(
        "codescribe.llm.client.litellm.completion", side_effect=side_effect
    ) as mock_c, patch("codescribe.cli.generate.count_tokens", return_value=10), patch(
        "codescribe.cli.generate.get_context_window", return_value=1_000_000
    ):
        yield mock_c


# ------------------------------------------------------------------
# Happy path
# ------------------------------------------------------------------


def test_generate_prints_document(project: Path, creds: Path):
    with _mock_llm("# Generated Overview") as mock_c:
        result = runner.invoke(app, ["generate", str(project), "--credentials", str(creds)])

    assert result.exit_code == 0, result.output
    assert "Generated Overview" in result.output
    assert "2 files" in result.output
    assert mock_c.call_count == 1


def test_generate_sends_filtered_corpus(project: Path, creds: Path):
    with _mock_llm("# Doc") as mock_c:
        runner.invoke(app, ["generate", str(project), "--credentials", str(creds)])

    user_parts = mock_c.call_args.kwargs["messages"][1]["content"]
    corpus = user_parts[1]["text"]
    assert "--- START OF FILE demo/README.md ---\n# Demo\n" in corpus
    assert "--- START OF FILE demo/src/main.py ---" in corpus
    assert "node_modules" not in corpus
    assert corpus.index("demo/README.md") < corpus.index("demo/src/main.py")


def test_generate_writes_output(project: Path, creds: Path, tmp_path: Path):
    out = tmp_path / "out" / "overview.md"
    with _mock_llm("# Doc"):
        result = runner.invoke(
            app,
            ["generate", str(project), "--output", str(out), "--credentials", str(creds)],
        )

    assert result.exit_code == 0, result.output
    assert out.read_text(encoding="utf-8") == "# Doc\n"
    assert "Written to" in result.output


def test_generate_output_traversal_blocked(project: Path, creds: Path):
    with _mock_llm("# Doc") as mock_c:
        result = runner.invoke(
            app,
            ["generate", str(project), "--output", "../../etc/x.md", "--credentials", str(creds)],
        )
    assert result.exit_code == 1
    assert "not allowed" in result.output
    mock_c.assert_not_called()


def test_generate_existing_output_declined(project: Path, creds: Path, tmp_path: Path):
    out = tmp_path / "overview.md"
    out.write_text("old", encoding="utf-8")
    with _mock_llm("# Doc") as mock_c:
        result = runner.invoke(
            app,
            ["generate", str(project), "--output", str(out), "--credentials", str(creds)],
            input="n\n",
        )
    assert result.exit_code == 0
    assert out.read_text(encoding="utf-8") == "old"
    mock_c.assert_not_called()


# ------------------------------------------------------------------
# Guards + failures
# ------------------------------------------------------------------


def test_generate_missing_path(tmp_path: Path, creds: Path):
    result = runner.invoke(
        app, ["generate", str(tmp_path / "missing"), "--credentials", str(creds)]
    )
    assert result.exit_code == 1
    assert "not found" in result.output


def test_generate_empty_corpus_refused(tmp_path: Path, creds: Path):
    empty = tmp_path / "empty"
    empty.mkdir()
    (empty / "image.png").write_bytes(b"\x89PNG")
    with _mock_llm("# Doc") as mock_c:
        result = runner.invoke(app, ["generate", str(empty), "--credentials", str(creds)])
    assert result.exit_code == 1
    assert "--allow-empty" in result.output
    mock_c.assert_not_called()


def test_generate_empty_corpus_allowed(tmp_path: Path, creds: Path):
    empty = tmp_path / "empty"
    empty.mkdir()
    with _mock_llm("# Nothing here", "unused") as mock_c:
        result = runner.invoke(
            app, ["generate", str(empty), "--allow-empty", "--credentials", str(creds)]
        )
    assert result.exit_code == 0, result.output
    assert mock_c.call_count == 1


def test_generate_upstream_failure(project: Path, creds: Path):
    with _mock_llm(error=RuntimeError("quota exceeded")):
        result = runner.invoke(app, ["generate", str(project), "--credentials", str(creds)])
    assert result.exit_code == 1
    assert "quota exceeded" in result.output


def test_generate_prompts_for_missing_key(project: Path, tmp_path: Path):
    creds = tmp_path / "fresh.json"
    with _mock_llm("# Doc") as mock_c:
        result = runner.invoke(
            app,
            ["generate", str(project), "--credentials", str(creds)],
            input="new-key\n",
        )

    assert result.exit_code == 0, result.output
    assert CredentialStore(creds, use_env=False).get() == "new-key"
    assert mock_c.call_count == 1
    assert mock_c.call_args.kwargs["api_key"] == "new-key"


def test_generate_uses_env_key(project: Path, tmp_path: Path, monkeypatch):
    monkeypatch.setenv("CODESCRIBE_API_KEY", "env-key")
    with _mock_llm("# Doc") as mock_c:
        result = runner.invoke(
            app, ["generate", str(project), "--credentials", str(tmp_path / "none.json")]
        )
    assert result.exit_code == 0, result.output
    assert mock_c.call_args.kwargs["api_key"] == "env-key"


def test_generate_warns_on_large_corpus(project: Path, creds: Path):
    with patch(
        "codescribe.llm.client.litellm.completion", return_value=_response("# Doc")
    ), patch("codescribe.cli.generate.count_tokens", return_value=9_000), patch(
        "codescribe.cli.generate.get_context_window", return_value=10_000
    ):
        result = runner.invoke(app, ["generate", str(project), "--credentials", str(creds)])
    assert result.exit_code == 0
    assert "9,000 tokens" in result.output


# ------------------------------------------------------------------
# Chat loop
# ------------------------------------------------------------------


def test_generate_chat_loop(project: Path, creds: Path):
    with _mock_llm("# Doc", "The entry point is main.py.") as mock_c:
        result = runner.invoke(
            app,
            ["generate", str(project), "--chat", "--credentials", str(creds)],
            input="Where does it start?\n/exit\n",
        )

    assert result.exit_code == 0, result.output
    assert "The entry point is main.py." in result.output
    assert mock_c.call_count == 2
    chat_messages = mock_c.call_args.kwargs["messages"]
    assert chat_messages[-1] == {"role": "user", "content": "Where does it start?"}


def test_generate_chat_send_failure_shows_notice(project: Path, creds: Path):
    side_effect = [_response("# Doc"), ConnectionError("down"), _response("Recovered.")]
    with patch("codescribe.llm.client.litellm.completion", side_effect=side_effect), patch(
        "codescribe.cli.generate.count_tokens", return_value=10
    ), patch("codescribe.cli.generate.get_context_window", return_value=1_000_000):
        result = runner.invoke(
            app,
            ["generate", str(project), "--chat", "--credentials", str(creds)],
            input="first\nsecond\n",
        )

    assert result.exit_code == 0, result.output
    assert "Failed to send message" in result.output
    assert "Recovered." in result.output


def test_generate_chat_ends_on_eof(project: Path, creds: Path):
    with _mock_llm("# Doc"):
        result = runner.invoke(
            app, ["generate", str(project), "--chat", "--credentials", str(creds)], input=""
        )
    assert result.exit_code == 0, result.output


# ------------------------------------------------------------------
# Selection overrides
# ------------------------------------------------------------------


def test_generate_ignore_dir_override_reaches_corpus(project: Path, creds: Path):
    with _mock_llm("# Doc") as mock_c:
        result = runner.invoke(
            app,
            ["generate", str(project), "--ignore-dir", "src", "--credentials", str(creds)],
        )

    assert result.exit_code == 0, result.output
    corpus = mock_c.call_args.kwargs["messages"][1]["content"][1]["text"]
    assert "demo/src/main.py" not in corpus
    assert "--- START OF FILE demo/node_modules/dep.js ---" in corpus
    assert "--- START OF FILE demo/README.md ---" in corpus


def test_generate_ext_override_reaches_corpus(project: Path, creds: Path):
    with _mock_llm("# Doc") as mock_c:
        result = runner.invoke(
            app,
            ["generate", str(project), "--ext", "py", "--credentials", str(creds)],
        )

    assert result.exit_code == 0, result.output
    corpus = mock_c.call_args.kwargs["messages"][1]["content"][1]["text"]
    assert "--- START OF FILE demo/src/main.py ---" in corpus
    assert "README.md" not in corpus


def test_generate_without_document_exits_with_error(project: Path, creds: Path):
    with _mock_llm("# Doc"), patch(
        "codescribe.cli.generate.WorkflowController.document",
        new_callable=PropertyMock,
        return_value=None,
    ):
        result = runner.invoke(app, ["generate", str(project), "--credentials", str(creds)])

    assert result.exit_code == 1
    assert "no document was produced" in result.output
