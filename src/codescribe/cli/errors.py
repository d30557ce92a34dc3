"""Codescribe rich error messages — actionable feedback.

Every error shown to the user must contain:
  1. What went wrong (clear cause)
  2. The exact action the user should take to fix it

Usage:
    from codescribe.cli.errors import err_no_api_key
    console.print(err_no_api_key())
    raise typer.Exit(1)
"""

from __future__ import annotations


def err_no_api_key() -> str:
    """No API key configured (store empty and CODESCRIBE_API_KEY unset)."""
    return (
        "[red]Error:[/] No API key configured.\n"
        "  Run:  codescribe key set\n"
        "  or:   export CODESCRIBE_API_KEY=<key>"
    )


def err_empty_corpus(path: str) -> str:
    """Selection produced no readable files."""
    return (
        f"[red]Error:[/] No supported source files found in '{path}'.\n"
        "  Run:  codescribe scan <path>  to see which files are accepted,\n"
        "  or use --allow-empty to send an empty corpus anyway."
    )


def err_generation_failed(message: str) -> str:
    """The document-generation call failed."""
    return (
        f"[red]Error:[/] Documentation generation failed: {message}\n"
        "  Check your API key (codescribe key status) and network, then re-run:\n"
        "    codescribe generate <path>"
    )


def err_no_session() -> str:
    """Chat requested but no session could be opened."""
    return (
        "[yellow]Warning:[/] The chat assistant is unavailable for this document.\n"
        "  Re-run:  codescribe generate <path> --chat  to try again."
    )


def err_path_not_found(path: str) -> str:
    return (
        f"[red]Error:[/] Path not found: '{path}'\n"
        "  Use:  an existing project directory or file."
    )


def err_output_path_unsafe(path: str) -> str:
    """--output path fails security validation."""
    return (
        f"[red]Error:[/] Output path is not allowed: '{path}'\n"
        "  Use a path within the current working directory."
    )


def err_config(message: str) -> str:
    """A config file failed validation."""
    return f"[red]Error:[/] {message}\n  Fix or remove the offending config file, then re-run."
