"""codescribe generate — document a project and optionally chat about it.

Usage:
  codescribe generate PATH [--output FILE] [--yes] [--chat] [--allow-empty]
                           [--ignore-dir NAME ...] [--ext .py ...]

Flags:
  --ignore-dir/--ext  Same selection overrides as `codescribe scan`
  --output PATH     Write the Markdown here instead of printing it; traversal blocked
  --yes             Skip the overwrite prompt
  --chat            Open the follow-up assistant after generation
  --allow-empty     Send the request even if no source files were accepted

Steps:
  [1/3] Assemble    collect + filter + concatenate files
  [2/3] Generate    one model call → Markdown document
  [3/3] Chat setup  session seeded with corpus + document (failure is non-fatal)

A missing API key is not an error: the key is prompted for, saved, and the
generation is retried once.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markdown import Markdown
from rich.progress import Progress, SpinnerColumn, TextColumn

from codescribe.chat.models import Role
from codescribe.cli.errors import (
    err_empty_corpus,
    err_generation_failed,
    err_no_session,
    err_output_path_unsafe,
    err_path_not_found,
)
from codescribe.cli.key import CredentialsOption, prompt_for_key
from codescribe.cli.scan import ExtOption, IgnoreDirOption, format_size, load_cli_config
from codescribe.corpus.collector import collect
from codescribe.credentials import CredentialStore
from codescribe.generate.writer import check_overwrite, validate_output_path, write_document
from codescribe.llm.client import count_tokens, get_context_window
from codescribe.workflow.controller import StartOutcome, WorkflowController, WorkflowState

console = Console()

_BUDGET_WARNING_THRESHOLD = 0.85
_EXIT_COMMANDS = frozenset(["/exit", "/quit"])


def generate_cmd(
    path: Annotated[Path, typer.Argument(help="Project directory or single file.")],
    output: Annotated[
        str | None,
        typer.Option("--output", "-o", help="Write the document to this file."),
    ] = None,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompts."),
    ] = False,
    chat: Annotated[
        bool,
        typer.Option("--chat", help="Chat with the assistant about the project afterwards."),
    ] = False,
    allow_empty: Annotated[
        bool,
        typer.Option("--allow-empty", help="Generate even when no source files were accepted."),
    ] = False,
    ignore_dir: IgnoreDirOption = None,
    ext: ExtOption = None,
    credentials: CredentialsOption = None,
) -> None:
    """Generate a technical document for a project using an LLM."""

    # ---- Output path validation (security) ----
    output_path: Path | None = None
    if output is not None:
        try:
            output_path = validate_output_path(output)
        except ValueError:
            console.print(err_output_path_unsafe(output))
            raise typer.Exit(1)
        if not check_overwrite(output_path, yes=yes):
            console.print("  [dim]Cancelled.[/]")
            raise typer.Exit(0)

    cfg = load_cli_config(path, ignore_dir, ext)
    store = CredentialStore(credentials)
    controller = WorkflowController(store, cfg)

    # ---- Step 1/3: Assemble ----
    try:
        files = collect(path, cfg.corpus.ignored_dirs)
    except FileNotFoundError:
        console.print(err_path_not_found(str(path)))
        raise typer.Exit(1)

    corpus = controller.load(files)
    console.print(
        f"  [dim]✓ Assembling — {len(corpus.manifest)} files ({format_size(corpus.total_size)})[/]"
    )
    if corpus.is_empty and not allow_empty:
        console.print(err_empty_corpus(str(path)))
        raise typer.Exit(1)
    if not corpus.is_empty:
        _warn_if_over_budget(corpus.text, cfg.generation.model)

    # ---- Step 2/3 + 3/3: Generate, then seed chat ----
    outcome = _run_generation(controller, cfg.generation.model, allow_empty)
    if outcome is StartOutcome.CREDENTIAL_REQUIRED:
        console.print("[yellow]No API key configured.[/] Enter one to continue.")
        prompt_for_key(CredentialStore(credentials, use_env=False))
        outcome = _run_generation(controller, cfg.generation.model, allow_empty)
        if outcome is StartOutcome.CREDENTIAL_REQUIRED:
            raise typer.Exit(1)

    if controller.state is WorkflowState.ERROR:
        console.print(err_generation_failed(controller.error or "unknown error"))
        raise typer.Exit(1)

    document = controller.document
    if document is None:
        console.print(err_generation_failed("no document was produced"))
        raise typer.Exit(1)

    # ---- Write / render ----
    if output_path is not None:
        write_document(output_path, document)
        console.print(f"\n  [green]✓[/] Written to [bold]{output_path}[/]")
    else:
        console.print()
        console.print(Markdown(document.markdown))

    if controller.session is None:
        console.print(err_no_session())
    elif chat:
        run_chat_loop(controller)


def _run_generation(
    controller: WorkflowController, model: str, allow_empty: bool
) -> StartOutcome:
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        transient=True,
        console=console,
    ) as prog:
        prog.add_task(f"Generating with {model}…", total=None)
        return controller.start_generation(allow_empty=allow_empty)


def _warn_if_over_budget(corpus_text: str, model: str) -> None:
    tokens = count_tokens(model, corpus_text)
    window = get_context_window(model)
    if tokens > window * _BUDGET_WARNING_THRESHOLD:
        console.print(
            f"  [yellow]⚠ Corpus is ~{tokens:,} tokens, over "
            f"{int(_BUDGET_WARNING_THRESHOLD * 100)}% of {model}'s {window:,}-token window.[/]\n"
            "    Narrow the selection with --ignore-dir / codescribe.yaml if generation fails."
        )


# ------------------------------------------------------------------
# Chat loop
# ------------------------------------------------------------------


def run_chat_loop(controller: WorkflowController) -> None:
    """Interactive question/answer loop; ends on /exit, /quit, or EOF."""
    if not controller.chat_available:
        console.print(err_no_session())
        return

    console.print("\n[bold]Assistant[/] [dim](type /exit to leave)[/]\n")
    for message in controller.transcript:
        if message.role is Role.MODEL:
            console.print(Markdown(message.text))

    while True:
        try:
            question = typer.prompt("you", prompt_suffix=" › ")
        except (EOFError, typer.Abort):
            break
        if question.strip().lower() in _EXIT_COMMANDS:
            break

        with console.status("Thinking…"):
            reply = controller.send_message(question)
        if reply is not None:
            console.print()
            console.print(Markdown(reply.text))
            console.print()
