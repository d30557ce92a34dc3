"""codescribe key commands — manage the stored API key.

Commands:
  codescribe key set [--key KEY]   — store a key (prompted, hidden, if omitted)
  codescribe key clear             — remove the stored key
  codescribe key status            — show whether a key is configured
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from codescribe.credentials import ENV_VAR, CredentialStore

console = Console()

key_app = typer.Typer(
    name="key",
    help="Manage the model API key (set, clear, status).",
    add_completion=False,
)

CredentialsOption = Annotated[
    Path | None,
    typer.Option("--credentials", hidden=True, help="Override credentials file (for testing)."),
]


def _mask(value: str) -> str:
    if len(value) <= 8:
        return "*" * len(value)
    return f"{value[:4]}…{value[-4:]}"


def prompt_for_key(store: CredentialStore) -> str:
    """Ask for an API key (hidden input), persist it, and return it."""
    value = typer.prompt("API key", hide_input=True).strip()
    if not value:
        console.print("[red]Error:[/] API key must not be empty.")
        raise typer.Exit(1)
    store.set(value)
    console.print(f"  [green]✓[/] API key saved to {store.path}")
    return value


@key_app.command("set")
def key_set_cmd(
    key: Annotated[
        str | None,
        typer.Option("--key", help="API key value (prompted with hidden input if omitted)."),
    ] = None,
    credentials: CredentialsOption = None,
) -> None:
    """Store the API key used for generation and chat."""
    store = CredentialStore(credentials, use_env=False)
    if key is None:
        prompt_for_key(store)
        return
    if not key.strip():
        console.print("[red]Error:[/] API key must not be empty.")
        raise typer.Exit(1)
    store.set(key)
    console.print(f"  [green]✓[/] API key saved to {store.path}")


@key_app.command("clear")
def key_clear_cmd(credentials: CredentialsOption = None) -> None:
    """Remove the stored API key."""
    store = CredentialStore(credentials, use_env=False)
    if store.clear():
        console.print("  [green]✓[/] API key removed.")
    else:
        console.print("[dim]No stored API key.[/]")


@key_app.command("status")
def key_status_cmd(credentials: CredentialsOption = None) -> None:
    """Show whether an API key is configured and where it comes from."""
    if os.environ.get(ENV_VAR, "").strip():
        console.print(f"  [green]✓ API ready[/] ({ENV_VAR}: {_mask(os.environ[ENV_VAR].strip())})")
        return
    stored = CredentialStore(credentials, use_env=False).get()
    if stored:
        console.print(f"  [green]✓ API ready[/] (stored: {_mask(stored)})")
    else:
        console.print("  [yellow]✗ No API key[/] — run: codescribe key set")
