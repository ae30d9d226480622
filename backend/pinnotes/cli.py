"""Administrative commands for PinNotes."""

import asyncio
import os
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from pinnotes.storage.document_store import DocumentStore, StoreError
from pinnotes.storage.pin_store import PinStore

app = typer.Typer(help="PinNotes administration")
console = Console()

DEFAULT_PIN = "123456"


def _data_dir(data_dir: Optional[Path]) -> Path:
    if data_dir is not None:
        return data_dir
    env = os.getenv("APP_DATA_DIR")
    if env:
        return Path(env)
    return Path(__file__).resolve().parents[2] / "data"


@app.callback()
def callback():
    """Manage the PinNotes document store."""
    pass


@app.command("init-pin")
def init_pin(
    pin: str = typer.Option(DEFAULT_PIN, "--pin", help="PIN that unlocks the notes"),
    data_dir: Optional[Path] = typer.Option(None, "--data-dir", help="Document store directory"),
):
    """Write the shared PIN document."""
    if not pin:
        console.print("[red]PIN must not be empty[/red]")
        raise typer.Exit(code=1)

    store = PinStore(DocumentStore(_data_dir(data_dir)))
    try:
        asyncio.run(store.set_pin(pin))
    except StoreError as exc:
        console.print(f"[red]Error initializing PIN:[/red] {exc}")
        raise typer.Exit(code=1)

    console.print("[green]PIN initialized successfully[/green]")


def main():
    """Entry point for the pinnotes command."""
    app()


if __name__ == "__main__":
    main()
