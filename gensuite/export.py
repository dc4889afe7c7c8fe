"""Save formatted results to a .txt file.

Target directory is ~/Desktop, else ~/Downloads, else the working directory.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.markup import escape

from gensuite.ui import Prompter

EXTENSION = ".txt"


def timestamp_string(now: Optional[datetime] = None) -> str:
    """Local time as YYYYMMDD-HHMMSS."""
    return (now or datetime.now()).strftime("%Y%m%d-%H%M%S")


def default_filename(now: Optional[datetime] = None) -> str:
    return f"gensuite-output-{timestamp_string(now)}{EXTENSION}"


def normalize_filename(name: str) -> str:
    """Trim and make sure the name ends in .txt (case-insensitive)."""
    trimmed = name.strip()
    if trimmed.lower().endswith(EXTENSION):
        return trimmed
    return f"{trimmed}{EXTENSION}"


def resolve_save_dir(home: Optional[Path] = None, cwd: Optional[Path] = None) -> Path:
    home = home or Path.home()
    for candidate in (home / "Desktop", home / "Downloads"):
        if candidate.is_dir():
            return candidate
    return cwd or Path.cwd()


def write_result(text: str, filename: str, target_dir: Path) -> Path:
    path = target_dir / normalize_filename(filename)
    path.write_text(text, encoding="utf-8")
    return path


def maybe_save(
    prompter: Prompter,
    console: Console,
    text: str,
    target_dir: Optional[Path] = None,
) -> Optional[Path]:
    """Offer to save ``text``. Returns the written path, or None if declined or the write failed."""
    while True:
        choice = prompter.select(
            "Save results to drive?",
            [("Yes", "yes"), ("No (default)", "no"), ("Help", "help")],
            default=1,
        )
        if choice != "help":
            break
        console.print(
            "[dim]Saves a .txt file to your Desktop (or Downloads if Desktop is missing).[/dim]"
        )
    if choice != "yes":
        return None

    while True:
        filename = prompter.ask_text("File name", default=default_filename())
        if filename.strip():
            break
        console.print("[yellow]Please enter a file name.[/yellow]")

    try:
        path = write_result(text, filename, target_dir or resolve_save_dir())
    except OSError as e:
        console.print(f"[red]Could not save:[/red] {escape(str(e))}")
        return None
    console.print(f"[dim]Saved to {path}[/dim]")
    return path
