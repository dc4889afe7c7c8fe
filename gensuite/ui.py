"""Terminal interaction: prompts, logo, tables, spinners.

Prompter wraps rich.prompt so flows only see select / select_many /
ask_int / ask_text. Tests swap in a scripted prompter with the same methods.
"""

from __future__ import annotations

import contextlib
import os
import platform
import sys
import time
from typing import Iterator, Optional, Sequence, TypeVar

from rich.console import Console
from rich.prompt import IntPrompt, Prompt
from rich.table import Table
from rich.text import Text

from gensuite import __version__
from gensuite.config import ColorScheme, Config

T = TypeVar("T")

LOGO = r"""
   ______          ________       ___________
  / ____/__  ____ /_  __/ /_  ____|__  /__  /
 / / __/ _ \/ __ \ / / / __ \/ ___//_ < /_ <
/ /_/ /  __/ / / // / / / / / /  ___/ /__/ /
\____/\___/_/ /_//_/ /_/ /_/_/  /____/____/
""".strip("\n")

# (command, description) rows for the help table.
COMMAND_ROWS = [
    ("pi", "Pi digits (time-estimated)"),
    ("primes", "Prime numbers (time-limited ~30s)"),
    ("help | -h | /help", "Help and settings"),
    ("bench | run benchmarks", "Benchmark suites (45-90s each)"),
    ("home", "Return to logo/home"),
    ("pi benchy", "Alias for pi digits"),
    ("prime benchy", "Alias for prime numbers"),
    ("run pi", "Alias for pi digits"),
    ("run primes", "Alias for prime numbers"),
    ("exit | quit", "Leave the session"),
]


def bounds_error(value: int, minimum: int, maximum: Optional[int]) -> Optional[str]:
    """Guidance message when value is out of range, else None."""
    if maximum is None:
        if value < minimum:
            return f"Enter a whole number of at least {minimum}."
        return None
    if not minimum <= value <= maximum:
        return f"Enter a whole number between {minimum} and {maximum}."
    return None


class Prompter:
    """rich.prompt-backed user input."""

    def __init__(self, console: Console) -> None:
        self.console = console

    def select(self, message: str, choices: Sequence[tuple[str, T]], default: int = 0) -> T:
        """Numbered single choice; returns the chosen value."""
        for i, (label, _) in enumerate(choices, 1):
            self.console.print(f"  [bold]{i}[/bold]. {label}")
        picked = Prompt.ask(
            message,
            console=self.console,
            choices=[str(i) for i in range(1, len(choices) + 1)],
            default=str(default + 1),
        )
        return choices[int(picked) - 1][1]

    def select_many(self, message: str, choices: Sequence[tuple[str, T]]) -> list[T]:
        """Comma-separated multi choice, all selected by default; at least one."""
        for i, (label, _) in enumerate(choices, 1):
            self.console.print(f"  [bold]{i}[/bold]. {label}")
        everything = ",".join(str(i) for i in range(1, len(choices) + 1))
        while True:
            raw = Prompt.ask(message, console=self.console, default=everything)
            picked: list[T] = []
            valid = True
            for part in raw.replace(" ", "").split(","):
                if not part:
                    continue
                if not part.isdigit() or not 1 <= int(part) <= len(choices):
                    valid = False
                    break
                value = choices[int(part) - 1][1]
                if value not in picked:
                    picked.append(value)
            if valid and picked:
                return picked
            self.console.print("[yellow]Pick at least one option by number, e.g. 1,3.[/yellow]")

    def ask_int(self, message: str, default: int, minimum: int = 1, maximum: Optional[int] = None) -> int:
        """Integer input, re-asked until it falls within bounds."""
        while True:
            value = IntPrompt.ask(message, console=self.console, default=default)
            error = bounds_error(value, minimum, maximum)
            if error is None:
                return value
            self.console.print(f"[yellow]{error}[/yellow]")

    def ask_text(self, message: str, default: str = "") -> str:
        return Prompt.ask(message, console=self.console, default=default, show_default=bool(default))


def show_logo(console: Console, config: Config) -> None:
    """Logo in the scheme gradient plus version; line-by-line when animated."""
    scheme = config.scheme
    lines = LOGO.splitlines()
    if config.animations:
        console.clear()
    for i, line in enumerate(lines):
        color = scheme.gradient[0] if i < len(lines) / 2 else scheme.gradient[1]
        console.print(Text(line, style=f"bold {color}"))
        if config.animations:
            time.sleep(0.035)
    console.print(Text(f"v{__version__}\n", style=scheme.accent))


@contextlib.contextmanager
def spinner(console: Console, config: Config, text: str, done: str = "") -> Iterator[None]:
    """console.status spinner when animations are on; a no-op otherwise."""
    if not config.animations:
        yield
        return
    with console.status(text, spinner="dots"):
        yield
    if done:
        console.print(f"[green]✔[/green] {done}")


def show_command_table(console: Console, scheme: ColorScheme) -> None:
    table = Table(show_header=True, header_style=f"bold {scheme.primary}", box=None)
    table.add_column("Command", style=scheme.accent, no_wrap=True)
    table.add_column("Description")
    for cmd, desc in COMMAND_ROWS:
        table.add_row(cmd, desc)
    console.print(table)


def _total_memory_gb() -> Optional[float]:
    try:
        return os.sysconf("SC_PAGE_SIZE") * os.sysconf("SC_PHYS_PAGES") / (1024 ** 3)
    except (AttributeError, ValueError, OSError):
        return None


def show_system_info(console: Console, scheme: ColorScheme, engine_description: str) -> None:
    """Host summary printed before benchmarks."""
    mem = _total_memory_gb()
    ram = f"{mem:.1f} GB" if mem is not None else "unknown"
    cpu = platform.processor() or platform.machine() or "Unknown CPU"
    console.print(Text("\nSystem info", style=scheme.primary))
    for line in (
        f"OS: {platform.system()} {platform.release()} | Arch: {platform.machine()}",
        f"CPU: {cpu} | Cores: {os.cpu_count() or 0} | RAM: {ram}",
        f"Python: {sys.version.split()[0]} | Engine: {engine_description}",
    ):
        console.print(Text(line, style=scheme.secondary))
