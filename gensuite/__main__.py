"""CLI for gensuite.

Usage:
    python -m gensuite                       # Interactive session
    python -m gensuite run pi                # Pi digits flow, then exit
    python -m gensuite prime benchy          # Primes flow, then exit
    python -m gensuite run benchmarks        # Benchmark suites, then exit
    python -m gensuite -h                    # Help and settings
    python -m gensuite --engine ./helper pi  # Use a specific engine binary

Arguments are joined into one phrase and resolved like interactive input.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape

from gensuite.config import Config, default_config_path
from gensuite.engine import EngineError, EngineExecutionError, Engine
from gensuite.resolver import resolve_command
from gensuite.session import Session
from gensuite.ui import Prompter

app = typer.Typer(
    name="gensuite",
    help="Arithmetic benchmarking suite: pi digits, primes, benchmarks",
    add_completion=False,
)
console = Console()
err_console = Console(stderr=True)


@app.command(context_settings={"ignore_unknown_options": True, "allow_extra_args": True})
def main(
    words: Optional[List[str]] = typer.Argument(None, help="Command phrase, e.g. 'run primes'"),
    engine: Optional[str] = typer.Option(
        None, "--engine", envvar="GENSUITE_ENGINE", help="Path to the compute engine binary",
    ),
    config_path: Optional[Path] = typer.Option(None, "--config", help="Settings file (default: ./gensuite.config.json)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show calibration traces"),
) -> None:
    """Run a flow by phrase, or start the interactive session with no phrase."""
    config_path = config_path or default_config_path()
    config = Config.load(config_path)

    try:
        compute = Engine.locate(engine)
    except EngineError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        err_console.print("[dim]Fix --engine / GENSUITE_ENGINE, or unset it to use the bundled engine.[/dim]")
        raise typer.Exit(1)

    session = Session(
        engine=compute,
        console=console,
        prompter=Prompter(console),
        config=config,
        config_path=config_path,
        verbose=verbose,
    )
    try:
        session.run(resolve_command(words or []))
    except EngineExecutionError as e:
        err_console.print(f"[red]Helper error:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    except EngineError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
