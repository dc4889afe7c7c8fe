"""Interactive session — the state machine around resolver, governor and engine.

States:
    HOME → AWAITING_INPUT → (help | pi | primes | bench | home flow)
         → AWAITING_INPUT ... → EXITING

One user turn is processed completely (at most one calibration probe per
negotiation pass and one full-cost engine call per confirmed magnitude)
before the next line is read. Engine errors are not caught here; they
propagate to the CLI, which exits non-zero.
"""

from __future__ import annotations

import contextlib
import random
from enum import Enum
from pathlib import Path
from typing import Callable, ContextManager, Optional

from rich.console import Console
from rich.markup import escape
from rich.text import Text

from gensuite.config import COLOR_SCHEMES, Config
from gensuite.engine import Engine
from gensuite.export import maybe_save
from gensuite.governor import Governor, format_rate, format_seconds
from gensuite.models import BENCH_KINDS, EngineResult, Intent, Outcome, WorkloadKind
from gensuite.resolver import resolve_command
from gensuite.ui import Prompter, show_command_table, show_logo, show_system_info, spinner

PI_DEFAULT_DIGITS = 20_000
PI_MAX_DIGITS = 2_000_000

PRIMES_DEFAULT_COUNT = 100
PRIMES_MAX_COUNT = 5_000
PRIMES_DEFAULT_GROUP = 5
PRIMES_MAX_SECONDS = 30

BENCH_DURATIONS = (45, 60, 90)
BENCH_DEFAULT_DURATION = 60
BENCH_LABELS = {
    WorkloadKind.BENCH_MATMUL: "Matrix Multiply (matmul)",
    WorkloadKind.BENCH_BIGINT: "BigInt Multiply (bigint)",
    WorkloadKind.BENCH_SIEVE: "Prime Sieve (sieve)",
}

# Spinners only for runs long enough to notice.
_PI_SPINNER_THRESHOLD = 80
_PRIMES_SPINNER_THRESHOLD = 15

FALLBACK_RESPONSES = [
    "Directive check: request falls outside the prime directive.",
    "Asimov protocol flagged that action. Try a supported command.",
    "I only handle pi and primes. Re-route your request.",
    "Command not recognized. Consult /help for the active directives.",
    "Outside mission parameters. Provide a pi or primes command.",
    "Directive mismatch. Standing by for valid instructions.",
]


class State(str, Enum):
    HOME = "home"
    AWAITING_INPUT = "awaiting-input"
    EXITING = "exiting"


def parse_primes(output: str) -> list[int]:
    """Comma-separated engine output → ints, skipping anything non-numeric."""
    primes = []
    for part in output.split(","):
        part = part.strip()
        if part.isdigit():
            primes.append(int(part))
    return primes


def group_primes(primes: list[int], increment: int) -> list[list[int]]:
    return [primes[i:i + increment] for i in range(0, len(primes), increment)]


def completion_line(result: EngineResult, magnitude: int, label: str) -> str:
    rate = result.rate(magnitude)
    rate_text = format_rate(rate) if rate is not None else "?"
    return f"Completed in {format_seconds(result.elapsed_s)} ({rate_text} {label}/sec)"


class Session:
    """Process-wide session context threaded through every flow.

    Args:
        engine: Compute engine adapter.
        console: Output console.
        prompter: User input seam.
        config: Active settings; replaced (not mutated) by the settings flow.
        config_path: Where settings changes are persisted.
        rng: Random source for flavor responses.
        save_dir: Export directory override.
        verbose: Print calibration traces.
    """

    def __init__(
        self,
        engine: Engine,
        console: Console,
        prompter: Prompter,
        config: Optional[Config] = None,
        config_path: Optional[Path] = None,
        rng: Optional[random.Random] = None,
        save_dir: Optional[Path] = None,
        verbose: bool = False,
    ) -> None:
        self.engine = engine
        self.console = console
        self.prompter = prompter
        self.config = config or Config()
        self.config_path = config_path
        self.rng = rng or random.Random()
        self.save_dir = save_dir
        self.verbose = verbose
        self.state = State.HOME
        self._flows: dict[Intent, Callable[[], None]] = {
            Intent.HELP: self.help_flow,
            Intent.PI: self.pi_flow,
            Intent.PRIMES: self.primes_flow,
            Intent.BENCH: self.bench_flow,
            Intent.HOME: self.show_home,
        }

    # -- output helpers ----------------------------------------------------

    def say(self, text: str, style: str = "") -> None:
        # soft_wrap keeps long digit strings on one logical line
        self.console.print(Text(text, style=style or self.config.scheme.secondary), soft_wrap=True)

    def _spinner(self, active: bool, text: str, done: str) -> ContextManager[None]:
        if not active:
            return contextlib.nullcontext()
        return spinner(self.console, self.config, text, done)

    def governor(self) -> Governor:
        return Governor(
            self.engine,
            self.console,
            chooser=self._choose_cap,
            style=self.config.scheme.secondary,
            verbose=self.verbose,
        )

    def _choose_cap(self, label: str, requested: int, max_magnitude: int, max_seconds: float) -> Outcome:
        return self.prompter.select(
            "Adjust request?",
            [
                (f"Use {max_magnitude} {label}", Outcome.CAPPED),
                ("Enter a new amount", Outcome.RETRY),
                ("Cancel", Outcome.CANCELLED),
            ],
            default=0,
        )

    def _start_or_back(self, menu: str) -> bool:
        choice = self.prompter.select(f"{menu}:", [("Start", "start"), ("Back", "back")], default=0)
        return choice == "start"

    def _offer_export(self, text: str) -> None:
        if maybe_save(self.prompter, self.console, text, self.save_dir) is not None:
            self.show_home()

    def _update_config(self, config: Config) -> None:
        self.config = config
        try:
            config.save(self.config_path)
        except OSError as e:
            self.console.print(f"[red]Could not save settings:[/red] {escape(str(e))}")

    # -- flows -------------------------------------------------------------

    def show_home(self) -> None:
        show_logo(self.console, self.config)

    def help_flow(self) -> None:
        """Command table, then the settings sub-flow."""
        scheme = self.config.scheme
        self.say("\n/help menu", scheme.accent)
        show_command_table(self.console, scheme)
        self.say("\nSettings let you change color schemes and toggle animations for longer runs.")

        action = self.prompter.select(
            "Settings:",
            [
                ("Change color scheme", "colors"),
                ("Turn animations off" if self.config.animations else "Turn animations on", "toggle"),
                ("Back to main menu", "back"),
            ],
            default=2,
        )
        if action == "colors":
            names = list(COLOR_SCHEMES)
            current = names.index(self.config.color_scheme) if self.config.color_scheme in names else 0
            name = self.prompter.select(
                "Pick a color scheme:",
                [(COLOR_SCHEMES[n].label, n) for n in names],
                default=current,
            )
            self._update_config(self.config.with_scheme(name))
            show_logo(self.console, self.config)
            self.say("Color scheme updated.", self.config.scheme.primary)
        elif action == "toggle":
            self._update_config(self.config.toggled_animations())
            state = "enabled" if self.config.animations else "disabled"
            self.say(f"Animations {state}.", self.config.scheme.primary)

    def pi_flow(self) -> None:
        """Digits of pi. Estimated but never capped."""
        if not self._start_or_back("Pi menu"):
            return
        scheme = self.config.scheme
        count = self.prompter.ask_int(
            "How many digits of pi?", default=PI_DEFAULT_DIGITS, minimum=1, maximum=PI_MAX_DIGITS,
        )
        self.governor().estimate(WorkloadKind.PI, count, "digits")

        with self._spinner(count > _PI_SPINNER_THRESHOLD, "Calculating pi digits...", "Pi digits ready."):
            result = self.engine.run(WorkloadKind.PI, count)

        self.say("\nPi digits", scheme.primary)
        self.say(result.output)
        self.say(completion_line(result, count, "digits"), scheme.accent)
        self._offer_export(f"Pi digits ({count})\n{result.output}\n")

    def primes_flow(self) -> None:
        """First N primes, negotiated against a time cap."""
        if not self._start_or_back("Primes menu"):
            return
        scheme = self.config.scheme
        count = self.prompter.ask_int(
            "How many prime numbers?", default=PRIMES_DEFAULT_COUNT, minimum=1, maximum=PRIMES_MAX_COUNT,
        )
        increment = self.prompter.ask_int("Group primes by increment", default=PRIMES_DEFAULT_GROUP, minimum=1)

        def reprompt(previous: int) -> int:
            nonlocal increment
            new_count = self.prompter.ask_int(
                "How many prime numbers?", default=previous, minimum=1, maximum=PRIMES_MAX_COUNT,
            )
            increment = self.prompter.ask_int("Group primes by increment", default=increment, minimum=1)
            return new_count

        approved = self.governor().negotiate(
            WorkloadKind.PRIMES, count, PRIMES_MAX_SECONDS, "primes", reprompt,
        )
        if approved is None:
            self.console.print("[dim]Cancelled.[/dim]")
            return

        with self._spinner(approved > _PRIMES_SPINNER_THRESHOLD, "Generating prime numbers...", "Prime numbers ready."):
            result = self.engine.run(WorkloadKind.PRIMES, approved)

        groups = group_primes(parse_primes(result.output), increment)
        self.say("\nPrime numbers", scheme.primary)
        for idx, group in enumerate(groups):
            self.say(", ".join(str(p) for p in group), scheme.prime_a if idx % 2 == 0 else scheme.prime_b)
        self.say(completion_line(result, approved, "primes"), scheme.accent)

        body = "\n".join(", ".join(str(p) for p in g) for g in groups)
        self._offer_export(f"Prime numbers ({approved})\n{body}\n")

    def bench_flow(self) -> None:
        """Fixed-duration benchmark suites. The duration is the cap, so no calibration."""
        if not self._start_or_back("Benchmarks menu"):
            return
        scheme = self.config.scheme
        show_system_info(self.console, scheme, self.engine.description)

        duration = self.prompter.select(
            "Benchmark duration per test:",
            [(f"{s} seconds", s) for s in BENCH_DURATIONS],
            default=BENCH_DURATIONS.index(BENCH_DEFAULT_DURATION),
        )
        suites = self.prompter.select_many(
            "Select benchmark suites",
            [(BENCH_LABELS[k], k) for k in BENCH_KINDS],
        )

        for kind in suites:
            with self._spinner(True, f"Running {kind.short_name} for {duration}s...", "Benchmark complete."):
                result = self.engine.run(kind, duration)
            self.say(f"\n{kind.short_name.upper()}", scheme.primary)
            self.say(result.output)
            self.say(f"Elapsed: {format_seconds(result.elapsed_s)}", scheme.accent)

    # -- state machine -----------------------------------------------------

    def dispatch(self, intent: Intent) -> None:
        """Run the flow for one resolved intent."""
        if intent is Intent.EXIT:
            self.say("Later!")
            self.state = State.EXITING
            return
        flow = self._flows.get(intent)
        if flow is None:
            self.say(self.rng.choice(FALLBACK_RESPONSES))
            return
        flow()

    def handle(self, line: str) -> Optional[Intent]:
        """Process one line of input. Returns the resolved intent, None if blank."""
        text = line.strip()
        if not text:
            self.say("No input received. Standing by.")
            return None
        intent = resolve_command([text])
        self.dispatch(intent)
        return intent

    def run_interactive(self) -> None:
        """Read-resolve-dispatch loop until an exit intent or EOF."""
        self.state = State.AWAITING_INPUT
        self.say("Arithmetic benchmarking suite ~ type help for cmds")
        while self.state is not State.EXITING:
            try:
                line = self.prompter.ask_text("What would you like to run?")
            except (EOFError, KeyboardInterrupt):
                self.console.print()
                self.dispatch(Intent.EXIT)
                break
            self.handle(line)

    def run(self, intent: Intent = Intent.INTERACTIVE) -> None:
        """CLI entry: show home, then one flow or the interactive loop.

        Recognized intents run once and return; unknown input and no input
        both fall into the interactive loop.
        """
        self.show_home()
        if intent is Intent.HOME:
            return
        if intent is Intent.EXIT or intent in self._flows:
            self.dispatch(intent)
            return
        self.run_interactive()
