"""Free-text command resolution.

Maps a line of input (or the joined CLI arguments) to one canonical Intent
using an ordered rule table. The first rule whose predicate matches the
lower-cased input wins, so order is part of the contract:

- multi-word aliases ('pi benchy', 'run primes') sit above the bare
  'prime' / 'pi' fallbacks
- 'prime' is checked before 'pi', so input mentioning both resolves to
  primes; 'pi' also matches inside other words ('pipeline')
- anything mentioning 'exit' or 'quit' exits, even mid-sentence

This is a best-effort shortcut layer, not a parser.
"""

from __future__ import annotations

from typing import Callable, NamedTuple, Sequence

from gensuite.models import Intent


class Rule(NamedTuple):
    """One resolver rule: a predicate over normalized input and its intent."""

    name: str
    matches: Callable[[str], bool]
    intent: Intent


def _contains(*needles: str) -> Callable[[str], bool]:
    return lambda text: any(n in text for n in needles)


def _is_help(text: str) -> bool:
    return text in ("-h", "help") or "/help" in text


RULES: tuple[Rule, ...] = (
    Rule("help", _is_help, Intent.HELP),
    Rule("exit", _contains("exit", "quit"), Intent.EXIT),
    Rule("home", _contains("home"), Intent.HOME),
    Rule("pi benchy", _contains("pi benchy"), Intent.PI),
    Rule("prime benchy", _contains("prime benchy"), Intent.PRIMES),
    Rule("run primes", _contains("run primes"), Intent.PRIMES),
    Rule("run pi", _contains("run pi"), Intent.PI),
    # 'benchark' is a common typo
    Rule("bench", _contains("run benchmarks", "benchmarks", "benchmark", "benchark", "bench"), Intent.BENCH),
    Rule("prime", _contains("prime"), Intent.PRIMES),
    Rule("pi", _contains("pi"), Intent.PI),
)


def normalize(args: Sequence[str]) -> str:
    return " ".join(args).lower()


def match_rule(text: str) -> Rule | None:
    """First rule matching already-normalized text, or None."""
    for rule in RULES:
        if rule.matches(text):
            return rule
    return None


def resolve_command(args: Sequence[str]) -> Intent:
    """Resolve CLI arguments or a single input line to an Intent.

    An empty argument list means 'enter the interactive session'.
    """
    if len(args) == 0:
        return Intent.INTERACTIVE
    rule = match_rule(normalize(args))
    return rule.intent if rule else Intent.UNKNOWN
