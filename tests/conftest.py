"""Shared fixtures: a recording fake engine, a scripted prompter, a string console."""

from __future__ import annotations

import io
import random
from collections import deque
from typing import Optional

import pytest
from rich.console import Console

from gensuite.config import Config
from gensuite.helper import generate_primes
from gensuite.models import EngineResult, WorkloadKind
from gensuite.session import Session
from gensuite.ui import bounds_error


class FakeEngine:
    """Records every call; elapsed time is magnitude / rate for the kind.

    A kind with no rate (or rate 0) reports zero elapsed time.
    """

    description = "fake-engine"

    def __init__(self, rates: Optional[dict[WorkloadKind, float]] = None) -> None:
        self.rates = rates or {}
        self.calls: list[tuple[WorkloadKind, int]] = []

    def run(self, kind: WorkloadKind, magnitude: int) -> EngineResult:
        self.calls.append((kind, magnitude))
        rate = self.rates.get(kind)
        elapsed = magnitude / rate if rate else 0.0
        return EngineResult(output=self._output(kind, magnitude), elapsed_s=elapsed)

    @staticmethod
    def _output(kind: WorkloadKind, magnitude: int) -> str:
        if kind == WorkloadKind.PI:
            return "3." + "1" * magnitude
        if kind == WorkloadKind.PRIMES:
            return ", ".join(str(p) for p in generate_primes(magnitude))
        return f"Iterations: {magnitude}\n{kind.short_name} done"


class ScriptedPrompter:
    """Answers prompts from a fixed script; raises EOFError when it runs out.

    ask_int mimics the real prompter's re-ask on out-of-range values and
    records the rejected ones.
    """

    def __init__(self, *answers) -> None:
        self.answers = deque(answers)
        self.asked: list[str] = []
        self.rejected: list[int] = []

    def _next(self, message: str):
        self.asked.append(message)
        if not self.answers:
            raise EOFError(message)
        return self.answers.popleft()

    def select(self, message, choices, default=0):
        answer = self._next(message)
        values = [v for _, v in choices]
        assert answer in values, f"{answer!r} not offered for {message!r}: {values}"
        return answer

    def select_many(self, message, choices):
        answer = list(self._next(message))
        values = [v for _, v in choices]
        assert answer and all(a in values for a in answer)
        return answer

    def ask_int(self, message, default, minimum=1, maximum=None):
        while True:
            value = self._next(message)
            if bounds_error(value, minimum, maximum) is None:
                return value
            self.rejected.append(value)

    def ask_text(self, message, default=""):
        return self._next(message)


@pytest.fixture
def console() -> Console:
    return Console(file=io.StringIO(), width=200, color_system=None, force_terminal=False)


@pytest.fixture
def output(console):
    """Callable returning everything printed so far."""
    return lambda: console.file.getvalue()


@pytest.fixture
def config_path(tmp_path):
    return tmp_path / "gensuite.config.json"


@pytest.fixture
def make_session(console, config_path, tmp_path):
    def _make(engine, prompter, config: Optional[Config] = None, seed: int = 0) -> Session:
        return Session(
            engine=engine,
            console=console,
            prompter=prompter,
            config=config or Config(animations=False),
            config_path=config_path,
            rng=random.Random(seed),
            save_dir=tmp_path,
        )
    return _make
