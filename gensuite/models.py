"""Data models for the gensuite session.

WorkloadKind and Intent enums, EngineResult, CalibrationSample,
TimeCapDecision — the typed structures that flow through
resolver → session → governor → engine.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class WorkloadKind(str, Enum):
    """Computation categories understood by the compute engine."""

    PI = "pi"
    PRIMES = "primes"
    BENCH_MATMUL = "bench-matmul"
    BENCH_BIGINT = "bench-bigint"
    BENCH_SIEVE = "bench-sieve"

    @property
    def short_name(self) -> str:
        """'bench-matmul' → 'matmul'."""
        return self.value.replace("bench-", "")


BENCH_KINDS = [WorkloadKind.BENCH_MATMUL, WorkloadKind.BENCH_BIGINT, WorkloadKind.BENCH_SIEVE]


class Intent(str, Enum):
    """Canonical intents produced by the command resolver."""

    INTERACTIVE = "interactive"
    HELP = "help"
    EXIT = "exit"
    HOME = "home"
    PI = "pi"
    PRIMES = "primes"
    BENCH = "bench"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class EngineResult:
    """Output of one engine invocation plus its wall clock time."""

    output: str
    elapsed_s: float

    def rate(self, magnitude: int) -> Optional[float]:
        """Magnitude units per second, or None when undefined."""
        return CalibrationSample(magnitude, self.elapsed_s).rate


@dataclass(frozen=True)
class CalibrationSample:
    """A cheap probe run used only to measure throughput."""

    probe_magnitude: int
    elapsed_s: float

    @property
    def rate(self) -> Optional[float]:
        """Units per second. None when elapsed or magnitude is zero or the
        result is not a positive finite number."""
        if self.probe_magnitude <= 0 or self.elapsed_s <= 0:
            return None
        rate = self.probe_magnitude / self.elapsed_s
        if not math.isfinite(rate) or rate <= 0:
            return None
        return rate


class Outcome(str, Enum):
    """Result of one pass through the time-cap check."""

    PROCEED = "proceed"
    CAPPED = "capped"
    RETRY = "retry"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class TimeCapDecision:
    """What the governor decided for a requested magnitude.

    ``magnitude`` is meaningful for PROCEED and CAPPED only; it is 0 for
    RETRY and CANCELLED.
    """

    outcome: Outcome
    magnitude: int = 0
    sample: Optional[CalibrationSample] = None
    max_magnitude: Optional[int] = None

    @classmethod
    def proceed(cls, magnitude: int, sample: Optional[CalibrationSample] = None,
                max_magnitude: Optional[int] = None) -> TimeCapDecision:
        return cls(Outcome.PROCEED, magnitude, sample, max_magnitude)

    @classmethod
    def capped(cls, magnitude: int, sample: CalibrationSample) -> TimeCapDecision:
        return cls(Outcome.CAPPED, magnitude, sample, magnitude)

    @property
    def approved(self) -> bool:
        return self.outcome in (Outcome.PROCEED, Outcome.CAPPED)
