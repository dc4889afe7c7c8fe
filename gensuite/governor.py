"""Calibration and time-cap governor.

Turns a requested magnitude into an approved magnitude (or a cancellation)
before the expensive engine call is made:

1. Probe the engine at min(ceiling, requested) and time it
2. Extrapolate a rate (units/sec); an undefined rate bypasses the cap
3. max = max(1, floor(rate * max_seconds))
4. Under budget → proceed; over budget → ask: cap / retry / cancel

A retry always re-probes. The full-cost call is the caller's job and only
happens after an approved decision comes back.
"""

from __future__ import annotations

import math
from typing import Callable, Optional

from rich.console import Console

from gensuite.engine import Engine
from gensuite.models import CalibrationSample, Outcome, TimeCapDecision, WorkloadKind

# Probe magnitudes: big enough to measure, small enough to be near-instant.
CALIBRATION_CEILINGS: dict[WorkloadKind, int] = {
    WorkloadKind.PI: 30,
    WorkloadKind.PRIMES: 10,
}

# chooser(label, requested, max_magnitude, max_seconds) -> Outcome
Chooser = Callable[[str, int, int, float], Outcome]


def calibration_ceiling(kind: WorkloadKind) -> int:
    """Probe magnitude ceiling for a workload kind.

    Raises:
        ValueError: for kinds that are never calibrated (benchmarks).
    """
    try:
        return CALIBRATION_CEILINGS[kind]
    except KeyError:
        raise ValueError(f"{kind.value} has no calibration probe") from None


def max_magnitude_for(rate: float, max_seconds: float) -> int:
    """Largest magnitude expected to finish within max_seconds, at least 1."""
    return max(1, math.floor(rate * max_seconds))


def format_seconds(seconds: float) -> str:
    """Human duration.

    < 10s  → two decimals ('1.00s', '9.99s')
    < 60s  → one decimal ('10.0s', '59.9s')
    else   → whole minutes and rounded seconds ('1m 0s')
    """
    total = max(seconds, 0.0)
    if total < 10:
        return f"{total:.2f}s"
    if total < 60:
        return f"{total:.1f}s"
    minutes = math.floor(total / 60)
    secs = math.floor(total % 60 + 0.5)
    if secs == 60:
        minutes, secs = minutes + 1, 0
    return f"{minutes}m {secs}s"


def format_rate(rate: float) -> str:
    return f"{rate:.1f}"


def estimate_line(magnitude: int, rate: float, label: str) -> str:
    """'Estimate: 1.23s (~812.0 primes/sec)'."""
    return f"Estimate: {format_seconds(magnitude / rate)} (~{format_rate(rate)} {label}/sec)"


class Governor:
    """Runs calibration probes and negotiates the time cap with the user.

    Args:
        engine: Adapter used for probe runs.
        console: Where estimate and notice lines are printed.
        chooser: Asks the user cap / retry / cancel when over budget.
        style: Rich style for informational lines.
        verbose: Print probe traces.
    """

    def __init__(
        self,
        engine: Engine,
        console: Console,
        chooser: Chooser,
        style: str = "",
        verbose: bool = False,
    ) -> None:
        self.engine = engine
        self.console = console
        self.chooser = chooser
        self.style = style
        self.verbose = verbose

    def _say(self, text: str) -> None:
        self.console.print(text, style=self.style or None, markup=False, highlight=False)

    def calibrate(self, kind: WorkloadKind, requested: int) -> CalibrationSample:
        """One engine call at the probe magnitude."""
        probe = min(calibration_ceiling(kind), requested)
        result = self.engine.run(kind, probe)
        sample = CalibrationSample(probe_magnitude=probe, elapsed_s=result.elapsed_s)
        if self.verbose:
            rate = sample.rate
            self.console.print(
                f"  [dim]Calibrated {kind.value}: {probe} in {format_seconds(sample.elapsed_s)}"
                f" (rate: {format_rate(rate) if rate else 'unknown'})[/dim]"
            )
        return sample

    def estimate(self, kind: WorkloadKind, requested: int, label: str) -> CalibrationSample:
        """Probe and print an ETA line, without any cap check."""
        sample = self.calibrate(kind, requested)
        rate = sample.rate
        if rate is not None:
            self._say(estimate_line(requested, rate, label))
        return sample

    def estimate_and_cap(
        self,
        kind: WorkloadKind,
        requested: int,
        max_seconds: float,
        label: str,
    ) -> TimeCapDecision:
        """Probe once and decide PROCEED / CAPPED / RETRY / CANCELLED."""
        sample = self.calibrate(kind, requested)
        rate = sample.rate
        if rate is None:
            return TimeCapDecision.proceed(requested, sample)

        max_magnitude = max_magnitude_for(rate, max_seconds)
        if requested <= max_magnitude:
            self._say(estimate_line(requested, rate, label))
            return TimeCapDecision.proceed(requested, sample, max_magnitude)

        self._say(
            f"Requested {requested} {label} exceeds ~{max_seconds:g}s limit. "
            f"Estimated max: {max_magnitude}."
        )
        choice = Outcome(self.chooser(label, requested, max_magnitude, max_seconds))
        if choice is Outcome.CAPPED:
            self._say(estimate_line(max_magnitude, rate, label))
            return TimeCapDecision.capped(max_magnitude, sample)
        if choice is Outcome.RETRY:
            return TimeCapDecision(Outcome.RETRY, sample=sample, max_magnitude=max_magnitude)
        return TimeCapDecision(Outcome.CANCELLED, sample=sample, max_magnitude=max_magnitude)

    def negotiate(
        self,
        kind: WorkloadKind,
        requested: int,
        max_seconds: float,
        label: str,
        reprompt: Callable[[int], int],
    ) -> Optional[int]:
        """Loop probe → decide until the user proceeds, caps or cancels.

        ``reprompt(previous)`` supplies a new magnitude after a RETRY.
        Returns the approved magnitude, or None when cancelled.
        """
        magnitude = requested
        while True:
            decision = self.estimate_and_cap(kind, magnitude, max_seconds, label)
            if decision.outcome is Outcome.RETRY:
                magnitude = reprompt(magnitude)
                continue
            if decision.outcome is Outcome.CANCELLED:
                return None
            return decision.magnitude
