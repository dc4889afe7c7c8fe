"""Bundled compute engine.

Fallback used when no gensuite-helper binary is installed. Speaks the same
command-line contract as the native helper:

    python -m gensuite.helper pi 30
    python -m gensuite.helper primes 100
    python -m gensuite.helper bench-sieve 45
"""

from __future__ import annotations

import math
import time
from typing import Callable

import typer

app = typer.Typer(
    name="gensuite-helper",
    help="Compute engine for gensuite",
    no_args_is_help=True,
    add_completion=False,
)

# Guard digits carried through the arctangent series before rounding.
_PI_GUARD_DIGITS = 5


def _arctan_inv(x: int, scale: int) -> int:
    """scale * arctan(1/x) by the alternating Taylor series, in integers."""
    x2 = x * x
    term = scale // x
    total = term
    k = 1
    sign = -1
    while True:
        term //= x2
        add = term // (2 * k + 1)
        if add == 0:
            break
        total += sign * add
        sign = -sign
        k += 1
    return total


def compute_pi(digits: int) -> str:
    """Pi to ``digits`` decimal places via Machin's formula, as '3.1415...'."""
    scale = 10 ** (digits + _PI_GUARD_DIGITS)
    pi_scaled = 16 * _arctan_inv(5, scale) - 4 * _arctan_inv(239, scale)
    rounding = 5 * 10 ** (_PI_GUARD_DIGITS - 1)
    rounded = str((pi_scaled + rounding) // 10 ** _PI_GUARD_DIGITS).zfill(digits + 1)
    return f"{rounded[0]}.{rounded[1:]}"


def generate_primes(count: int) -> list[int]:
    """The first ``count`` primes.

    Sieve limit from the n-th prime bound n(ln n + ln ln n), floored at 15.
    """
    if count <= 0:
        return []
    if count == 1:
        return [2]
    if count < 6:
        limit = 15
    else:
        limit = max(15, math.ceil(count * (math.log(count) + math.log(math.log(count)))))
    sieve = bytearray([1]) * (limit + 1)
    sieve[0:2] = b"\x00\x00"
    primes: list[int] = []
    for i in range(2, limit + 1):
        if sieve[i]:
            primes.append(i)
            if len(primes) >= count:
                break
            sieve[i * i :: i] = bytes(len(range(i * i, limit + 1, i)))
    return primes[:count]


def _sample_loop(seconds: int, body: Callable[[], None]) -> tuple[int, list[float], float]:
    """Run ``body`` repeatedly for ``seconds``, sampling throughput each second.

    Returns (iterations, per-second samples, elapsed).
    """
    start = time.monotonic()
    iters = 0
    samples: list[float] = []
    while time.monotonic() - start < seconds:
        sample_start = time.monotonic()
        sample_iters = 0
        while time.monotonic() - sample_start < 1.0 and time.monotonic() - start < seconds:
            body()
            sample_iters += 1
            iters += 1
        sample_elapsed = time.monotonic() - sample_start
        if sample_elapsed > 0:
            samples.append(sample_iters / sample_elapsed)
    return iters, samples, time.monotonic() - start


def _stats(samples: list[float]) -> tuple[float, float, float]:
    """(min, avg, max) of the samples, zeros when empty."""
    if not samples:
        return 0.0, 0.0, 0.0
    return min(samples), sum(samples) / len(samples), max(samples)


def bench_matmul(seconds: int, n: int = 48) -> str:
    """Dense n×n float matrix multiply; reports GFLOP/s."""
    a = [[1.001] * n for _ in range(n)]
    b = [[0.999] * n for _ in range(n)]
    c = [[0.0] * n for _ in range(n)]

    def body() -> None:
        for i in range(n):
            row_a = a[i]
            row_c = c[i]
            for k in range(n):
                aik = row_a[k]
                row_b = b[k]
                for j in range(n):
                    row_c[j] += aik * row_b[j]
        a[0][0] = c[0][0] / 3.14159

    iters, samples, elapsed = _sample_loop(seconds, body)
    flops_per_iter = 2.0 * n ** 3
    lo, avg, hi = (s * flops_per_iter / 1e9 for s in _stats(samples))
    overall = (flops_per_iter * iters / elapsed) / 1e9 if elapsed > 0 else 0.0
    return (
        f"Iterations: {iters}\n"
        f"GFLOP/s avg: {avg:.2f}\n"
        f"GFLOP/s min: {lo:.2f}\n"
        f"GFLOP/s max: {hi:.2f}\n"
        f"GFLOP/s overall: {overall:.2f}\n"
        f"Size: {n}x{n}"
    )


def bench_bigint(seconds: int) -> str:
    """Repeated 4096-digit integer multiply-accumulate."""
    a = int("1" + "7" * 4096)
    b = int("1" + "3" * 4096)
    acc = [1]

    def body() -> None:
        acc[0] = a * b + acc[0]

    iters, samples, elapsed = _sample_loop(seconds, body)
    lo, avg, hi = _stats(samples)
    overall = iters / elapsed if elapsed > 0 else 0.0
    return (
        f"Iterations: {iters}\n"
        f"Multiplies/sec avg: {avg:.2f}\n"
        f"Multiplies/sec min: {lo:.2f}\n"
        f"Multiplies/sec max: {hi:.2f}\n"
        f"Multiplies/sec overall: {overall:.2f}\n"
        f"Digits: {len(str(acc[0]))}"
    )


def sieve_count(limit: int) -> int:
    """Number of primes ≤ limit."""
    sieve = bytearray([1]) * (limit + 1)
    sieve[0:2] = b"\x00\x00"
    for i in range(2, math.isqrt(limit) + 1):
        if sieve[i]:
            sieve[i * i :: i] = bytes(len(range(i * i, limit + 1, i)))
    return sum(sieve)


def bench_sieve(seconds: int, limit: int = 2_000_000) -> str:
    """Repeated Eratosthenes sieve up to ``limit``."""
    found = [0]

    def body() -> None:
        found[0] = sieve_count(limit)

    iters, samples, elapsed = _sample_loop(seconds, body)
    lo, avg, hi = _stats(samples)
    overall = iters / elapsed if elapsed > 0 else 0.0
    return (
        f"Iterations: {iters}\n"
        f"Sieves/sec avg: {avg:.2f}\n"
        f"Sieves/sec min: {lo:.2f}\n"
        f"Sieves/sec max: {hi:.2f}\n"
        f"Sieves/sec overall: {overall:.2f}\n"
        f"Limit: {limit}\n"
        f"Primes: {found[0]}"
    )


@app.command("pi")
def cmd_pi(digits: int = typer.Argument(50, min=1, help="Decimal places")) -> None:
    """Print digits of pi."""
    typer.echo(compute_pi(digits))


@app.command("primes")
def cmd_primes(count: int = typer.Argument(15, min=1, help="How many primes")) -> None:
    """Print the first N primes, comma-separated."""
    typer.echo(", ".join(str(p) for p in generate_primes(count)))


@app.command("bench-matmul")
def cmd_bench_matmul(seconds: int = typer.Argument(60, min=1)) -> None:
    """Matrix multiply benchmark."""
    typer.echo(bench_matmul(seconds))


@app.command("bench-bigint")
def cmd_bench_bigint(seconds: int = typer.Argument(60, min=1)) -> None:
    """Big integer multiply benchmark."""
    typer.echo(bench_bigint(seconds))


@app.command("bench-sieve")
def cmd_bench_sieve(seconds: int = typer.Argument(60, min=1)) -> None:
    """Prime sieve benchmark."""
    typer.echo(bench_sieve(seconds))


if __name__ == "__main__":
    app()
