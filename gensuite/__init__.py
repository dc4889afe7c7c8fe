"""gensuite — time-budgeted pi, primes and benchmark runs from the terminal.

Every pi or primes request is calibrated with a cheap probe run before the
real one; prime requests that would blow the ~30s budget are renegotiated
with the user (cap, re-enter, or cancel).

Usage:
    python -m gensuite                 # Interactive session
    python -m gensuite run primes      # One flow, then exit
    python -m gensuite bench           # Benchmark suites
    python -m gensuite help            # Help and settings
"""

__version__ = "1.0.0"
