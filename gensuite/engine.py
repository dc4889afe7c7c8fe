"""Compute engine adapter — one subprocess per request, timed by the caller side.

Invocation contract:
    <engine command> <kind> <magnitude>

stdout carries the result (pi: digit string, primes: comma-separated
integers, benchmarks: free text). Any launch failure or non-zero exit is
fatal to the session: the governor cannot work without the engine.

Discovery order for the engine command:
1. Explicit override (--engine / GENSUITE_ENGINE); must exist
2. gensuite-helper/target/{release,debug}/gensuite-helper under the cwd
3. gensuite-helper on PATH
4. The bundled Python engine (python -m gensuite.helper)
"""

from __future__ import annotations

import os
import shutil
import subprocess
import sys
import time
from pathlib import Path
from typing import Optional, Sequence

from gensuite.models import EngineResult, WorkloadKind

ENGINE_ENV_VAR = "GENSUITE_ENGINE"
_HELPER_NAME = "gensuite-helper"


class EngineError(Exception):
    """Base class for fatal engine failures."""


class EngineUnavailable(EngineError):
    """The engine cannot be located or launched."""


class EngineExecutionError(EngineError):
    """The engine launched but exited with a failure status."""

    def __init__(self, kind: WorkloadKind, returncode: int, stderr: str) -> None:
        self.kind = kind
        self.returncode = returncode
        self.stderr = stderr
        detail = stderr.strip() or "no diagnostic output"
        super().__init__(f"{kind.value} exited with status {returncode}: {detail}")


def _built_helper_paths(root: Path) -> list[Path]:
    target = root / _HELPER_NAME / "target"
    return [target / "release" / _HELPER_NAME, target / "debug" / _HELPER_NAME]


class Engine:
    """Synchronous adapter around the external compute engine."""

    def __init__(self, command: Sequence[str], timeout_s: Optional[float] = None) -> None:
        self.command = list(command)
        self.timeout_s = timeout_s

    def __repr__(self) -> str:
        return f"Engine({' '.join(self.command)!r})"

    @property
    def description(self) -> str:
        return " ".join(self.command)

    @classmethod
    def locate(cls, override: Optional[str] = None, root: Optional[Path] = None) -> Engine:
        """Find the engine command to use.

        Raises:
            EngineUnavailable: if an explicit override does not exist.
        """
        override = override or os.environ.get(ENGINE_ENV_VAR)
        if override:
            path = Path(override).expanduser()
            if not path.is_file():
                raise EngineUnavailable(f"Engine not found at {path}")
            if not os.access(path, os.X_OK):
                raise EngineUnavailable(f"Engine at {path} is not executable")
            return cls([str(path)])

        for candidate in _built_helper_paths(root or Path.cwd()):
            if candidate.is_file():
                return cls([str(candidate)])

        on_path = shutil.which(_HELPER_NAME)
        if on_path:
            return cls([on_path])

        return cls([sys.executable, "-m", "gensuite.helper"])

    def run(self, kind: WorkloadKind, magnitude: int) -> EngineResult:
        """Run the engine once and measure wall clock with a monotonic clock.

        Raises:
            ValueError: if magnitude is not a positive integer.
            EngineUnavailable: if the process cannot be launched.
            EngineExecutionError: if it exits non-zero or times out.
        """
        if isinstance(magnitude, bool) or not isinstance(magnitude, int) or magnitude <= 0:
            raise ValueError(f"magnitude must be a positive integer, got {magnitude!r}")

        kind = WorkloadKind(kind)
        cmd = [*self.command, kind.value, str(magnitude)]
        start = time.monotonic()
        try:
            proc = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout_s,
            )
        except subprocess.TimeoutExpired:
            raise EngineExecutionError(kind, -1, f"TIMEOUT after {self.timeout_s}s")
        except OSError as e:
            raise EngineUnavailable(f"Could not launch {cmd[0]}: {e}") from e
        elapsed = time.monotonic() - start

        if proc.returncode != 0:
            raise EngineExecutionError(kind, proc.returncode, proc.stderr)
        return EngineResult(output=proc.stdout.strip(), elapsed_s=elapsed)
