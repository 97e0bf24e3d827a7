"""
relay/runner.py -- Builds and runs the PowerShell hardening command.

audit   -> script runs with -WhatIf (reports what it would change)
enforce -> script runs without it (applies changes)

One synchronous subprocess per call, no queueing. Output is captured as
text and returned whole; the caller decides the HTTP status.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

logger = logging.getLogger("flapper.relay.runner")

AUDIT_FLAG = "-WhatIf"


class ScriptError(RuntimeError):
    """The hardening script could not be run to a successful exit."""

    def __init__(self, message: str, stdout: str = "", stderr: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.stdout = stdout
        self.stderr = stderr


@dataclass
class ScriptResult:
    stdout: str
    stderr: str
    returncode: int
    elapsed_time: float = 0.0
    command: list[str] = field(default_factory=list)


def build_command(powershell: str, script: Path, mode: str) -> list[str]:
    command = [powershell, "-NoProfile", "-ExecutionPolicy", "Bypass", "-File", str(script)]
    if mode == "audit":
        command.append(AUDIT_FLAG)
    return command


def run_script(command: Sequence[str], timeout: float) -> ScriptResult:
    """Run the command and return its output. Raises ScriptError on any failure.

    Callers check that the script file exists first; a missing interpreter,
    a timeout and a non-zero exit all surface here as ScriptError.
    """
    cmd_str = " ".join(shlex.quote(arg) for arg in command)
    start = time.perf_counter()
    try:
        logger.info("Running hardening script (timeout=%ss): %s", timeout, cmd_str)
        completed = subprocess.run(
            list(command),
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        logger.error("Hardening script timed out after %ss", timeout)
        raise ScriptError(
            f"Hardening script timed out after {timeout:g}s",
            stdout=_text(e.stdout),
            stderr=_text(e.stderr),
        ) from e
    except FileNotFoundError as e:
        logger.error("Interpreter not found: %s", command[0])
        raise ScriptError(f"Interpreter not found: {command[0]}") from e
    except OSError as e:
        logger.error("Could not start hardening script: %s", e)
        raise ScriptError(f"Could not start hardening script: {e}") from e

    result = ScriptResult(
        stdout=completed.stdout or "",
        stderr=completed.stderr or "",
        returncode=completed.returncode,
        elapsed_time=time.perf_counter() - start,
        command=list(command),
    )
    logger.info("Hardening script exited %d in %.1fs", result.returncode, result.elapsed_time)
    if result.returncode != 0:
        raise ScriptError(
            f"Hardening script exited with code {result.returncode}",
            stdout=result.stdout,
            stderr=result.stderr,
        )
    return result


def _text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value
