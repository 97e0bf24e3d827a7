"""
formatter.py -- Renders dashboard state to the terminal for the CLI.
"""

import os
import re
import sys
from typing import Iterable, Optional

from .models import EducationalContent, LogEntry, MitigationRecord, RiskLevel, RunResult, RunStatus, ServiceRecord

W = 68  # output width

# ---------------------------------------------------------------------------
# ANSI color control
# ---------------------------------------------------------------------------

_ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")


def strip_ansi(text: str) -> str:
    """Remove ANSI escape sequences from a string."""
    return _ANSI_RE.sub("", text)


def _use_color() -> bool:
    """Return True if stdout is a TTY and color has not been disabled.

    Respects NO_COLOR env var (https://no-color.org) and checks sys.stdout.isatty().
    """
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("FORCE_COLOR"):
        return True
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


_color_enabled: Optional[bool] = None  # None = auto-detect


def disable_color() -> None:
    """Force-disable color output (called when --no-color flag is set)."""
    global _color_enabled
    _color_enabled = False


def _color_active() -> bool:
    if _color_enabled is not None:
        return _color_enabled
    return _use_color()


RISK_COLORS = {
    RiskLevel.CRITICAL: "\033[91m",  # red
    RiskLevel.HIGH: "\033[93m",  # yellow
    RiskLevel.MEDIUM: "\033[94m",  # blue
    RiskLevel.LOW: "\033[92m",  # green
}

LOG_COLORS = {
    "success": "\033[92m",
    "warning": "\033[93m",
    "error": "\033[91m",
}


def _reset() -> str:
    return "\033[0m" if _color_active() else ""


def _bold() -> str:
    return "\033[1m" if _color_active() else ""


def _dim() -> str:
    return "\033[2m" if _color_active() else ""


def _risk_color(risk: RiskLevel) -> str:
    return RISK_COLORS.get(risk, "") if _color_active() else ""


# ---------------------------------------------------------------------------
# Layout helpers
# ---------------------------------------------------------------------------


def _bar(char: str = "═") -> str:
    return char * W


def _section(title: str) -> str:
    return f"\n  {_bold()}{title}{_reset()}\n  {'─' * (W - 2)}"


def _wrap(text: str, indent: int = 4, width: int = W) -> str:
    """Simple word-wrap at `width` chars with leading indent."""
    words = text.split()
    lines = []
    line = " " * indent
    for word in words:
        if len(line) + len(word) + 1 > width:
            lines.append(line)
            line = " " * indent + word
        else:
            line += ("" if line.strip() == "" else " ") + word
    if line.strip():
        lines.append(line)
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Renderers
# ---------------------------------------------------------------------------


def format_services(services: Iterable[ServiceRecord]) -> str:
    rows = [_section("NETWORK ATTACK SURFACE")]
    for s in services:
        color = _risk_color(s.risk)
        rows.append(
            f"    {s.port:>5}/{s.protocol.value:<3}  {s.name:<26} {s.status.value:<8} {color}{s.risk.value}{_reset()}"
        )
    return "\n".join(rows)


def format_mitigations(records: Iterable[MitigationRecord]) -> str:
    rows = [_section("HARDENING CATALOG")]
    for m in records:
        color = _risk_color(m.risk_level)
        mark = "[x]" if m.is_applied else "[ ]"
        rows.append(f"    {mark} {m.id:<8} {m.name:<28} {color}{m.risk_level.value}{_reset()}")
    return "\n".join(rows)


def format_log(entries: Iterable[LogEntry]) -> str:
    rows = []
    for e in entries:
        color = LOG_COLORS.get(e.type.value, "") if _color_active() else ""
        rows.append(f"  {_dim()}[{e.timestamp}]{_reset()} {color}{e.message}{_reset()}")
    return "\n".join(rows)


def format_run(result: RunResult) -> str:
    bold = _bold()
    reset = _reset()
    rows = [f"\n{bold}{_bar()}{reset}", f"  {bold}Hardening {result.mode.value}{reset}  │  {result.status.value}"]
    rows.append(f"{bold}{_bar()}{reset}")
    if result.status is RunStatus.failed:
        rows.append(f"  {RISK_COLORS[RiskLevel.CRITICAL] if _color_active() else ''}{result.message}{reset}")
    if result.stdout.strip():
        rows.append(_section("SCRIPT OUTPUT"))
        rows.extend(f"    {line}" for line in result.stdout.rstrip().splitlines())
    if result.stderr.strip():
        rows.append(_section("SCRIPT ERRORS"))
        rows.extend(f"    {line}" for line in result.stderr.rstrip().splitlines())
    return "\n".join(rows)


def format_education(content: EducationalContent) -> str:
    bold = _bold()
    reset = _reset()
    return "\n".join(
        [
            f"\n{bold}{_bar()}{reset}",
            f"  {bold}{content.title}{reset}",
            f"{bold}{_bar()}{reset}",
            _section("OVERVIEW"),
            _wrap(content.summary),
            _section("TECHNICAL MECHANISM"),
            _wrap(content.technical_details),
            _section("RECOMMENDED DEFENSE"),
            _wrap(content.remediation_steps),
            "",
        ]
    )
