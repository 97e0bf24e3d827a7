#!/usr/bin/env python3
"""
Flapper: endpoint hardening dashboard, command-line companion.
Talks to the same hardening relay the web dashboard uses.

Usage:
  python main.py status
  python main.py run audit
  python main.py run enforce
  python main.py explain "SMB Relay"
  python main.py status --no-color

Environment variables (or .env):
  EXECUTOR_URL    Hardening relay base URL (default http://localhost:3001).
  INVENTORY_URL   Inventory provider base URL (defaults to EXECUTOR_URL).
  GEMINI_API_KEY  Optional. Enables live academy explanations.
"""

import argparse
import asyncio
import sys

from core.config import get_settings
from core.formatter import disable_color, format_education, format_log, format_mitigations, format_run, format_services
from core.models import RunMode, RunStatus
from core.session import DashboardSession


async def _status(session: DashboardSession) -> int:
    ok = await session.inventory.refresh()
    snapshot = session.inventory.snapshot
    if not ok:
        print(f"  [!] {session.alerts.current.message} -- showing baseline services.")
    print(format_services(snapshot.services))
    print(f"\n    {session.inventory.exposed_ports()} exposed port(s), {len(snapshot.software)} software package(s).")
    print(format_mitigations(session.registry.by_risk()))
    print()
    return 0 if ok else 1


async def _run(session: DashboardSession, mode: RunMode) -> int:
    print(f"  Running hardening {mode.value}...", flush=True)
    result = await session.orchestrator.run(mode)
    print(format_run(result))
    print()
    print(format_log(session.log.all()))
    print()
    return 0 if result.status is RunStatus.completed else 1


async def _explain(session: DashboardSession, topic: str) -> int:
    print(format_education(await session.explain(topic)))
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="flapper",
        description="Endpoint hardening: audit/enforce runs, attack surface, security academy.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py status
  python main.py run audit
  EXECUTOR_URL=http://192.168.8.12:3001 python main.py run enforce
  python main.py explain "RDP Brute Force"
        """,
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable ANSI color codes in terminal output",
    )
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")
    sub.add_parser("status", help="Show the network attack surface and hardening catalog")
    run_parser = sub.add_parser("run", help="Trigger a hardening pass on the relay host")
    run_parser.add_argument(
        "mode",
        choices=[m.value for m in RunMode],
        help="audit (what-if, no changes) or enforce (applies changes)",
    )
    explain_parser = sub.add_parser("explain", help="Explain the risk behind a topic")
    explain_parser.add_argument("topic", help='Topic, e.g. "BadUSB Attacks"')
    args = parser.parse_args()

    if args.no_color:
        disable_color()

    if not args.command:
        parser.print_help()
        return

    session = DashboardSession(get_settings())

    if args.command == "status":
        code = asyncio.run(_status(session))
    elif args.command == "run":
        code = asyncio.run(_run(session, RunMode(args.mode)))
    else:
        code = asyncio.run(_explain(session, args.topic))

    sys.exit(code)


if __name__ == "__main__":
    main()
