from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import orjson

from .api import api_state
from .bootstrap import configure_logging
from .domain import ActionPlan
from .orchestrator import CalendarAssistant, PlannerNotConfiguredError
from .services import ActionApplier, CalendarService, ServiceContext
from .services.http import run_local_server
from .services.mcp import run_mcp_server


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Tidy Calendar command line interface.")
    parser.add_argument("--calendar", type=Path, default=None, help="Calendar file to use instead of the configured one.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    api_parser = subparsers.add_parser("api", help="Start the HTTP server (tools, chat, upload and download).")
    api_parser.add_argument("--host", default=None)
    api_parser.add_argument("--port", type=int, default=None)

    mcp_parser = subparsers.add_parser("mcp", help="Start the FastMCP server exposing the calendar tools.")
    mcp_parser.add_argument("--host", default=None)
    mcp_parser.add_argument("--port", type=int, default=None)

    subparsers.add_parser("summary", help="Print the day-by-day calendar summary.")
    subparsers.add_parser("events", help="Print timed events as JSON.")

    apply_parser = subparsers.add_parser("apply", help="Apply an action plan read from a JSON file.")
    apply_parser.add_argument("plan", type=Path)
    apply_parser.add_argument("--allow-past", action="store_true", help="Allow creating or moving events into the past.")

    chat_parser = subparsers.add_parser("chat", help="Send one request to the assistant.")
    chat_parser.add_argument("message", nargs="+")

    return parser


def _apply_plan(calendar: CalendarService, plan_path: Path, allow_past: bool) -> None:
    plan = ActionPlan.from_payload(orjson.loads(plan_path.read_bytes()))
    result = ActionApplier(calendar).apply_plan(plan, allow_past=allow_past)
    payload = result.to_dict()
    if result.include_summary:
        payload["summary"] = calendar.summarize()
    print(orjson.dumps(payload, option=orjson.OPT_INDENT_2).decode())


def _chat(calendar: CalendarService, message: str) -> int:
    try:
        turn = CalendarAssistant(calendar).handle(message)
    except PlannerNotConfiguredError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    print(turn.render_chat_reply())
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    configure_logging()
    logging.getLogger(__name__).info("Tidy Calendar CLI starting")
    parser = build_parser()
    args = parser.parse_args(argv)

    context = ServiceContext(calendar_path=args.calendar)
    api_state.rebind(context)
    calendar = api_state.calendar

    if args.command == "api":
        run_local_server(host=args.host, port=args.port)
    elif args.command == "mcp":
        run_mcp_server(host=args.host, port=args.port)
    elif args.command == "summary":
        print(calendar.summarize())
    elif args.command == "events":
        print(orjson.dumps({"events": calendar.list_events()}, option=orjson.OPT_INDENT_2).decode())
    elif args.command == "apply":
        _apply_plan(calendar, args.plan, args.allow_past)
    elif args.command == "chat":
        return _chat(calendar, " ".join(args.message))
    else:  # pragma: no cover - argparse enforces choices
        parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
