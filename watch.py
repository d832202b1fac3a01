#!/usr/bin/env python3
"""
Terminal watcher for the pipeline activity dashboard
"""

import argparse
import asyncio
import signal

import structlog

from config.settings import settings
from src.services.activity_view import ActivityView
from src.services.shared_services import get_event_renderer
from src.utils.query_validator import QueryValidationError, validate_project

logger = structlog.get_logger()


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Follow pipeline activity from a terminal")
    parser.add_argument("--url", default=settings.DASHBOARD_API_URL, help="Dashboard API base URL")
    parser.add_argument("--project", default=None, help="Only show one project")
    parser.add_argument("--days", type=int, default=settings.DEFAULT_DAYS, help="Lookback window in days")
    parser.add_argument(
        "--interval", type=float, default=settings.REFRESH_INTERVAL, help="Seconds between polls"
    )
    return parser.parse_args(argv)


async def watch(args: argparse.Namespace) -> None:
    view = ActivityView(
        args.url,
        get_event_renderer(),
        project=args.project,
        days=args.days,
        interval=args.interval,
    )
    view.add_listener(lambda v: print(v.render_text(), flush=True))

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop.set)

    async with view:
        await stop.wait()


def main(argv=None) -> int:
    args = parse_args(argv)
    try:
        args.project = validate_project(args.project)
    except QueryValidationError as e:
        logger.error("Invalid arguments", field=e.field, error=e.message)
        return 2

    asyncio.run(watch(args))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
