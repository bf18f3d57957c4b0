"""Run the tracker loop without the HTTP surface: ``python -m flight_tracker``."""

from __future__ import annotations

import asyncio
import logging
import signal
import sys

from flight_tracker.config import configure_logging, settings
from flight_tracker.exceptions import ConfigError
from flight_tracker.services.tracker import build_tracker

logger = logging.getLogger("flight_tracker")


async def main() -> None:
    tracker, bus = build_tracker(settings)
    bus.connect()

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:  # pragma: no cover - Windows event loops
            pass

    try:
        await tracker.run(stop_event)
    finally:
        bus.close()


def run() -> int:
    configure_logging(settings)
    try:
        settings.validate()
    except ConfigError as exc:
        logger.error("Refusing to start: %s", exc)
        return 1

    asyncio.run(main())
    return 0


if __name__ == "__main__":
    sys.exit(run())
