from __future__ import annotations

import asyncio
import contextlib
import logging

from fastapi import FastAPI

from flight_tracker.api import api_router
from flight_tracker.config import configure_logging, settings
from flight_tracker.services.tracker import build_tracker

logger = logging.getLogger("flight_tracker")


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    """Run the tracker loop as a background task for the app's lifetime."""

    configure_logging(settings)
    # ConfigError here aborts startup before the loop is entered
    settings.validate()

    tracker, bus = build_tracker(settings)
    bus.connect()
    app.state.publisher = tracker.publisher
    app.state.stop_event = asyncio.Event()
    app.state.tracker_task = asyncio.create_task(tracker.run(app.state.stop_event))
    logger.info("Flight tracker task started")

    try:
        yield
    finally:
        app.state.stop_event.set()
        task = app.state.tracker_task
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        bus.close()


app = FastAPI(title="Flight Tracker", lifespan=lifespan)
app.include_router(api_router)
