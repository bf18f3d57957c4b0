"""Read-only access to the last published snapshot of each channel."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, status

from flight_tracker.services.publisher import ChangeDetectionPublisher, Channel

router = APIRouter(prefix="/api/v1", tags=["snapshots"])


def get_publisher(request: Request) -> ChangeDetectionPublisher:
    publisher = getattr(request.app.state, "publisher", None)
    if publisher is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Tracker is not running",
        )
    return publisher


@router.get("/snapshots/{channel}", summary="Last published snapshot")
async def read_snapshot(
    channel: Channel,
    publisher: ChangeDetectionPublisher = Depends(get_publisher),
) -> Any:
    """Return exactly what was last sent on the channel's topic."""

    if not publisher.has_published(channel):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Nothing published on {channel.value} yet",
        )
    return publisher.last_published(channel)
