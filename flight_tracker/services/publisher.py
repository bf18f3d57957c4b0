"""Change-detection publishing onto the message bus."""

from __future__ import annotations

from enum import Enum
import json
import logging
from typing import Any, Protocol

from pydantic import BaseModel

logger = logging.getLogger("flight_tracker.publisher")


class Channel(str, Enum):
    AIRCRAFT = "aircraft"
    WEATHER = "weather"


class MessageBus(Protocol):
    async def publish(self, topic: str, payload: str) -> None: ...


def to_jsonable(value: Any) -> Any:
    """Convert models (and lists or dicts of them) to their published JSON form."""

    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, (list, tuple)):
        return [to_jsonable(item) for item in value]
    if isinstance(value, dict):
        return {key: to_jsonable(item) for key, item in value.items()}
    return value


class ChangeDetectionPublisher:
    """Publish a channel's value only when it differs from the last one sent.

    Comparison is done on the JSON form, so derived fields such as
    ``speedMph`` take part in it. Nothing is recorded when the bus raises,
    which means the same value is offered again on the next submit.
    """

    def __init__(self, bus: MessageBus, *, topic_prefix: str = "flight_tracker") -> None:
        self.bus = bus
        self.topic_prefix = topic_prefix.rstrip("/")
        self._last_published: dict[Channel, Any] = {}

    def topic_for(self, channel: Channel) -> str:
        return f"{self.topic_prefix}/{Channel(channel).value}"

    def last_published(self, channel: Channel) -> Any | None:
        return self._last_published.get(Channel(channel))

    def has_published(self, channel: Channel) -> bool:
        return Channel(channel) in self._last_published

    async def submit(self, channel: Channel, value: Any) -> bool:
        channel = Channel(channel)
        current = to_jsonable(value)
        if channel in self._last_published and self._last_published[channel] == current:
            logger.debug("No change on %s channel; skipping publish", channel.value)
            return False

        topic = self.topic_for(channel)
        await self.bus.publish(topic, json.dumps(current))
        self._last_published[channel] = current
        logger.info("Published %s update to %s", channel.value, topic)
        return True


__all__ = ["Channel", "ChangeDetectionPublisher", "MessageBus", "to_jsonable"]
