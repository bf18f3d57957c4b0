"""Thin paho-mqtt wrapper used to publish tracker snapshots."""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any, Callable
from urllib.parse import urlparse

import paho.mqtt.client as mqtt

from flight_tracker.exceptions import ConfigError, PublishError

logger = logging.getLogger("flight_tracker.mqtt")

_DEFAULT_PORTS = {"mqtt": 1883, "tcp": 1883, "mqtts": 8883, "ssl": 8883}


def _default_client_factory() -> Any:
    return mqtt.Client(mqtt.CallbackAPIVersion.VERSION2)


class MQTTClient:
    """Publish UTF-8 payloads to an MQTT broker.

    The paho network loop runs in its own thread and owns the socket,
    including reconnects. A publish on a disconnected client waits for that
    thread to report a connection before sending.
    """

    def __init__(
        self,
        broker_url: str,
        *,
        qos: int = 0,
        retain: bool = False,
        publish_timeout: float = 10.0,
        client_factory: Callable[[], Any] | None = None,
    ) -> None:
        parsed = urlparse(broker_url)
        if parsed.scheme not in _DEFAULT_PORTS or not parsed.hostname:
            raise ConfigError(f"Unsupported MQTT broker URL: {broker_url!r}")

        self.host = parsed.hostname
        self.port = parsed.port or _DEFAULT_PORTS[parsed.scheme]
        self.use_tls = parsed.scheme in {"mqtts", "ssl"}
        self.username = parsed.username
        self.password = parsed.password
        self.qos = qos
        self.retain = retain
        self.publish_timeout = publish_timeout

        self._connected = threading.Event()
        self._client = (client_factory or _default_client_factory)()
        self._client.on_connect = self._on_connect
        self._client.on_disconnect = self._on_disconnect

    def _on_connect(self, client, userdata, flags, reason_code, properties=None) -> None:
        if getattr(reason_code, "is_failure", False):
            logger.error("MQTT broker refused connection: %s", reason_code)
            return
        self._connected.set()
        logger.info("Connected to MQTT broker %s:%s (%s)", self.host, self.port, reason_code)

    def _on_disconnect(self, client, userdata, flags, reason_code, properties=None) -> None:
        self._connected.clear()
        logger.warning("Disconnected from MQTT broker: %s", reason_code)

    def connect(self) -> None:
        """Start the background network loop and begin connecting."""

        if self.username:
            self._client.username_pw_set(self.username, self.password)
        if self.use_tls:
            self._client.tls_set()
        self._client.connect_async(self.host, self.port, keepalive=60)
        self._client.loop_start()

    def close(self) -> None:
        self._client.disconnect()
        self._client.loop_stop()

    async def publish(self, topic: str, payload: str) -> None:
        """Publish and wait for the client to hand the message off."""

        if not self._connected.is_set():
            logger.info("MQTT client disconnected; waiting for the network loop to reconnect")
            connected = await asyncio.to_thread(self._connected.wait, self.publish_timeout)
            if not connected:
                raise PublishError(
                    f"MQTT broker {self.host}:{self.port} not connected after {self.publish_timeout}s"
                )

        info = self._client.publish(topic, payload.encode("utf-8"), qos=self.qos, retain=self.retain)
        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            raise PublishError(f"MQTT publish to {topic} failed: {mqtt.error_string(info.rc)}")

        try:
            await asyncio.to_thread(info.wait_for_publish, self.publish_timeout)
        except (RuntimeError, ValueError) as exc:
            raise PublishError(f"MQTT publish to {topic} failed: {exc}") from exc

        if not info.is_published():
            raise PublishError(f"MQTT publish to {topic} timed out")

        logger.debug("Published %s bytes to %s", len(payload), topic)


__all__ = ["MQTTClient"]
