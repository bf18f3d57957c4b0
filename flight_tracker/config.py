"""Configuration settings for the flight tracker."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from flight_tracker.exceptions import ConfigError

logger = logging.getLogger("flight_tracker.config")


def _get_bool(env_var: str, default: bool = False) -> bool:
    """Parse an environment variable into a boolean with a default."""

    value = os.getenv(env_var)
    if value is None:
        return default

    return value.lower() in {"1", "true", "yes", "on"}


@lru_cache(maxsize=None)
def get_ssm_parameter(name: str) -> str:
    """Fetch a decrypted value from AWS SSM Parameter Store.

    Values are cached in-memory so repeated startups within one process do
    not hit SSM again. Any failure is reported as a ``ConfigError`` so the
    process fails fast before entering the polling loop.
    """

    client = boto3.client(
        "ssm",
        region_name=os.getenv("AWS_REGION") or os.getenv("AWS_DEFAULT_REGION") or "us-east-1",
    )
    try:
        response = client.get_parameter(Name=name, WithDecryption=True)
        value = response.get("Parameter", {}).get("Value")
    except (ClientError, BotoCoreError) as exc:  # pragma: no cover - AWS error passthrough
        logger.error("Failed to load %s from SSM: %s", name, exc)
        raise ConfigError(f"Unable to load {name} from SSM") from exc

    if not value:
        logger.error("Received empty value for %s from SSM", name)
        raise ConfigError(f"{name} is empty in SSM")

    return value


@dataclass
class Settings:
    """Application configuration loaded from environment variables."""

    flight_tracker_env: str = os.getenv("FLIGHT_TRACKER_ENV", "local")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "flight_tracker.log")

    # Monitored point
    latitude: float = float(os.getenv("LATITUDE", "0"))
    longitude: float = float(os.getenv("LONGITUDE", "0"))
    area_nautical_miles: int = int(os.getenv("AREA_NAUTICAL_MILES", "3"))

    # Scheduling
    loop_interval_seconds: float = float(os.getenv("LOOP_INTERVAL_SECONDS", "30"))
    weather_update_interval_seconds: float = float(
        os.getenv("WEATHER_UPDATE_INTERVAL_SECONDS", "1800")
    )

    # Aircraft positions (airplanes.live)
    adsb_base_url: str = os.getenv("AIRPLANES_LIVE_BASE_URL", "https://api.airplanes.live")
    adsb_timeout: float = float(os.getenv("ADSB_TIMEOUT", "10.0"))

    # Flight routes (FlightAware AeroAPI)
    flightaware_base_url: str = os.getenv(
        "FLIGHTAWARE_BASE_URL", "https://aeroapi.flightaware.com"
    )
    flightaware_timeout: float = float(os.getenv("FLIGHTAWARE_TIMEOUT", "10.0"))
    flightaware_api_key: str = os.getenv("FLIGHTAWARE_API_KEY", "")
    flightaware_api_key_ssm_param: str | None = os.getenv("FLIGHTAWARE_API_KEY_SSM_PARAM")
    flight_cache_ttl_seconds: float = float(os.getenv("FLIGHT_CACHE_TTL_SECONDS", "86400"))

    # Weather (Open-Meteo)
    weather_base_url: str = os.getenv(
        "WEATHER_BASE_URL", "https://api.open-meteo.com/v1/forecast"
    )
    weather_timeout: float = float(os.getenv("WEATHER_TIMEOUT", "10.0"))

    # Message bus
    mqtt_broker_url: str = os.getenv("MQTT_BROKER_URL", "")
    mqtt_topic_prefix: str = os.getenv("MQTT_TOPIC_PREFIX", "flight_tracker")
    mqtt_qos: int = int(os.getenv("MQTT_QOS", "0"))
    mqtt_retain: bool = _get_bool("MQTT_RETAIN", default=False)
    mqtt_publish_timeout: float = float(os.getenv("MQTT_PUBLISH_TIMEOUT", "10.0"))

    def validate(self) -> None:
        """Fail fast when required settings are missing.

        The FlightAware key may come from SSM when only the parameter name is
        configured; it is resolved here so later lookups never block.
        """

        if not self.flightaware_api_key and self.flightaware_api_key_ssm_param:
            self.flightaware_api_key = get_ssm_parameter(self.flightaware_api_key_ssm_param)

        missing = []
        if not self.flightaware_api_key:
            missing.append("FLIGHTAWARE_API_KEY")
        if not self.mqtt_broker_url:
            missing.append("MQTT_BROKER_URL")
        if missing:
            raise ConfigError(f"{', '.join(missing)} is not set")

        if self.latitude == 0 or self.longitude == 0:
            logger.warning("LATITUDE and LONGITUDE environment variables should be set")


settings = Settings()


def configure_logging(config: Settings | None = None) -> None:
    """Send log records to the console and the configured log file."""

    config = config or settings
    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler(config.log_file),
        ],
    )


__all__ = ["settings", "Settings", "configure_logging", "get_ssm_parameter"]
