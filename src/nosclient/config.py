"""Configuration loading and Pydantic models for the NOS client."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator


class NosConfig(BaseModel):
    """Client configuration: endpoint, credentials, HTTP pool, and observability.

    Instances are frozen; the client reads them once at construction.
    Validation errors surface as ``pydantic.ValidationError``.
    """

    model_config = ConfigDict(frozen=True)

    endpoint: str
    protocol: str = "http"
    access_key: str = ""
    secret_key: str = Field(default="", repr=False)

    connect_timeout: float = Field(default=30, gt=0)
    request_timeout: float = Field(default=30, gt=0)
    read_write_timeout: float = Field(default=60, gt=0)
    max_idle_connections: int = Field(default=60, gt=0)
    keepalive_expiry: float = Field(default=5.0, gt=0)

    log_level: str = "INFO"
    log_format: str = "text"
    metrics_enabled: bool = False

    @field_validator("endpoint")
    @classmethod
    def _check_endpoint(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if not value:
            raise ValueError("endpoint must not be empty")
        if "://" in value:
            raise ValueError("endpoint must be a host name without a scheme")
        return value

    @field_validator("protocol")
    @classmethod
    def _check_protocol(cls, value: str) -> str:
        value = value.lower()
        if value not in ("http", "https"):
            raise ValueError("protocol must be 'http' or 'https'")
        return value

    @field_validator("log_format")
    @classmethod
    def _check_log_format(cls, value: str) -> str:
        if value not in ("text", "json"):
            raise ValueError("log_format must be 'text' or 'json'")
        return value


def _parse_nos(data: dict[str, Any] | None) -> dict[str, Any]:
    """Parse the nos section from YAML data into a dict for Pydantic."""
    if data is None:
        return {}
    result: dict[str, Any] = {}
    for key in ("endpoint", "protocol", "access_key", "secret_key"):
        if key in data:
            result[key] = data[key]
    return result


def _parse_http(data: dict[str, Any] | None) -> dict[str, Any]:
    """Parse the http section from YAML data."""
    if data is None:
        return {}
    result: dict[str, Any] = {}
    for key in (
        "connect_timeout",
        "request_timeout",
        "read_write_timeout",
        "max_idle_connections",
        "keepalive_expiry",
    ):
        if key in data:
            result[key] = data[key]
    return result


def _parse_logging(data: dict[str, Any] | None) -> dict[str, Any]:
    """Parse the logging section from YAML data.

    Handles nested structure: logging.level -> log_level, logging.format -> log_format
    """
    if data is None:
        return {}
    result: dict[str, Any] = {}
    if "level" in data:
        result["log_level"] = data["level"]
    if "format" in data:
        result["log_format"] = data["format"]
    return result


def _parse_metrics(data: dict[str, Any] | None) -> dict[str, Any]:
    """Parse the metrics section from YAML data."""
    if data is None:
        return {}
    return {"metrics_enabled": bool(data.get("enabled", False))}


def load_config(path: Path) -> NosConfig:
    """Load a NosConfig from a YAML file.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        A fully populated NosConfig validated by Pydantic.

    Raises:
        FileNotFoundError: If the config file does not exist.
        yaml.YAMLError: If the file is not valid YAML.
        pydantic.ValidationError: If a value is missing or out of range.
    """
    with open(path, "r") as fh:
        raw: dict[str, Any] = yaml.safe_load(fh) or {}

    return NosConfig(
        **_parse_nos(raw.get("nos")),
        **_parse_http(raw.get("http")),
        **_parse_logging(raw.get("logging")),
        **_parse_metrics(raw.get("metrics")),
    )
