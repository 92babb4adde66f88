"""
Server configuration, read once from the environment at startup.
"""

import logging
import os
from enum import Enum
from typing import Mapping, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from mercadopago_mcp.gateway import DEFAULT_TIMEOUT


class ConfigError(Exception):
    """Startup configuration is missing or invalid."""


class Environment(str, Enum):
    SANDBOX = "sandbox"
    PRODUCTION = "production"


class ServerConfig(BaseModel):
    access_token: str = Field(min_length=1, description="Mercado Pago access token")
    environment: Environment = Field(default=Environment.SANDBOX)
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0, description="HTTP timeout in seconds")
    log_level: str = Field(default="INFO")
    otel_enabled: bool = Field(default=False)

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level: {value}")
        return level


# environment variable -> ServerConfig field
ENV_VARS = {
    "MERCADOPAGO_ACCESS_TOKEN": "access_token",
    "MERCADOPAGO_ENVIRONMENT": "environment",
    "MERCADOPAGO_TIMEOUT": "timeout",
    "LOG_LEVEL": "log_level",
    "OTEL_ENABLED": "otel_enabled",
}


def load_config(environ: Optional[Mapping[str, str]] = None) -> ServerConfig:
    """
    Build the server configuration from environment variables.

    Raises:
        ConfigError: If the access token is missing or a value is invalid
    """
    environ = os.environ if environ is None else environ

    if not environ.get("MERCADOPAGO_ACCESS_TOKEN"):
        raise ConfigError("MERCADOPAGO_ACCESS_TOKEN environment variable is required")

    values = {
        field: environ[name]
        for name, field in ENV_VARS.items()
        if environ.get(name)
    }
    if "environment" in values:
        values["environment"] = values["environment"].lower()

    try:
        return ServerConfig(**values)
    except ValidationError as e:
        problems = "; ".join(
            f"{_env_name(err['loc'][0])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigError(f"Invalid configuration: {problems}") from e


def _env_name(field: object) -> str:
    for name, mapped in ENV_VARS.items():
        if mapped == field:
            return name
    return str(field)
