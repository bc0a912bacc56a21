"""Runtime configuration read from environment variables."""

import os
from typing import Mapping

from pydantic import BaseModel, Field, ValidationError

from api_doc_agent.loader import DEFAULT_TIMEOUT
from api_doc_agent.parser.schema import MAX_SCHEMA_DEPTH

ENV_SOURCE = "OPENAPI_JSON"
ENV_MAX_DEPTH = "OPENAPI_MAX_SCHEMA_DEPTH"
ENV_TIMEOUT = "OPENAPI_REQUEST_TIMEOUT"


class ConfigError(ValueError):
    """An environment variable holds a value that cannot be used."""


class Config(BaseModel):
    openapi_json: str | None = None  # URL or file path of the document
    max_schema_depth: int = Field(default=MAX_SCHEMA_DEPTH, ge=0)
    request_timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)


def load_config(env: Mapping[str, str] | None = None) -> Config:
    """Build a Config from ``env`` (defaults to ``os.environ``).

    Blank variables are treated as unset.
    """
    if env is None:
        env = os.environ

    values = {}
    for key, field in (
        (ENV_SOURCE, "openapi_json"),
        (ENV_MAX_DEPTH, "max_schema_depth"),
        (ENV_TIMEOUT, "request_timeout"),
    ):
        raw = env.get(key, "").strip()
        if raw:
            values[field] = raw

    try:
        return Config(**values)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
