"""Configuration and logging setup for the Airtable client."""

import json
import logging
import os
import pathlib

import pydantic
import structlog

from .session import DEFAULT_TIMEOUT

CONFIG_ENV_VAR = "AIRTABLE_CLIENT_CONFIG_PATH"
API_KEY_ENV_VAR = "AIRTABLE_API_KEY"
BASE_URL_ENV_VAR = "AIRTABLE_BASE_URL"

DEFAULT_BASE_URL = "https://api.airtable.com/v0"


class ClientConfig(pydantic.BaseModel):
    """Configuration for an :class:`~airtable_client.client.AirtableClient`."""

    api_key: str | None = pydantic.Field(
        None,
        description="Airtable personal access token",
    )
    api_key_file: str | None = pydantic.Field(
        None,
        description="Path to file containing the access token",
    )
    base_url: str = pydantic.Field(DEFAULT_BASE_URL, description="API root URL")
    timeout: float = pydantic.Field(
        DEFAULT_TIMEOUT,
        description="Request timeout in seconds",
        gt=0,
    )
    log_level: str = pydantic.Field("INFO", description="Logging level")

    @pydantic.model_validator(mode="after")
    def check_key_source(self) -> "ClientConfig":
        if bool(self.api_key) == bool(self.api_key_file):
            msg = "exactly one of api_key or api_key_file must be set"
            raise ValueError(msg)
        return self

    def resolve_api_key(self) -> str:
        """Return the configured key, reading it from file if needed.

        Raises:
            FileNotFoundError: If api_key_file does not exist.
        """
        if self.api_key:
            return self.api_key

        token_path = pathlib.Path(self.api_key_file)
        if not token_path.exists():
            msg = f"API key file not found: {self.api_key_file}"
            raise FileNotFoundError(msg)
        return token_path.read_text().strip()


def configure_logging(log_level_name: str) -> None:
    """Configure structlog for logfmt output at the given level.

    Unknown level names fall back to INFO. Loggers are not cached, so a later
    call (e.g. another client built from a different config) takes effect for
    module-level loggers too.
    """
    log_level = getattr(logging, log_level_name.upper(), logging.INFO)
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.EventRenamer("msg"),
            structlog.processors.format_exc_info,
            structlog.processors.LogfmtRenderer(
                key_order=("timestamp", "level", "msg"),
            ),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


def load_config(config_path: str | pathlib.Path) -> ClientConfig:
    """Load a :class:`ClientConfig` from a JSON object file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is not valid JSON or not a JSON object.
        pydantic.ValidationError: If the values do not form a valid config.
    """
    path = pathlib.Path(config_path)
    if not path.is_file():
        msg = f"Configuration file not found: {path}"
        raise FileNotFoundError(msg)

    try:
        data = json.loads(path.read_text())
    except json.JSONDecodeError as exc:
        msg = (
            f"Invalid JSON in configuration file {path}: "
            f"{exc.msg} (line {exc.lineno})"
        )
        raise ValueError(msg) from exc
    if not isinstance(data, dict):
        msg = f"Configuration file {path} must contain a JSON object"
        raise ValueError(msg)  # noqa: TRY004

    return ClientConfig.model_validate(data)


def config_from_env() -> ClientConfig:
    """Load configuration from the environment.

    Uses the JSON file named by ``AIRTABLE_CLIENT_CONFIG_PATH`` when set,
    otherwise ``AIRTABLE_API_KEY`` and optionally ``AIRTABLE_BASE_URL``.
    """
    config_path = os.environ.get(CONFIG_ENV_VAR)
    if config_path:
        return load_config(config_path)

    return ClientConfig(
        api_key=os.environ.get(API_KEY_ENV_VAR),
        base_url=os.environ.get(BASE_URL_ENV_VAR, DEFAULT_BASE_URL),
    )
