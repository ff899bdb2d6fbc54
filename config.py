"""Configuration for the document Q&A client."""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx
from dotenv import load_dotenv
from pydantic import ValidationInfo, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from constants import (
    DEFAULT_API_URL,
    DEFAULT_EXPONENTIAL_BASE,
    DEFAULT_INITIAL_DELAY,
    DEFAULT_MAX_DELAY,
    DEFAULT_MAX_RETRIES,
    DEFAULT_TIMEOUT_SECONDS,
    MAX_FILE_SIZE,
)
from utils.retry import RetryPolicy

logger = logging.getLogger("docqa_client")

_DELAY_DEFAULTS = {
    "retry_initial_delay": DEFAULT_INITIAL_DELAY,
    "retry_max_delay": DEFAULT_MAX_DELAY,
}


def normalize_api_url(value: str) -> str:
    """Return a base URL with a scheme and without a trailing slash.

    Hosts given without a scheme (``api.example.com``) are assumed to be
    served over HTTPS.
    """
    base = value.strip()
    if "://" not in base:
        base = f"https://{base}"
    base = base.rstrip("/")
    try:
        url = httpx.URL(base)
    except Exception as exc:  # pylint: disable=broad-exception-caught
        raise ValueError(f"DOCQA_API_URL is not a valid URL: {value}") from exc
    if not url.host:
        raise ValueError(f"DOCQA_API_URL must include a host: {value}")
    return base


class Settings(BaseSettings):
    """Client configuration loaded from environment variables.

    All environment variables are expected to be prefixed with ``DOCQA_``.
    For example, ``DOCQA_API_URL`` points the client at a different backend.
    Instances are frozen; use ``model_copy(update=...)`` for overrides.
    """

    model_config = SettingsConfigDict(
        extra="ignore",
        env_prefix="DOCQA_",
        frozen=True,
    )

    api_url: str = DEFAULT_API_URL
    request_timeout: Optional[float] = DEFAULT_TIMEOUT_SECONDS
    max_retries: int = DEFAULT_MAX_RETRIES
    retry_initial_delay: float = DEFAULT_INITIAL_DELAY
    retry_max_delay: float = DEFAULT_MAX_DELAY
    retry_exponential_base: float = DEFAULT_EXPONENTIAL_BASE
    max_upload_bytes: int = MAX_FILE_SIZE
    verify_ssl: bool = True
    max_connections: int = 10
    debug: bool = False

    @field_validator("api_url", mode="before")
    @classmethod
    def _normalize_api_url(cls, value: Any) -> str:
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_API_URL
        if not isinstance(value, str):
            raise ValueError("API_URL must be a string URL")
        return normalize_api_url(value)

    @field_validator("request_timeout", mode="before")
    @classmethod
    def _validate_timeout(cls, value: Any) -> Optional[float]:
        if value is None or value == "":
            return DEFAULT_TIMEOUT_SECONDS
        try:
            parsed = float(value)
        except (TypeError, ValueError) as exc:
            raise ValueError("REQUEST_TIMEOUT must be a number") from exc
        if parsed == 0:
            return None
        if parsed < 0.1:
            raise ValueError("REQUEST_TIMEOUT must be >= 0.1 or 0 for no limit")
        return parsed

    @field_validator("max_retries", mode="before")
    @classmethod
    def _normalize_retries(cls, value: Any) -> int:
        if value is None or value == "":
            return DEFAULT_MAX_RETRIES
        try:
            parsed = int(value)
        except (TypeError, ValueError) as exc:
            raise ValueError("MAX_RETRIES must be an integer") from exc
        if parsed < 0:
            raise ValueError("MAX_RETRIES must be >= 0")
        return parsed

    @field_validator("retry_initial_delay", "retry_max_delay", mode="before")
    @classmethod
    def _normalize_delay(cls, value: Any, info: ValidationInfo) -> float:
        if value is None or value == "":
            return _DELAY_DEFAULTS[info.field_name]
        try:
            parsed = float(value)
        except (TypeError, ValueError) as exc:
            raise ValueError("Retry delays must be numbers") from exc
        if parsed < 0:
            raise ValueError("Retry delays must be >= 0")
        return parsed

    @field_validator("retry_exponential_base", mode="before")
    @classmethod
    def _normalize_base(cls, value: Any) -> float:
        if value is None or value == "":
            return DEFAULT_EXPONENTIAL_BASE
        try:
            parsed = float(value)
        except (TypeError, ValueError) as exc:
            raise ValueError("RETRY_EXPONENTIAL_BASE must be a number") from exc
        if parsed <= 1:
            raise ValueError("RETRY_EXPONENTIAL_BASE must be > 1")
        return parsed

    @field_validator("max_upload_bytes", mode="before")
    @classmethod
    def _normalize_max_upload_bytes(cls, value: Any) -> int:
        if value is None or value == "":
            return MAX_FILE_SIZE
        try:
            parsed = int(value)
        except (TypeError, ValueError) as exc:
            raise ValueError("MAX_UPLOAD_BYTES must be an integer") from exc
        if parsed <= 0:
            raise ValueError("MAX_UPLOAD_BYTES must be > 0")
        return parsed

    @field_validator("max_connections", mode="before")
    @classmethod
    def _normalize_connection_limit(cls, value: Any) -> int:
        if value is None or value == "":
            return 0
        try:
            parsed = int(value)
        except (TypeError, ValueError) as exc:
            raise ValueError("MAX_CONNECTIONS must be an integer") from exc
        if parsed < 0:
            raise ValueError("MAX_CONNECTIONS must be >= 0")
        return parsed

    @field_validator("debug", mode="before")
    @classmethod
    def _parse_debug(cls, value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if value is None:
            return False
        if isinstance(value, (int, float)):
            return bool(value)
        if isinstance(value, str):
            return value.strip().lower() in {"1", "true", "yes", "y", "on"}
        return False

    @model_validator(mode="after")
    def _check_delays(self) -> "Settings":
        if self.retry_max_delay < self.retry_initial_delay:
            raise ValueError("RETRY_MAX_DELAY must be >= RETRY_INITIAL_DELAY")
        return self

    def retry_policy(self) -> RetryPolicy:
        """Return the default retry policy described by these settings."""
        return RetryPolicy(
            max_retries=self.max_retries,
            initial_delay=self.retry_initial_delay,
            max_delay=self.retry_max_delay,
            exponential_base=self.retry_exponential_base,
        )


def load_settings(**overrides: Any) -> Settings:
    """Load settings from the environment (and a local ``.env`` file).

    Keyword overrides take precedence over environment values.
    """
    load_dotenv()
    try:
        settings = Settings(**overrides)
    except ValueError as exc:
        logger.error("Invalid configuration: %s", exc)
        raise
    if "api_url" not in settings.model_fields_set:
        logger.warning(
            "Missing environment variables: DOCQA_API_URL. "
            "Using default values. This may cause issues in production."
        )
    return settings
