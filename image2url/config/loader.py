"""Settings construction helpers."""

from typing import Any

import structlog
from pydantic import ValidationError

from ..exceptions import ConfigurationError
from .settings import Settings

logger = structlog.get_logger()


def load_config(**overrides: Any) -> Settings:
    """Build settings from the environment, applying explicit overrides."""
    try:
        settings = Settings(**overrides)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid image2url configuration: {e}") from e

    logger.debug(
        "Configuration loaded",
        upload_endpoint=settings.upload_endpoint,
        max_bytes=settings.max_bytes,
        timeout_ms=settings.timeout_ms,
        has_api_token=settings.api_token is not None,
        debug=settings.debug,
    )
    return settings


def create_test_config(**overrides: Any) -> Settings:
    """Build settings for tests without reading a .env file."""
    return Settings(_env_file=None, **overrides)  # type: ignore[call-arg]
