"""Configuration settings for the image2url MCP server.

All values come from ``IMAGE2URL_*`` environment variables (or a local
``.env`` file) and are optional.
"""

from typing import Any, Optional

from pydantic import Field, SecretStr, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .. import __version__

DEFAULT_BASE_URL = "https://www.image2url.com"
DEFAULT_UPLOAD_PATH = "/api/upload"
DEFAULT_MAX_BYTES = 2 * 1024 * 1024  # hosted service limit
DEFAULT_TIMEOUT_MS = 20_000


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    base_url: str = Field(
        default=DEFAULT_BASE_URL, description="Hosting service base URL"
    )
    upload_path: str = Field(
        default=DEFAULT_UPLOAD_PATH, description="Upload path appended to base_url"
    )
    upload_url: Optional[str] = Field(
        default=None, description="Full upload URL, overrides base_url + upload_path"
    )
    max_bytes: int = Field(
        default=DEFAULT_MAX_BYTES, description="Maximum image size in bytes"
    )
    timeout_ms: int = Field(
        default=DEFAULT_TIMEOUT_MS, description="Per-request timeout in milliseconds"
    )
    api_token: Optional[SecretStr] = Field(
        default=None, description="Optional bearer token for the upload endpoint"
    )
    debug: bool = Field(default=False, description="Enable debug logging")

    model_config = SettingsConfigDict(
        env_prefix="IMAGE2URL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @field_validator("base_url", mode="before")
    @classmethod
    def sanitize_base_url(cls, v: Any) -> str:
        """Strip trailing slashes and default to https when no scheme is given."""
        if v is None or not str(v).strip():
            return DEFAULT_BASE_URL
        trimmed = str(v).strip().rstrip("/")
        if not trimmed.startswith(("http://", "https://")):
            return f"https://{trimmed}"
        return trimmed

    @field_validator("upload_path", mode="before")
    @classmethod
    def normalize_upload_path(cls, v: Any) -> str:
        if v is None or not str(v).strip():
            return DEFAULT_UPLOAD_PATH
        path = str(v).strip()
        if not path.startswith("/"):
            return f"/{path}"
        return path

    @field_validator("upload_url", "api_token", mode="before")
    @classmethod
    def blank_as_unset(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("max_bytes", "timeout_ms", mode="before")
    @classmethod
    def positive_int_or_default(cls, v: Any, info: ValidationInfo) -> int:
        """Unparseable or non-positive values fall back to the default."""
        default = (
            DEFAULT_MAX_BYTES if info.field_name == "max_bytes" else DEFAULT_TIMEOUT_MS
        )
        try:
            value = int(str(v).strip())
        except (TypeError, ValueError):
            return default
        return value if value > 0 else default

    @field_validator("debug", mode="before")
    @classmethod
    def flag_or_false(cls, v: Any) -> bool:
        """Blank or unrecognised values mean off."""
        if isinstance(v, bool):
            return v
        return str(v).strip().lower() in ("1", "true", "yes", "on")

    @property
    def upload_endpoint(self) -> str:
        """Effective upload URL."""
        if self.upload_url:
            return self.upload_url.strip()
        return f"{self.base_url}{self.upload_path}"

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000

    @property
    def user_agent(self) -> str:
        return f"mcp-server-image2url/{__version__}"

    @property
    def api_token_str(self) -> Optional[str]:
        """Get bearer token as plain string."""
        return self.api_token.get_secret_value() if self.api_token else None
