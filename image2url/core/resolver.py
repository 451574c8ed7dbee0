"""Turn a tool request into validated image bytes."""

import asyncio
import mimetypes
import stat
from pathlib import Path, PurePosixPath
from typing import Optional
from urllib.parse import unquote

import httpx
import structlog

from ..config.settings import Settings
from ..exceptions import (
    FetchFailedError,
    NotAFileError,
    NotFoundError,
    TooLargeError,
    UnsupportedTypeError,
)
from .models import ImageSource, LocalRequest, Origin, SourceRequest
from .snippets import format_bytes

logger = structlog.get_logger()

# Preferred extension -> MIME mapping; anything else goes through mimetypes
IMAGE_EXTENSIONS = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".bmp": "image/bmp",
    ".svg": "image/svg+xml",
    ".ico": "image/x-icon",
    ".avif": "image/avif",
}

DEFAULT_MIME_TYPE = "application/octet-stream"
REMOTE_PLACEHOLDER_NAME = "remote-image"


def guess_mime_type(name: str) -> Optional[str]:
    """Look up a MIME type from a file name or URL path extension."""
    ext = PurePosixPath(name).suffix.lower()
    if ext in IMAGE_EXTENSIONS:
        return IMAGE_EXTENSIONS[ext]
    mime_type, _ = mimetypes.guess_type(name, strict=False)
    return mime_type


def _ensure_image(mime_type: str, label: str) -> None:
    if not mime_type.startswith("image/"):
        raise UnsupportedTypeError(
            f"Only image {label} are supported (detected {mime_type}).",
            mime_type=mime_type,
        )


def read_local_file(raw_path: str, settings: Settings) -> ImageSource:
    """Load and validate a local image file.

    Relative paths resolve against the process working directory. The size
    ceiling is checked from ``stat`` before any bytes are read.
    """
    try:
        path = Path(raw_path).expanduser()
    except RuntimeError as e:
        # Unknown user in ~user
        raise NotFoundError(f"Cannot resolve home directory in {raw_path!r}") from e
    if not path.is_absolute():
        path = Path.cwd() / path

    try:
        st = path.stat()
    except FileNotFoundError as e:
        raise NotFoundError(f"File not found: {path}") from e
    except OSError as e:
        raise NotFoundError(f"Cannot access {path}: {e.strerror or e}") from e
    except ValueError as e:
        # Embedded NUL or unencodable characters
        raise NotFoundError(f"Invalid file path {raw_path!r}: {e}") from e

    if not stat.S_ISREG(st.st_mode):
        raise NotAFileError("Path is not a file.")

    if st.st_size > settings.max_bytes:
        raise TooLargeError(
            f"File is too large. Limit: {format_bytes(settings.max_bytes)}, "
            f"got {format_bytes(st.st_size)}",
            limit=settings.max_bytes,
            size=st.st_size,
        )

    mime_type = guess_mime_type(path.name) or DEFAULT_MIME_TYPE
    _ensure_image(mime_type, "files")

    try:
        data = path.read_bytes()
    except IsADirectoryError as e:
        raise NotAFileError("Path is not a file.") from e
    except OSError as e:
        raise NotFoundError(f"Cannot read {path}: {e.strerror or e}") from e
    # File may have grown between stat and read
    if len(data) > settings.max_bytes:
        raise TooLargeError(
            f"File is too large. Limit: {format_bytes(settings.max_bytes)}, "
            f"got {format_bytes(len(data))}",
            limit=settings.max_bytes,
            size=len(data),
        )

    logger.info(
        "Resolved local image",
        path=str(path),
        mime_type=mime_type,
        size=len(data),
    )
    return ImageSource(
        data=data,
        original_name=path.name,
        mime_type=mime_type,
        size=len(data),
        origin=Origin.LOCAL,
    )


def _declared_length(value: Optional[str]) -> Optional[int]:
    if not value:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


def _content_type(header: Optional[str]) -> Optional[str]:
    """Strip parameters such as ``; charset=...`` from a content-type."""
    if not header:
        return None
    return header.split(";", 1)[0].strip().lower() or None


def _remote_name(url: httpx.URL) -> str:
    name = unquote(PurePosixPath(url.path).name)
    return name or REMOTE_PLACEHOLDER_NAME


async def fetch_remote_image(
    url: str, settings: Settings, client: httpx.AsyncClient
) -> ImageSource:
    """Download and validate a remote image.

    A declared ``content-length`` over the ceiling aborts before the body is
    read; the actual byte count is checked again once the body is in memory.
    The whole fetch, body included, must finish within ``timeout_ms``.
    """
    limit = format_bytes(settings.max_bytes)
    try:
        async with asyncio.timeout(settings.timeout_seconds):
            async with client.stream(
                "GET", url, follow_redirects=True
            ) as response:
                if not response.is_success:
                    raise FetchFailedError(
                        f"Failed to fetch remote image ({response.status_code}).",
                        status_code=response.status_code,
                    )

                declared = _declared_length(response.headers.get("content-length"))
                if declared is not None and declared > settings.max_bytes:
                    raise TooLargeError(
                        f"Remote image exceeds limit. Limit: {limit}, "
                        f"reported {format_bytes(declared)}",
                        limit=settings.max_bytes,
                        size=declared,
                    )

                data = await response.aread()
                header_type = _content_type(response.headers.get("content-type"))
                final_url = response.url
    except TimeoutError as e:
        raise FetchFailedError(
            f"Timed out fetching remote image after {settings.timeout_ms} ms."
        ) from e
    except httpx.HTTPError as e:
        raise FetchFailedError(
            f"Failed to fetch remote image: {str(e) or type(e).__name__}"
        ) from e

    if len(data) > settings.max_bytes:
        raise TooLargeError(
            f"Remote image exceeds limit. Limit: {limit}, got {format_bytes(len(data))}",
            limit=settings.max_bytes,
            size=len(data),
        )

    request_url = httpx.URL(url)
    mime_type = (
        header_type or guess_mime_type(request_url.path) or DEFAULT_MIME_TYPE
    )
    _ensure_image(mime_type, "content types")

    logger.info(
        "Fetched remote image",
        url=url,
        final_url=str(final_url),
        mime_type=mime_type,
        size=len(data),
    )
    return ImageSource(
        data=data,
        original_name=_remote_name(request_url),
        mime_type=mime_type,
        size=len(data),
        origin=Origin.REMOTE,
    )


async def resolve_source(
    request: SourceRequest, settings: Settings, client: httpx.AsyncClient
) -> ImageSource:
    """Acquire image bytes for either request variant."""
    if isinstance(request, LocalRequest):
        return read_local_file(request.path, settings)
    return await fetch_remote_image(request.url, settings, client)
