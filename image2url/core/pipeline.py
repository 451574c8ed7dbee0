"""Per-invocation pipeline: resolve, upload, format.

Components raise typed ``Image2UrlError`` subclasses; ``run_upload`` is the
one place they are caught and turned into an ``UploadFailure`` value. Any
other exception becomes an ``unexpected`` failure, so the caller always
receives exactly one of ``UploadSuccess`` or ``UploadFailure``.
"""

from dataclasses import dataclass
from typing import Optional, Union

import httpx
import structlog

from ..config.settings import Settings
from ..exceptions import ErrorKind, Image2UrlError, InvalidRequestError
from .models import (
    LocalRequest,
    OutputFormat,
    RemoteRequest,
    ResponseRecord,
    SourceRequest,
)
from .resolver import resolve_source
from .response import assemble_record, render_text
from .uploader import upload_image

logger = structlog.get_logger()

ERROR_PREFIX = "image2url upload failed"


@dataclass(frozen=True)
class UploadSuccess:
    record: ResponseRecord
    text: str


@dataclass(frozen=True)
class UploadFailure:
    kind: ErrorKind
    message: str

    @property
    def text(self) -> str:
        return f"{ERROR_PREFIX}: {self.message}"


UploadOutcome = Union[UploadSuccess, UploadFailure]


def build_request(path: Optional[str], url: Optional[str]) -> SourceRequest:
    """Pick the request variant. A non-empty path wins over a url."""
    path = path.strip() if path else None
    if path:
        return LocalRequest(path=path)

    url = url.strip() if url else None
    if not url:
        raise InvalidRequestError(
            "Provide either a local file path or a remote image URL."
        )
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL as e:
        raise InvalidRequestError(f"Invalid URL: {url}") from e
    if parsed.scheme not in ("http", "https") or not parsed.host:
        raise InvalidRequestError(f"Invalid URL: {url}")
    return RemoteRequest(url=url)


def create_client(
    settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None
) -> httpx.AsyncClient:
    """HTTP client scoped to a single invocation.

    ``httpx.Timeout`` bounds each connect/read/write step; the resolver and
    uploader add an overall deadline per request.
    """
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.timeout_seconds),
        headers={"User-Agent": settings.user_agent},
        transport=transport,
    )


async def run_upload(
    request: SourceRequest,
    settings: Settings,
    alt: Optional[str] = None,
    output_format: OutputFormat = OutputFormat.ALL,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> UploadOutcome:
    """Run one upload end to end."""
    try:
        async with create_client(settings, transport) as client:
            source = await resolve_source(request, settings, client)
            result = await upload_image(source, settings, client)
    except Image2UrlError as e:
        logger.warning(
            "Image upload failed",
            kind=e.kind.value,
            error=str(e),
            origin="local" if isinstance(request, LocalRequest) else "remote",
        )
        return UploadFailure(kind=e.kind, message=str(e))
    except Exception as e:
        logger.exception("Unexpected error during image upload", error=str(e))
        return UploadFailure(
            kind=ErrorKind.UNEXPECTED, message=str(e) or type(e).__name__
        )

    record = assemble_record(source, result, settings.upload_endpoint, alt)
    return UploadSuccess(record=record, text=render_text(record, output_format))
