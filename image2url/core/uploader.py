"""Multipart upload to the hosting endpoint."""

import asyncio
import json
from typing import Any, Dict, Optional

import httpx
import structlog

from ..config.settings import Settings
from ..exceptions import (
    BadResponseError,
    MissingUrlError,
    ServerError,
    UploadFailedError,
)
from .models import ImageSource, UploadResult

logger = structlog.get_logger()

FILE_FIELD = "file"


def build_upload_headers(settings: Settings) -> Dict[str, str]:
    headers = {"User-Agent": settings.user_agent}
    token = settings.api_token_str
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def _parse_body(response: httpx.Response) -> Dict[str, Any]:
    """Decode the JSON body; an empty body counts as an empty object."""
    text = response.text
    if not text:
        return {}
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise BadResponseError(
            f"Unexpected response from image2url: {response.status_code} {text}",
            status_code=response.status_code,
            body=text,
        ) from e
    return data if isinstance(data, dict) else {}


def _string_field(data: Dict[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    return value if isinstance(value, str) and value else None


async def upload_image(
    source: ImageSource, settings: Settings, client: httpx.AsyncClient
) -> UploadResult:
    """POST the image as ``multipart/form-data`` and return the hosted URL.

    The request, response body included, must finish within ``timeout_ms``.
    Redirects are not followed.
    """
    endpoint = settings.upload_endpoint
    files = {FILE_FIELD: (source.original_name, source.data, source.mime_type)}

    try:
        async with asyncio.timeout(settings.timeout_seconds):
            response = await client.post(
                endpoint,
                files=files,
                headers=build_upload_headers(settings),
                follow_redirects=False,
            )
    except TimeoutError as e:
        logger.warning(
            "Upload timed out", endpoint=endpoint, timeout_ms=settings.timeout_ms
        )
        raise UploadFailedError(
            f"Upload timed out after {settings.timeout_ms} ms."
        ) from e
    except httpx.HTTPError as e:
        logger.warning(
            "Upload request failed",
            endpoint=endpoint,
            error_type=type(e).__name__,
            error=str(e),
        )
        raise UploadFailedError(
            f"Upload request failed: {str(e) or type(e).__name__}"
        ) from e

    logger.debug(
        "Upload response",
        status_code=response.status_code,
        body=response.text,
    )
    data = _parse_body(response)

    if not response.is_success:
        message = (
            _string_field(data, "error")
            or response.reason_phrase
            or f"Upload failed with status {response.status_code}."
        )
        raise ServerError(message, status_code=response.status_code)

    hosted_url = _string_field(data, "url")
    if not hosted_url:
        raise MissingUrlError("image2url did not return a URL.")

    logger.info(
        "Image uploaded",
        endpoint=endpoint,
        filename=source.original_name,
        size=source.size,
        hosted_url=hosted_url,
    )
    return UploadResult(
        hosted_url=hosted_url,
        uploaded_at=_string_field(data, "uploadedAt"),
    )
