"""Custom exceptions for the image2url MCP server."""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Failure categories surfaced to the caller."""

    INVALID_REQUEST = "invalid_request"
    NOT_FOUND = "not_found"
    NOT_A_FILE = "not_a_file"
    TOO_LARGE = "too_large"
    UNSUPPORTED_TYPE = "unsupported_type"
    FETCH_FAILED = "fetch_failed"
    UPLOAD_FAILED = "upload_failed"
    BAD_RESPONSE = "bad_response"
    SERVER_ERROR = "server_error"
    MISSING_URL = "missing_url"
    UNEXPECTED = "unexpected"


class Image2UrlError(Exception):
    """Base exception for image2url."""

    kind: ErrorKind = ErrorKind.INVALID_REQUEST


class ConfigurationError(Image2UrlError):
    """Configuration is invalid."""


class InvalidRequestError(Image2UrlError):
    """Tool arguments are missing or malformed."""

    kind = ErrorKind.INVALID_REQUEST


class SourceError(Image2UrlError):
    """Image bytes could not be acquired or failed validation."""


class NotFoundError(SourceError):
    """Local path does not exist."""

    kind = ErrorKind.NOT_FOUND


class NotAFileError(SourceError):
    """Local path exists but is not a regular file."""

    kind = ErrorKind.NOT_A_FILE


class TooLargeError(SourceError):
    """Image exceeds the configured byte ceiling."""

    kind = ErrorKind.TOO_LARGE

    def __init__(self, message: str, limit: int, size: int):
        super().__init__(message)
        self.limit = limit
        self.size = size


class UnsupportedTypeError(SourceError):
    """Resolved MIME type is not an image type."""

    kind = ErrorKind.UNSUPPORTED_TYPE

    def __init__(self, message: str, mime_type: str):
        super().__init__(message)
        self.mime_type = mime_type


class FetchFailedError(SourceError):
    """Remote image could not be fetched."""

    kind = ErrorKind.FETCH_FAILED

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class UploadError(Image2UrlError):
    """Upload to the hosting endpoint failed."""


class UploadFailedError(UploadError):
    """Transport-level failure (connection, timeout) during upload."""

    kind = ErrorKind.UPLOAD_FAILED


class BadResponseError(UploadError):
    """Hosting endpoint returned a body that is not valid JSON."""

    kind = ErrorKind.BAD_RESPONSE

    def __init__(self, message: str, status_code: int, body: str):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ServerError(UploadError):
    """Hosting endpoint answered with a non-success status."""

    kind = ErrorKind.SERVER_ERROR

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


class MissingUrlError(UploadError):
    """Hosting endpoint answered successfully but without a URL."""

    kind = ErrorKind.MISSING_URL
