"""Data carried through a single upload invocation."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Union


class Origin(str, Enum):
    """Where the image bytes came from."""

    LOCAL = "local"
    REMOTE = "remote"


class OutputFormat(str, Enum):
    """Which snippet lines to include in the text rendering."""

    ALL = "all"
    MARKDOWN = "markdown"
    HTML = "html"
    URL = "url"
    BBCODE = "bbcode"


@dataclass(frozen=True)
class LocalRequest:
    """Upload a file from the local filesystem."""

    path: str


@dataclass(frozen=True)
class RemoteRequest:
    """Fetch an image over HTTP(S) and re-upload it."""

    url: str


SourceRequest = Union[LocalRequest, RemoteRequest]


@dataclass(frozen=True)
class ImageSource:
    """Validated image bytes ready for upload."""

    data: bytes
    original_name: str
    mime_type: str
    size: int
    origin: Origin

    @property
    def stem(self) -> str:
        return Path(self.original_name).stem


@dataclass(frozen=True)
class UploadResult:
    """What the hosting endpoint told us about the stored image."""

    hosted_url: str
    uploaded_at: Optional[str] = None


@dataclass(frozen=True)
class SnippetSet:
    url: str
    markdown: str
    html: str
    bbcode: str


@dataclass(frozen=True)
class ResponseRecord:
    """Final structured output of a successful upload."""

    url: str
    markdown: str
    html: str
    bbcode: str
    alt: str
    filename: str
    mime_type: str
    size: int
    origin: Origin
    upload_endpoint: str
    uploaded_at: str

    def to_structured(self) -> Dict[str, Any]:
        """Serialize with the camelCase keys of the tool's output schema."""
        return {
            "url": self.url,
            "markdown": self.markdown,
            "html": self.html,
            "bbcode": self.bbcode,
            "alt": self.alt,
            "filename": self.filename,
            "mimeType": self.mime_type,
            "size": self.size,
            "source": self.origin.value,
            "uploadEndpoint": self.upload_endpoint,
            "uploadedAt": self.uploaded_at,
        }
