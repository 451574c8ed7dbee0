"""MCP server exposing the ``upload_image`` tool.

Runs as a stdio transport server. The tool accepts a local file path or a
remote image URL, uploads the bytes to the configured image2url endpoint and
returns the direct URL plus Markdown, HTML and BBCode snippets, both as text
and as structured content.
"""

import sys
from typing import Annotated, List, Literal, Optional

import httpx
import structlog
from mcp.server.fastmcp import FastMCP
from mcp.types import CallToolResult, TextContent
from mcp.types import Tool as MCPTool
from pydantic import BaseModel, Field

from .. import __version__
from ..config.loader import load_config
from ..config.settings import Settings
from ..core.models import OutputFormat
from ..core.pipeline import (
    UploadFailure,
    UploadOutcome,
    build_request,
    run_upload,
)
from ..core.snippets import format_bytes
from ..exceptions import ConfigurationError, InvalidRequestError
from ..utils.logging import configure_logging

logger = structlog.get_logger()

SERVER_NAME = "mcp-server-image2url"

INSTRUCTIONS = (
    'One-command setup: add {"command": "mcp-server-image2url"} to your MCP '
    "client. No API key needed; default endpoint uses IP-based free quota at "
    "image2url.com. Override with IMAGE2URL_BASE_URL or IMAGE2URL_UPLOAD_URL "
    "when self-hosting."
)

FormatName = Literal["all", "markdown", "html", "url", "bbcode"]

UPLOAD_TOOL_NAME = "upload_image"


class UploadImageOutput(BaseModel):
    """Structured content returned by a successful ``upload_image`` call."""

    url: str
    markdown: str
    html: str
    bbcode: str
    alt: Optional[str] = None
    filename: str
    mimeType: str
    size: int
    source: Literal["local", "remote"]
    uploadEndpoint: str
    uploadedAt: str


class Image2UrlServer(FastMCP):
    """FastMCP server that advertises the ``upload_image`` output schema.

    Failures come back as ``isError`` results without structured content, so
    the schema is attached to the tool listing rather than enforced by
    FastMCP on every return value.
    """

    async def list_tools(self) -> List[MCPTool]:
        tools = await super().list_tools()
        for tool in tools:
            if tool.name == UPLOAD_TOOL_NAME:
                tool.outputSchema = UploadImageOutput.model_json_schema()
        return tools


def to_call_tool_result(outcome: UploadOutcome) -> CallToolResult:
    """Map a pipeline outcome onto the MCP tool result envelope."""
    if isinstance(outcome, UploadFailure):
        return CallToolResult(
            content=[TextContent(type="text", text=outcome.text)],
            isError=True,
        )
    return CallToolResult(
        content=[TextContent(type="text", text=outcome.text)],
        structuredContent=UploadImageOutput.model_validate(
            outcome.record.to_structured()
        ).model_dump(),
    )


async def handle_upload_image(
    settings: Settings,
    path: Optional[str] = None,
    url: Optional[str] = None,
    alt: Optional[str] = None,
    output_format: str = "all",
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> CallToolResult:
    """Validate tool arguments and run one upload."""
    try:
        request = build_request(path, url)
        fmt = OutputFormat(output_format)
    except InvalidRequestError as e:
        return to_call_tool_result(UploadFailure(kind=e.kind, message=str(e)))
    except ValueError:
        failure = UploadFailure(
            kind=InvalidRequestError.kind,
            message=f"Unknown format '{output_format}'.",
        )
        return to_call_tool_result(failure)

    outcome = await run_upload(
        request, settings, alt=alt, output_format=fmt, transport=transport
    )
    return to_call_tool_result(outcome)


def create_server(settings: Settings) -> Image2UrlServer:
    """Create the FastMCP server bound to ``settings``."""
    mcp = Image2UrlServer(SERVER_NAME, instructions=INSTRUCTIONS)

    @mcp.tool(
        name=UPLOAD_TOOL_NAME,
        structured_output=False,
        title="Upload image to image2url",
        description=(
            "Upload a local file or remote image URL to image2url.com and get "
            "ready-to-paste snippets."
        ),
    )
    async def upload_image(
        path: Annotated[
            Optional[str], Field(description="Local image file path to upload.")
        ] = None,
        url: Annotated[
            Optional[str],
            Field(description="Remote image URL to fetch and re-upload."),
        ] = None,
        alt: Annotated[
            Optional[str], Field(description="Alt text for generated snippets.")
        ] = None,
        format: Annotated[
            FormatName,
            Field(
                description="Which snippet format to highlight in the text response."
            ),
        ] = "all",
    ) -> CallToolResult:
        return await handle_upload_image(
            settings, path=path, url=url, alt=alt, output_format=format
        )

    return mcp


def main() -> None:
    """Console entry point."""
    try:
        settings = load_config()
    except ConfigurationError as e:
        print(f"Failed to start image2url MCP server: {e}", file=sys.stderr)
        sys.exit(1)

    configure_logging(settings)
    server = create_server(settings)
    logger.info(
        f"{SERVER_NAME} {__version__} ready on stdio -> "
        f"{settings.upload_endpoint} (limit {format_bytes(settings.max_bytes)})"
    )
    try:
        server.run(transport="stdio")
    except Exception as e:
        logger.error("Failed to start image2url MCP server", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
