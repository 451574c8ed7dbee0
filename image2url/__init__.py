"""image2url MCP server.

Uploads a local image file or a remote image URL to an image2url-compatible
hosting endpoint and returns ready-to-paste Markdown, HTML and BBCode snippets
over the Model Context Protocol (stdio transport).
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__: str = version("mcp-server-image2url")
except PackageNotFoundError:
    # Source checkout that was never installed
    __version__ = "0.0.0-dev"
