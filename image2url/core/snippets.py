"""Embed snippets for a hosted image URL."""

from .models import SnippetSet

_HTML_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#39;",
}


def escape_html(value: str) -> str:
    """Entity-escape ``& < > " '``."""
    return "".join(_HTML_ESCAPES.get(ch, ch) for ch in value)


def build_snippets(url: str, alt: str) -> SnippetSet:
    """Build the four snippet representations.

    Only the HTML ``alt`` attribute is escaped. The URL is used verbatim in
    every format since it comes straight from the hosting endpoint.
    """
    return SnippetSet(
        url=url,
        markdown=f"![{alt}]({url})",
        html=f'<img src="{url}" alt="{escape_html(alt)}" />',
        bbcode=f"[img]{url}[/img]",
    )


def format_bytes(size: int) -> str:
    """Human-readable 1024-based size: ``512 B``, ``1.5 KB``, ``2.00 MB``."""
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.2f} MB"
