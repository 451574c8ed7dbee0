"""Assemble the structured record and the text rendering."""

from datetime import datetime, timezone
from typing import List, Optional

from .models import ImageSource, OutputFormat, ResponseRecord, UploadResult
from .snippets import build_snippets, format_bytes

DEFAULT_ALT = "image"


def resolve_alt(alt: Optional[str], source: ImageSource) -> str:
    """Explicit alt text, else the filename stem, else ``image``."""
    if alt and alt.strip():
        return alt.strip()
    return source.stem.strip() or DEFAULT_ALT


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def assemble_record(
    source: ImageSource,
    result: UploadResult,
    upload_endpoint: str,
    alt: Optional[str] = None,
) -> ResponseRecord:
    resolved_alt = resolve_alt(alt, source)
    snippets = build_snippets(result.hosted_url, resolved_alt)
    return ResponseRecord(
        url=snippets.url,
        markdown=snippets.markdown,
        html=snippets.html,
        bbcode=snippets.bbcode,
        alt=resolved_alt,
        filename=source.original_name,
        mime_type=source.mime_type,
        size=source.size,
        origin=source.origin,
        upload_endpoint=upload_endpoint,
        uploaded_at=result.uploaded_at or _utc_now_iso(),
    )


def render_text(record: ResponseRecord, output_format: OutputFormat) -> str:
    """Render the record as prose.

    Direct URL, source and endpoint lines are always present. ``all`` adds
    every snippet line; a specific format adds only its own line (``url``
    adds none beyond the direct URL).
    """
    show_all = output_format is OutputFormat.ALL
    lines: List[str] = [f"Direct URL: {record.url}"]
    if show_all or output_format is OutputFormat.MARKDOWN:
        lines.append(f"Markdown: {record.markdown}")
    if show_all or output_format is OutputFormat.HTML:
        lines.append(f"HTML: {record.html}")
    if show_all or output_format is OutputFormat.BBCODE:
        lines.append(f"BBCode: {record.bbcode}")
    lines.append(
        f"Source: {record.origin.value} ({record.filename}, "
        f"{format_bytes(record.size)}, {record.mime_type})"
    )
    lines.append(f"Endpoint: {record.upload_endpoint}")
    return "\n".join(lines)
