"""
Body Resolver — picks the canonical plain-text body from decoded parts.

Selection policy:
    1. First text/plain part with non-blank text
    2. Else first text/html part, converted with the HTML fallback
    3. Else first (blank) text/plain part
    4. No text parts at all → empty Body
"""
import logging
from typing import Optional, Sequence

from mailintel.mime.html_text import html_to_text
from mailintel.models.email import Body
from mailintel.models.mime import BodyPart, ContentType

logger = logging.getLogger(__name__)


def resolve_body(
    parts: Sequence[BodyPart],
    attachment_count: int = 0,
    include_link_targets: bool = True,
) -> Body:
    """
    Resolve the body of a message.

    Args:
        parts: Decoded text parts in MIME walk order.
        attachment_count: Non-text / attachment parts seen by the decoder.
        include_link_targets: Append link targets when rendering HTML.

    Returns:
        Body whose ``rendered_text`` is always plain text with LF line endings.
    """
    plain_parts = [p for p in parts if p.content_type == ContentType.PLAIN_TEXT.value]
    html_parts = [p for p in parts if p.content_type == ContentType.HTML.value]
    first_html: Optional[str] = html_parts[0].text if html_parts else None
    has_attachments = attachment_count > 0

    for part in plain_parts:
        if part.text.strip():
            return Body(
                original=part.text,
                content_type=ContentType.PLAIN_TEXT,
                rendered_text=_normalize_newlines(part.text),
                html=first_html,
                has_attachments=has_attachments,
            )

    if first_html is not None:
        logger.debug("No usable text/plain part, rendering HTML body (%d chars)", len(first_html))
        return Body(
            original=first_html,
            content_type=ContentType.HTML,
            rendered_text=html_to_text(first_html, include_link_targets=include_link_targets),
            html=first_html,
            has_attachments=has_attachments,
        )

    if plain_parts:
        text = plain_parts[0].text
        return Body(
            original=text,
            content_type=ContentType.PLAIN_TEXT,
            rendered_text=_normalize_newlines(text),
            has_attachments=has_attachments,
        )

    return Body(has_attachments=has_attachments)


def _normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")
