"""MIME decoding collaborator backed by the stdlib ``email`` package.

Turns raw RFC 5322 bytes into a :class:`DecodedMessage`: decoded header
values (encoded words resolved, folding removed) and the text parts of the
MIME tree.  Multipart boundaries, transfer encodings and charsets are all
handled by ``email``; nothing downstream looks at MIME structure again.
"""

from __future__ import annotations

import email
import email.errors
import email.policy
import logging
import re
from email.header import decode_header, make_header
from email.message import Message
from typing import List, Tuple

from mailintel.errors import DecodeFailure
from mailintel.models.mime import BodyPart, ContentType, DecodedMessage

logger = logging.getLogger(__name__)

_FOLDING_RE = re.compile(r"\r?\n[ \t]+")
_TEXT_TYPES = {ContentType.PLAIN_TEXT.value, ContentType.HTML.value}


def decode_message(raw: bytes) -> DecodedMessage:
    """Parse raw message bytes into headers and decoded text parts.

    Parameters
    ----------
    raw:
        The complete message, header block plus body.

    Returns
    -------
    DecodedMessage
        Header pairs in document order and text parts in MIME walk order.

    Raises
    ------
    DecodeFailure
        If *raw* is not bytes, is blank, or has no header block at all.
    """
    if not isinstance(raw, (bytes, bytearray)):
        raise DecodeFailure(f"Expected raw message bytes, got {type(raw).__name__}")
    if not raw.strip():
        raise DecodeFailure("Empty message")

    try:
        msg = email.message_from_bytes(bytes(raw), policy=email.policy.default)
    except (TypeError, ValueError, IndexError) as exc:
        raise DecodeFailure(f"Unparsable message structure: {exc}") from exc

    header_items = tuple(
        (name, decode_header_value(value)) for name, value in msg.raw_items()
    )
    if not header_items:
        raise DecodeFailure("No header block found")

    body_parts, attachment_count = _collect_parts(msg)

    logger.debug(
        "Decoded message: %d headers, %d text parts, %d attachments",
        len(header_items),
        len(body_parts),
        attachment_count,
    )

    return DecodedMessage(
        header_items=header_items,
        body_parts=tuple(body_parts),
        attachment_count=attachment_count,
    )


def decode_header_value(value: str) -> str:
    """Unfold a raw header value and resolve RFC 2047 encoded words."""
    value = _FOLDING_RE.sub(" ", str(value)).strip()
    if "=?" in value:
        try:
            value = str(make_header(decode_header(value)))
        except (LookupError, UnicodeError, ValueError, email.errors.HeaderParseError) as exc:
            logger.debug("Keeping undecodable header value as-is: %s", exc)
    # Undecodable raw bytes arrive as surrogate escapes.
    return value.encode("utf-8", "surrogateescape").decode("utf-8", "replace")


def _collect_parts(msg: Message) -> Tuple[List[BodyPart], int]:
    parts: List[BodyPart] = []
    attachment_count = 0

    for part in msg.walk():
        # Skip multipart containers
        if part.is_multipart():
            continue

        if part.get_content_disposition() == "attachment":
            attachment_count += 1
            continue

        content_type = part.get_content_type()
        if content_type not in _TEXT_TYPES:
            # Binary or other content type -- counted as attachment when named
            if part.get_filename():
                attachment_count += 1
            continue

        parts.append(BodyPart(content_type=content_type, text=_part_text(part)))

    return parts, attachment_count


def _part_text(part: Message) -> str:
    try:
        content = part.get_content()
    except (LookupError, UnicodeError, ValueError) as exc:
        # Unknown or lying charset declaration: fall back to UTF-8
        logger.debug("Falling back to utf-8 for %s part: %s", part.get_content_type(), exc)
        payload = part.get_payload(decode=True) or b""
        return payload.decode("utf-8", "replace")
    if isinstance(content, bytes):
        return content.decode("utf-8", "replace")
    return str(content)
