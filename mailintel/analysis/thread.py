"""
Thread Analyzer — position of a message in its conversation.

Pure function over Message-ID / References / In-Reply-To; no cross-message
state.  Depth is 0 for a thread root, the number of References ids when
present, and 1 for a message that only names its direct parent.
"""
import re
from typing import Optional, Tuple

from mailintel.models.email import ThreadInfo

_MSG_ID_RE = re.compile(r"<[^<>]+>")
_VALID_MSG_ID_RE = re.compile(r"^<[^<>@\s]+@[^<>@\s]+>$")


def parse_references(value: Optional[str]) -> Tuple[str, ...]:
    """
    Message ids in document order, duplicates preserved.

    Angle-bracketed ids when any are present, otherwise whitespace tokens.
    """
    if not value or not value.strip():
        return ()
    bracketed = _MSG_ID_RE.findall(value)
    if bracketed:
        return tuple(bracketed)
    return tuple(value.split())


def parse_in_reply_to(value: Optional[str]) -> Optional[str]:
    if not value or not value.strip():
        return None
    bracketed = _MSG_ID_RE.findall(value)
    return bracketed[0] if bracketed else value.strip()


def is_valid_message_id(message_id: Optional[str]) -> bool:
    """RFC 5322 shape check: ``<left@right>``."""
    return bool(message_id) and bool(_VALID_MSG_ID_RE.match(message_id.strip()))


def analyze_thread(
    message_id: Optional[str],
    references: Optional[str],
    in_reply_to: Optional[str],
) -> ThreadInfo:
    refs = parse_references(references)
    parent = parse_in_reply_to(in_reply_to)

    if refs:
        depth = max(1, len(refs))
    elif parent is not None:
        depth = 1
    else:
        depth = 0

    return ThreadInfo(
        message_id=message_id.strip() if message_id and message_id.strip() else None,
        references=refs,
        in_reply_to=parent,
        depth=depth,
    )
