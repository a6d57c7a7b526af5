"""
Header Normalizer — maps the decoded header multi-map to typed fields.

Only a missing/blank From header is fatal.  Every other irregularity
degrades: absent address lists become empty tuples, malformed address
entries become bare addresses, unparsable dates are kept as raw text.
"""
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Iterable, List, Optional, Tuple

from mailintel.config.constants import FORWARD_PREFIXES, REPLY_PREFIXES
from mailintel.errors import MissingRequiredHeader
from mailintel.models.email import (
    Address,
    AuthenticationResults,
    AuthResult,
    HeaderSummary,
    Priority,
    Subject,
)
from mailintel.models.mime import HeaderMap

logger = logging.getLogger(__name__)

_ANGLE_ADDR_RE = re.compile(r"^(?P<name>.*?)<(?P<addr>[^<>]*)>", re.DOTALL)
_COMMENT_ADDR_RE = re.compile(r"^(?P<addr>\S+@\S+)\s*\((?P<comment>[^()]*)\)\s*$")
_SUBJECT_PREFIX_RE = re.compile(
    r"^\s*(?P<tag>[A-Za-z]{2,4})\s*(?:\[(?P<n1>\d+)\]|\((?P<n2>\d+)\))?\s*:\s*"
)
_AUTH_RESULT_RE = re.compile(r"\b(spf|dkim|dmarc)\s*=\s*([a-z]+)", re.IGNORECASE)

_X_PRIORITY = {
    "1": Priority.HIGHEST,
    "2": Priority.HIGH,
    "3": Priority.NORMAL,
    "4": Priority.LOW,
    "5": Priority.LOWEST,
}

_AUTH_RESULTS = {
    "pass": AuthResult.PASS,
    "fail": AuthResult.FAIL,
    "hardfail": AuthResult.FAIL,
    "softfail": AuthResult.SOFTFAIL,
    "neutral": AuthResult.NEUTRAL,
    "none": AuthResult.NONE,
}


@dataclass(frozen=True)
class NormalizedHeaders:
    """Typed view of the header block, input to every later stage."""

    from_address: Address
    to: Tuple[Address, ...] = ()
    cc: Tuple[Address, ...] = ()
    bcc: Tuple[Address, ...] = ()
    reply_to: Optional[Address] = None
    subject: Subject = field(default_factory=lambda: Subject(original="", normalized=""))
    date: Optional[datetime] = None
    date_raw: Optional[str] = None
    message_id: Optional[str] = None
    references: Optional[str] = None
    in_reply_to: Optional[str] = None
    summary: HeaderSummary = field(default_factory=HeaderSummary)


def normalize_headers(headers: HeaderMap) -> NormalizedHeaders:
    """
    Build NormalizedHeaders from the decoded header map.

    Raises:
        MissingRequiredHeader: If From is absent or yields no address.
    """
    from_value = headers.get_first("From")
    # a multi-author From keeps its first mailbox
    senders = parse_address_list((from_value,)) if from_value is not None else []
    if not senders:
        raise MissingRequiredHeader("From")
    from_address = senders[0]

    reply_to_list = parse_address_list(headers.get_all("Reply-To"))
    date, date_raw = parse_date(headers.get_first("Date"))

    references = " ".join(v for v in headers.get_all("References") if v.strip())

    return NormalizedHeaders(
        from_address=from_address,
        to=parse_address_list(headers.get_all("To")),
        cc=parse_address_list(headers.get_all("Cc")),
        bcc=parse_address_list(headers.get_all("Bcc")),
        reply_to=reply_to_list[0] if reply_to_list else None,
        subject=normalize_subject(headers.get_first("Subject") or ""),
        date=date,
        date_raw=date_raw,
        message_id=_blank_to_none(headers.get_first("Message-ID")),
        references=references or None,
        in_reply_to=_blank_to_none(headers.get_first("In-Reply-To")),
        summary=summarize_headers(headers),
    )


# ======================================================================
# Addresses
# ======================================================================

def split_address_list(value: str) -> List[str]:
    """
    Split an address header on top-level commas/semicolons.

    Commas inside quotes, angle brackets or comments do not split; RFC 5322
    group labels ("Team: a@x, b@y;") are dropped.
    """
    entries: List[str] = []
    current: List[str] = []
    in_quote = False
    escaped = False
    angle_depth = 0
    paren_depth = 0

    for ch in value:
        if escaped:
            current.append(ch)
            escaped = False
            continue
        if ch == "\\" and in_quote:
            current.append(ch)
            escaped = True
            continue
        if ch == '"':
            in_quote = not in_quote
        elif not in_quote:
            if ch == "<":
                angle_depth += 1
            elif ch == ">":
                angle_depth = max(0, angle_depth - 1)
            elif ch == "(":
                paren_depth += 1
            elif ch == ")":
                paren_depth = max(0, paren_depth - 1)
            elif angle_depth == 0 and paren_depth == 0:
                if ch in ",;":
                    entries.append("".join(current))
                    current = []
                    continue
                if ch == ":" and "@" not in "".join(current):
                    # group label
                    current = []
                    continue
        current.append(ch)

    entries.append("".join(current))
    return [e.strip() for e in entries if e.strip()]


def parse_address(entry: str) -> Optional[Address]:
    """
    Parse one mailbox. Never drops a non-empty entry: anything that is not
    a recognizable form is kept as a bare address.
    """
    entry = entry.strip()
    if not entry:
        return None

    m = _ANGLE_ADDR_RE.match(entry)
    if m:
        addr = m.group("addr").strip()
        name = _clean_display_name(m.group("name"))
        if addr:
            return Address(address=addr, display_name=name or None)
        if name:
            return Address(address=name)
        return None

    m = _COMMENT_ADDR_RE.match(entry)
    if m:
        comment = m.group("comment").strip()
        return Address(address=m.group("addr"), display_name=comment or None)

    bare = entry.strip('"').strip()
    if bare != entry:
        logger.debug("Treating malformed address entry as bare address: %r", entry)
    return Address(address=bare or entry)


def parse_address_list(values: Iterable[str]) -> Tuple[Address, ...]:
    addresses: List[Address] = []
    for value in values:
        for entry in split_address_list(value):
            addr = parse_address(entry)
            if addr is not None:
                addresses.append(addr)
    return tuple(addresses)


def _clean_display_name(raw: str) -> str:
    name = raw.strip()
    if len(name) >= 2 and name[0] == name[-1] == '"':
        name = name[1:-1].replace('\\"', '"').replace("\\\\", "\\")
    return " ".join(name.split())


# ======================================================================
# Subject / Date
# ======================================================================

def normalize_subject(raw: str) -> Subject:
    """
    Strip reply/forward prefixes (repeated, mixed-case, "Re[2]:" counters)
    and collapse whitespace.
    """
    text = raw
    reply_depth = 0
    is_forward = False

    while True:
        m = _SUBJECT_PREFIX_RE.match(text)
        if not m:
            break
        tag = m.group("tag").lower()
        if tag in REPLY_PREFIXES:
            counter = m.group("n1") or m.group("n2")
            reply_depth += int(counter) if counter else 1
        elif tag in FORWARD_PREFIXES:
            is_forward = True
        else:
            break
        text = text[m.end():]

    return Subject(
        original=raw,
        normalized=" ".join(text.split()),
        reply_depth=reply_depth,
        is_forward=is_forward,
    )


def parse_date(raw: Optional[str]) -> Tuple[Optional[datetime], Optional[str]]:
    """
    Best-effort RFC 2822 date parsing.

    Returns:
        (UTC datetime or None, raw text or None). Unparsable dates keep the
        raw text and a None datetime.
    """
    if raw is None or not raw.strip():
        return None, None
    try:
        parsed = parsedate_to_datetime(raw)
    except (TypeError, ValueError, IndexError):
        logger.debug("Unparsable Date header kept as raw text: %r", raw)
        return None, raw
    if parsed is None:
        return None, raw
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc), raw


# ======================================================================
# Header summary
# ======================================================================

def summarize_headers(headers: HeaderMap) -> HeaderSummary:
    mailer = headers.get_first("X-Mailer") or headers.get_first("User-Agent")
    custom = tuple(
        (name, value) for name, value in headers.raw_items if name.lower().startswith("x-")
    )
    return HeaderSummary(
        content_type=headers.get_first("Content-Type"),
        mailer=_blank_to_none(mailer),
        priority=_parse_priority(headers),
        list_unsubscribe=_blank_to_none(headers.get_first("List-Unsubscribe")),
        list_id=_blank_to_none(headers.get_first("List-Id")),
        authentication=parse_authentication_results(headers),
        custom=custom,
    )


def _parse_priority(headers: HeaderMap) -> Optional[Priority]:
    x_priority = headers.get_first("X-Priority")
    if x_priority:
        digit = x_priority.strip()[:1]
        return _X_PRIORITY.get(digit, Priority.NORMAL)

    importance = (headers.get_first("Importance") or "").strip().lower()
    if importance == "high":
        return Priority.HIGH
    if importance == "low":
        return Priority.LOW
    return None


def parse_authentication_results(headers: HeaderMap) -> AuthenticationResults:
    """
    SPF/DKIM/DMARC verdicts. The topmost header (added by the receiving
    server) wins for each method.
    """
    found = {}
    for value in headers.get_all("Authentication-Results"):
        for method, result in _AUTH_RESULT_RE.findall(value):
            found.setdefault(method.lower(), _AUTH_RESULTS.get(result.lower(), AuthResult.UNKNOWN))

    if "spf" not in found:
        received_spf = headers.get_first("Received-SPF")
        if received_spf and received_spf.split():
            verdict = received_spf.split()[0].lower()
            found["spf"] = _AUTH_RESULTS.get(verdict, AuthResult.UNKNOWN)

    return AuthenticationResults(
        spf=found.get("spf"),
        dkim=found.get("dkim"),
        dmarc=found.get("dmarc"),
    )


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    return value.strip()
