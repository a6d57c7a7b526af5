"""
RegEx Entity Matchers — high-precision extraction of the pattern-shaped kinds.

Each matcher is an independent strategy: it scans one text field and returns
EntityMatch objects (source="regex", confidence=0.95).  Adding or tuning a
matcher never touches the others; overlaps between kinds are settled later
by the merger.
"""
import logging
import re
from decimal import Decimal, InvalidOperation
from typing import List, Optional, Sequence, Tuple
from urllib.parse import urlsplit, urlunsplit

from mailintel.config.constants import (
    CURRENCY_CODES,
    CURRENCY_SYMBOLS,
    DOCUMENT_EXTENSIONS,
    PHONE_MAX_DIGITS,
    PHONE_MIN_DIGITS,
    SOCIAL_DOMAINS,
    TOLL_FREE_PREFIXES,
    TRACKING_URL_MARKERS,
    UNSUBSCRIBE_URL_MARKERS,
)
from mailintel.models.entity import EntityKind, EntityMatch

logger = logging.getLogger(__name__)


def byte_offset(text: str, char_index: int) -> int:
    """UTF-8 byte offset of a character index."""
    return len(text[:char_index].encode("utf-8", "surrogatepass"))


def make_match(
    kind: EntityKind,
    text: str,
    start: int,
    end: int,
    normalized: str,
    field: str,
    source: str = "regex",
    confidence: float = 0.95,
    details: Tuple[Tuple[str, object], ...] = (),
) -> EntityMatch:
    return EntityMatch(
        kind=kind,
        raw_text=text[start:end],
        normalized_value=normalized,
        start=start,
        end=end,
        position=byte_offset(text, start),
        field=field,
        source=source,
        confidence=confidence,
        details=details,
    )


class EntityMatcher:
    """Base strategy: scan one field of text for one entity kind."""

    kind: EntityKind

    def find(self, text: str, field: str = "body") -> List[EntityMatch]:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.kind.value})"


# ==========================================================================
# Email addresses
# ==========================================================================

class EmailMatcher(EntityMatcher):
    kind = EntityKind.EMAIL

    PATTERN = re.compile(
        r"(?<![\w.%+-])"
        r"[A-Za-z0-9._%+-]+@"
        r"(?:[A-Za-z0-9](?:[A-Za-z0-9-]*[A-Za-z0-9])?\.)+[A-Za-z]{2,}"
        r"(?![\w-])"
    )

    def find(self, text: str, field: str = "body") -> List[EntityMatch]:
        matches = []
        for m in self.PATTERN.finditer(text):
            normalized = m.group(0).lower()
            domain = normalized.rsplit("@", 1)[1]
            matches.append(
                make_match(self.kind, text, m.start(), m.end(), normalized, field,
                           details=(("domain", domain),))
            )
        return matches


# ==========================================================================
# Phone numbers
# ==========================================================================

class PhoneMatcher(EntityMatcher):
    """
    Digit groups with space/dash/dot/parenthesis separators.

    A candidate needs PHONE_MIN_DIGITS..PHONE_MAX_DIGITS digits and either a
    separator or a leading "+"; bare digit runs (order numbers, zip codes)
    are ignored.  Dates and dotted IPv4 quads are rejected.
    """

    kind = EntityKind.PHONE

    PATTERN = re.compile(
        r"(?<![\w+@/.-])"
        r"(?:\+(?P<cc>\d{1,3})[ .-]?)?"
        r"(?:\(\d{1,4}\)[ .-]?)?"
        r"\d{1,4}(?:[ .-]?\d{1,4}){0,5}"
        r"(?![\w@])"
    )
    _ISO_DATE = re.compile(r"^\d{4}-\d{1,2}-\d{1,2}$")
    _DOTTED_DATE = re.compile(r"^\d{1,2}[./-]\d{1,2}[./-]\d{2,4}$")
    _IPV4 = re.compile(r"^\d{1,3}(?:\.\d{1,3}){3}$")
    _YEAR_RANGE = re.compile(r"^(?:19|20)\d{2}-(?:19|20)\d{2}$")
    _SEPARATOR = re.compile(r"[ .()-]")

    def find(self, text: str, field: str = "body") -> List[EntityMatch]:
        matches = []
        for m in self.PATTERN.finditer(text):
            raw = m.group(0)
            if not self._is_phone(raw):
                continue
            digits = re.sub(r"\D", "", raw)
            normalized = ("+" + digits) if raw.startswith("+") else digits
            country_code = m.group("cc")
            details = (
                ("phone_type", _phone_type(digits, country_code)),
                ("country_code", country_code),
            )
            matches.append(
                make_match(self.kind, text, m.start(), m.end(), normalized, field,
                           details=details)
            )
        return matches

    def _is_phone(self, raw: str) -> bool:
        digit_count = sum(ch.isdigit() for ch in raw)
        if not PHONE_MIN_DIGITS <= digit_count <= PHONE_MAX_DIGITS:
            return False
        if not (raw.startswith("+") or self._SEPARATOR.search(raw)):
            return False
        for reject in (self._ISO_DATE, self._DOTTED_DATE, self._IPV4, self._YEAR_RANGE):
            if reject.match(raw):
                return False
        return True


def _phone_type(digits: str, country_code: Optional[str]) -> str:
    national = digits
    if country_code and national.startswith(country_code):
        national = national[len(country_code):]
    elif len(national) == 11 and national.startswith("1"):
        national = national[1:]
    if any(national.startswith(prefix) for prefix in TOLL_FREE_PREFIXES):
        return "toll_free"
    return "unknown"


# ==========================================================================
# URLs
# ==========================================================================

_URL_TRAILING_PUNCT = ".,;:!?'\""


def trim_url(raw: str) -> str:
    """Drop trailing sentence punctuation and unbalanced closing parens."""
    while raw:
        if raw[-1] in _URL_TRAILING_PUNCT:
            raw = raw[:-1]
        elif raw[-1] == ")" and raw.count(")") > raw.count("("):
            raw = raw[:-1]
        else:
            break
    return raw


def normalize_url(raw: str) -> Tuple[str, str, str]:
    """
    Lower-case scheme and host; bare ``www.`` forms get ``http://``.

    Returns:
        (normalized url, domain without leading "www.", path)
    """
    candidate = raw if "://" in raw else "http://" + raw
    try:
        parts = urlsplit(candidate)
        host = (parts.hostname or "").lower()
        normalized = urlunsplit(
            (parts.scheme.lower(), parts.netloc.lower(), parts.path, parts.query, parts.fragment)
        )
    except ValueError:
        logger.debug("Keeping unparsable URL as-is: %r", raw)
        return raw, "", ""
    if host.startswith("www."):
        host = host[4:]
    return normalized, host, parts.path


def classify_url(normalized: str, domain: str, path: str = "") -> Tuple[str, bool]:
    """Return (url_type, is_tracking)."""
    lower = normalized.lower()
    path = path.lower()
    is_tracking = any(marker in lower for marker in TRACKING_URL_MARKERS)

    if any(marker in lower for marker in UNSUBSCRIBE_URL_MARKERS):
        return "unsubscribe", is_tracking
    if is_tracking:
        return "tracking", is_tracking
    if any(domain == social or domain.endswith("." + social) for social in SOCIAL_DOMAINS):
        return "social_media", is_tracking
    if "calendar" in lower or "calendly" in domain or path.endswith(".ics"):
        return "calendar", is_tracking
    if any(path.endswith(ext) for ext in DOCUMENT_EXTENSIONS):
        return "document", is_tracking
    return "website", is_tracking


class UrlMatcher(EntityMatcher):
    kind = EntityKind.URL

    PATTERN = re.compile(
        r"(?:(?<![\w@.])(?:https?|ftp)://|(?<![\w@./])www\.)[^\s<>\"'\[\]{}|\\^`]+",
        re.IGNORECASE,
    )

    def find(self, text: str, field: str = "body") -> List[EntityMatch]:
        matches = []
        for m in self.PATTERN.finditer(text):
            raw = trim_url(m.group(0))
            rest = raw.split("://", 1)[1] if "://" in raw else raw[4:]
            # scheme or "www." alone
            if not rest:
                continue
            normalized, domain, path = normalize_url(raw)
            url_type, is_tracking = classify_url(normalized, domain, path)
            details = (
                ("domain", domain),
                ("is_tracking", is_tracking),
                ("url_type", url_type),
            )
            matches.append(
                make_match(self.kind, text, m.start(), m.start() + len(raw), normalized, field,
                           details=details)
            )
        return matches


# ==========================================================================
# Monetary amounts
# ==========================================================================

_NUMBER = r"\d{1,3}(?:,\d{3})+(?:\.\d{1,2})?|\d+(?:\.\d{1,2})?"
_SYMBOLS = "".join(re.escape(symbol) for symbol in CURRENCY_SYMBOLS)
_CODES = "|".join(sorted(CURRENCY_CODES))
_NUMBER_END = r"(?![\d,.]?\d)"


class AmountMatcher(EntityMatcher):
    """
    Digits adjacent to a currency symbol ($ € £ ¥ ₹) or an ISO code.

    Normalized as ``"<decimal with 2 places> <CODE>"``, e.g. ``"1500.00 USD"``.
    """

    kind = EntityKind.AMOUNT

    PATTERN = re.compile(
        rf"(?P<sym_pre>[{_SYMBOLS}])[ \t]?(?P<n1>{_NUMBER}){_NUMBER_END}"
        rf"|(?<![A-Za-z])(?P<code_pre>{_CODES})[ \t]?(?P<n2>{_NUMBER}){_NUMBER_END}"
        rf"|(?<![\w.,])(?P<n3>{_NUMBER})[ \t]?(?P<sym_post>[{_SYMBOLS}])"
        rf"|(?<![\w.,])(?P<n4>{_NUMBER})[ \t]?(?P<code_post>{_CODES})(?![A-Za-z])"
    )

    def find(self, text: str, field: str = "body") -> List[EntityMatch]:
        matches = []
        for m in self.PATTERN.finditer(text):
            number = m.group("n1") or m.group("n2") or m.group("n3") or m.group("n4")
            symbol = m.group("sym_pre") or m.group("sym_post")
            currency = CURRENCY_SYMBOLS[symbol] if symbol else (m.group("code_pre") or m.group("code_post"))
            amount = parse_amount(number)
            if amount is None:
                continue
            matches.append(
                make_match(
                    self.kind, text, m.start(), m.end(), f"{amount} {currency}", field,
                    details=(("amount", str(amount)), ("currency", currency)),
                )
            )
        return matches


def parse_amount(number: str) -> Optional[Decimal]:
    try:
        return Decimal(number.replace(",", "")).quantize(Decimal("0.01"))
    except InvalidOperation:
        return None


# ==========================================================================
# Social handles
# ==========================================================================

_PROFILE_PLATFORMS = {
    "linkedin.com": "linkedin",
    "github.com": "github",
    "twitter.com": "twitter",
    "x.com": "twitter",
    "instagram.com": "instagram",
    "facebook.com": "facebook",
}

# Path segments that are site sections rather than profiles.
_RESERVED_PROFILE_PATHS = {
    "about", "home", "login", "share", "sharer", "intent", "search", "explore",
    "settings", "company", "pages", "groups", "orgs", "features", "p",
}


class SocialHandleMatcher(EntityMatcher):
    """
    ``@handle`` tokens (attributed to Twitter/X) and profile URLs on the
    major networks.  Normalized as ``platform:handle`` in lower case.
    """

    kind = EntityKind.SOCIAL_HANDLE

    HANDLE_PATTERN = re.compile(r"(?<![\w@./])@(?P<handle>[A-Za-z0-9_]{1,30})(?!\w|\.\w)")
    PROFILE_PATTERN = re.compile(
        r"(?<![\w.@/-])(?:https?://)?(?:www\.|[a-z]{2}\.)?"
        r"(?P<host>linkedin\.com|github\.com|twitter\.com|x\.com|instagram\.com|facebook\.com)"
        r"/(?P<path>(?:in/)?[A-Za-z0-9_.-]+)",
        re.IGNORECASE,
    )

    def find(self, text: str, field: str = "body") -> List[EntityMatch]:
        matches = []
        for m in self.HANDLE_PATTERN.finditer(text):
            handle = m.group("handle")
            matches.append(self._match(text, m.start(), m.end(), "twitter", handle, field))

        for m in self.PROFILE_PATTERN.finditer(text):
            platform = _PROFILE_PLATFORMS[m.group("host").lower()]
            path = m.group("path").rstrip(".")
            if platform == "linkedin":
                if not path.lower().startswith("in/"):
                    continue
                handle = path[3:]
            else:
                handle = path
            if not handle or handle.lower() in _RESERVED_PROFILE_PATHS:
                continue
            end = m.start("path") + len(path)
            matches.append(self._match(text, m.start(), end, platform, handle, field))
        return matches

    def _match(self, text: str, start: int, end: int, platform: str, handle: str, field: str) -> EntityMatch:
        return make_match(
            self.kind, text, start, end, f"{platform}:{handle.lower()}", field,
            details=(("platform", platform), ("handle", handle)),
        )


# ==========================================================================
# Default registry (order is the scan order; merge decides overlaps)
# ==========================================================================
DEFAULT_REGEX_MATCHERS: Sequence[EntityMatcher] = (
    EmailMatcher(),
    UrlMatcher(),
    AmountMatcher(),
    PhoneMatcher(),
    SocialHandleMatcher(),
)
