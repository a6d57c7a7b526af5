"""
Email and its value records — the immutable result of one parse call.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import FrozenSet, Optional, Tuple

from mailintel.config.constants import FREEMAIL_DOMAINS, NOREPLY_MARKERS
from mailintel.models.entity import ExtractedEntities
from mailintel.models.mime import ContentType, HeaderMap
from mailintel.models.parser_version import ParserVersion


@dataclass(frozen=True)
class PersonName:
    """Display name split into first/last words (best effort)."""

    full: str
    first: Optional[str] = None
    last: Optional[str] = None

    @classmethod
    def parse(cls, raw: str) -> "PersonName":
        full = raw.strip().strip('"').strip()
        parts = full.split()
        if not parts:
            return cls(full="")
        if len(parts) == 1:
            return cls(full=full, first=parts[0])
        return cls(full=full, first=parts[0], last=parts[-1])

    def __str__(self) -> str:
        return self.full


@dataclass(frozen=True)
class Address:
    """Mailbox with optional display name. `address` is never empty."""

    address: str
    display_name: Optional[str] = None

    @property
    def local_part(self) -> str:
        return self.address.rsplit("@", 1)[0] if "@" in self.address else self.address

    @property
    def domain(self) -> str:
        return self.address.rsplit("@", 1)[1].lower() if "@" in self.address else ""

    @property
    def name(self) -> Optional[PersonName]:
        return PersonName.parse(self.display_name) if self.display_name else None

    def is_noreply(self) -> bool:
        """Likely an automated / no-reply mailbox."""
        lower = self.local_part.lower()
        return any(marker in lower for marker in NOREPLY_MARKERS)

    def is_freemail(self) -> bool:
        return self.domain in FREEMAIL_DOMAINS

    def to_dict(self) -> dict:
        return {"display_name": self.display_name, "address": self.address}

    def __str__(self) -> str:
        if self.display_name:
            return f"{self.display_name} <{self.address}>"
        return self.address


@dataclass(frozen=True)
class Subject:
    original: str
    normalized: str
    reply_depth: int = 0
    is_forward: bool = False

    def __str__(self) -> str:
        return self.original


@dataclass(frozen=True)
class Body:
    """Resolved body. `rendered_text` is always plain text."""

    original: str = ""
    content_type: ContentType = ContentType.PLAIN_TEXT
    rendered_text: str = ""
    html: Optional[str] = None
    has_attachments: bool = False

    @property
    def word_count(self) -> int:
        return len(self.rendered_text.split())

    @property
    def char_count(self) -> int:
        return len(self.rendered_text)

    @property
    def line_count(self) -> int:
        return len(self.rendered_text.splitlines())

    def is_empty(self) -> bool:
        return not self.rendered_text.strip()


@dataclass(frozen=True)
class SignatureSplit:
    """
    Body split into content and trailing signature.

    ``content + separator + signature`` reproduces the resolved body exactly;
    when no signature is found, ``separator`` is empty and ``content`` is the
    whole body.
    """

    content: str
    signature: Optional[str] = None
    separator: str = ""
    rule: Optional[str] = None      # "delimiter" | "sign_off"

    def reconstruct(self) -> str:
        return self.content + self.separator + (self.signature or "")


@dataclass(frozen=True)
class ThreadInfo:
    message_id: Optional[str] = None
    references: Tuple[str, ...] = ()
    in_reply_to: Optional[str] = None
    depth: int = 0

    @property
    def is_reply(self) -> bool:
        return self.depth > 0

    @property
    def root_id(self) -> Optional[str]:
        """Oldest known ancestor: first reference, else the direct parent."""
        if self.references:
            return self.references[0]
        return self.in_reply_to


@dataclass(frozen=True)
class SpamIndicator:
    tag: str
    weight: float


@dataclass(frozen=True)
class SpamIndicators:
    """Indicator flags plus their normalized weighted score in [0, 1]."""

    flags: FrozenSet[str] = frozenset()
    score: float = 0.0
    indicators: Tuple[SpamIndicator, ...] = ()

    def has(self, tag: str) -> bool:
        return tag in self.flags


class Priority(str, Enum):
    HIGHEST = "highest"
    HIGH = "high"
    NORMAL = "normal"
    LOW = "low"
    LOWEST = "lowest"


class AuthResult(str, Enum):
    PASS = "pass"
    FAIL = "fail"
    SOFTFAIL = "softfail"
    NEUTRAL = "neutral"
    NONE = "none"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class AuthenticationResults:
    spf: Optional[AuthResult] = None
    dkim: Optional[AuthResult] = None
    dmarc: Optional[AuthResult] = None

    def any_failed(self) -> bool:
        return AuthResult.FAIL in (self.spf, self.dkim, self.dmarc)


@dataclass(frozen=True)
class HeaderSummary:
    """Selected headers interpreted for downstream policy."""

    content_type: Optional[str] = None
    mailer: Optional[str] = None
    priority: Optional[Priority] = None
    list_unsubscribe: Optional[str] = None
    list_id: Optional[str] = None
    authentication: AuthenticationResults = field(default_factory=AuthenticationResults)
    custom: Tuple[Tuple[str, str], ...] = ()


class Urgency(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    NORMAL = "normal"
    LOW = "low"


class Sentiment(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"
    MIXED = "mixed"


@dataclass(frozen=True)
class CategoryHint:
    category: str
    confidence: float
    reason: str


@dataclass(frozen=True)
class MessageMetadata:
    urgency: Urgency = Urgency.NORMAL
    urgency_signals: Tuple[str, ...] = ()
    category_hints: Tuple[CategoryHint, ...] = ()
    is_automated: bool = False
    is_mailing_list: bool = False
    sentiment: Sentiment = Sentiment.NEUTRAL


@dataclass(frozen=True)
class Email:
    """Fully parsed email with extracted entities and analysis."""

    email_id: str
    from_address: Address
    subject: Subject
    body: Body
    signature_split: SignatureSplit
    headers: HeaderMap
    extracted: ExtractedEntities
    thread: ThreadInfo
    spam: SpamIndicators
    to: Tuple[Address, ...] = ()
    cc: Tuple[Address, ...] = ()
    bcc: Tuple[Address, ...] = ()
    reply_to: Optional[Address] = None
    date: Optional[datetime] = None
    date_raw: Optional[str] = None
    header_summary: HeaderSummary = field(default_factory=HeaderSummary)
    metadata: MessageMetadata = field(default_factory=MessageMetadata)
    parser_version: ParserVersion = field(default_factory=ParserVersion)
    diagnostics: Tuple[str, ...] = ()

    @property
    def message_id(self) -> Optional[str]:
        return self.thread.message_id
