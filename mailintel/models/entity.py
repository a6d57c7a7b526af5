"""
Entity models for extracted entities (regex matchers / heuristics).
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterator, Tuple


class EntityKind(str, Enum):
    EMAIL = "email"
    PHONE = "phone"
    URL = "url"
    NAME = "name"
    COMPANY = "company"
    AMOUNT = "amount"
    SOCIAL_HANDLE = "social_handle"


@dataclass(frozen=True)
class EntityMatch:
    """A single extracted entity with provenance."""

    kind: EntityKind
    raw_text: str
    normalized_value: str
    start: int              # character offset into the scanned field
    end: int
    position: int           # UTF-8 byte offset of `start` in subject + "\n" + body
    field: str = "body"     # "subject" | "body"
    source: str = "regex"   # "regex" | "heuristic"
    confidence: float = 0.95
    details: Tuple[Tuple[str, Any], ...] = ()

    def overlaps(self, other: "EntityMatch") -> bool:
        """Check if two matches have overlapping spans in the same field."""
        if self.field != other.field:
            return False
        return not (self.end <= other.start or other.end <= self.start)

    def span_length(self) -> int:
        return self.end - self.start

    def detail(self, key: str, default: Any = None) -> Any:
        for k, v in self.details:
            if k == key:
                return v
        return default

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "raw_text": self.raw_text,
            "normalized_value": self.normalized_value,
            "position": self.position,
            "start": self.start,
            "end": self.end,
            "field": self.field,
            "source": self.source,
            "confidence": self.confidence,
            "details": {k: _jsonable(v) for k, v in self.details},
        }

    def __repr__(self) -> str:
        return f"EntityMatch('{self.raw_text}', {self.kind.value}, @{self.position}, {self.source})"


def _jsonable(value: Any) -> Any:
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    return str(value)


@dataclass(frozen=True)
class ExtractedEntities:
    """
    Entity kind -> matches, each tuple ordered by first appearance and unique
    by normalized value.
    """

    emails: Tuple[EntityMatch, ...] = ()
    phones: Tuple[EntityMatch, ...] = ()
    urls: Tuple[EntityMatch, ...] = ()
    names: Tuple[EntityMatch, ...] = ()
    companies: Tuple[EntityMatch, ...] = ()
    amounts: Tuple[EntityMatch, ...] = ()
    social_handles: Tuple[EntityMatch, ...] = ()

    @classmethod
    def from_matches(cls, matches) -> "ExtractedEntities":
        """Group already-merged matches by kind, keeping their order."""
        grouped: Dict[EntityKind, list] = {kind: [] for kind in EntityKind}
        for match in matches:
            grouped[match.kind].append(match)
        return cls(**{_KIND_TO_FIELD[kind]: tuple(items) for kind, items in grouped.items()})

    def __getitem__(self, kind: EntityKind) -> Tuple[EntityMatch, ...]:
        return getattr(self, _KIND_TO_FIELD[EntityKind(kind)])

    def __iter__(self) -> Iterator[EntityKind]:
        return iter(EntityKind)

    def items(self) -> Iterator[Tuple[EntityKind, Tuple[EntityMatch, ...]]]:
        for kind in EntityKind:
            yield kind, self[kind]

    def values_of(self, kind: EntityKind) -> Tuple[str, ...]:
        """Normalized values of one kind, in order."""
        return tuple(m.normalized_value for m in self[kind])

    def is_empty(self) -> bool:
        return self.total_count() == 0

    def total_count(self) -> int:
        return sum(len(matches) for _, matches in self.items())

    def to_dict(self) -> dict:
        return {kind.value: [m.to_dict() for m in matches] for kind, matches in self.items()}


_KIND_TO_FIELD: Dict[EntityKind, str] = {
    EntityKind.EMAIL: "emails",
    EntityKind.PHONE: "phones",
    EntityKind.URL: "urls",
    EntityKind.NAME: "names",
    EntityKind.COMPANY: "companies",
    EntityKind.AMOUNT: "amounts",
    EntityKind.SOCIAL_HANDLE: "social_handles",
}
