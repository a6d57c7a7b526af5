"""
Typed models for the MIME-decoding collaborator contract.

The collaborator turns raw bytes into a case-insensitive header multi-map and
a sequence of decoded body parts; the intelligence layer consumes only these
models and never touches MIME structure itself.
"""
from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ContentType(str, Enum):
    """Declared content type of a decoded body part."""

    PLAIN_TEXT = "text/plain"
    HTML = "text/html"


class HeaderMap(Mapping):
    """
    Immutable, case-insensitive header multi-map.

    ``headers["subject"]`` returns every raw value for the name (in document
    order); iteration yields each distinct name once, in the casing of its
    first occurrence.
    """

    __slots__ = ("_items", "_index")

    def __init__(self, items: Tuple[Tuple[str, str], ...] = ()):
        self._items: Tuple[Tuple[str, str], ...] = tuple(items)
        index: Dict[str, List[str]] = {}
        for name, value in self._items:
            index.setdefault(name.lower(), []).append(value)
        self._index: Dict[str, Tuple[str, ...]] = {k: tuple(v) for k, v in index.items()}

    def __getitem__(self, name: str) -> Tuple[str, ...]:
        return self._index[name.lower()]

    def __iter__(self) -> Iterator[str]:
        seen = set()
        for name, _ in self._items:
            key = name.lower()
            if key not in seen:
                seen.add(key)
                yield name

    def __len__(self) -> int:
        return len(self._index)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._index

    def __repr__(self) -> str:
        return f"HeaderMap({len(self._items)} values, {len(self._index)} names)"

    def get_all(self, name: str) -> Tuple[str, ...]:
        """All values for *name*, empty tuple when absent."""
        return self._index.get(name.lower(), ())

    def get_first(self, name: str) -> Optional[str]:
        """First value for *name*, or None when absent."""
        values = self._index.get(name.lower())
        return values[0] if values else None

    @property
    def raw_items(self) -> Tuple[Tuple[str, str], ...]:
        return self._items

    def to_dict(self) -> Dict[str, List[str]]:
        return {name.lower(): list(self[name]) for name in self}


class BodyPart(BaseModel):
    """A single decoded text part as delivered by the collaborator."""

    model_config = ConfigDict(frozen=True)

    content_type: ContentType
    text: str = ""

    @field_validator("content_type", mode="before")
    @classmethod
    def strip_parameters(cls, v):
        # "text/html; charset=utf-8" -> "text/html"
        if isinstance(v, str):
            return v.split(";", 1)[0].strip().lower()
        return v


class DecodedMessage(BaseModel):
    """Collaborator output: headers in document order plus text parts."""

    model_config = ConfigDict(frozen=True)

    header_items: Tuple[Tuple[str, str], ...] = Field(default=(), description="(name, decoded value) pairs.")
    body_parts: Tuple[BodyPart, ...] = Field(default=(), description="Text parts in MIME walk order.")
    attachment_count: int = Field(0, ge=0)

    @property
    def headers(self) -> HeaderMap:
        return HeaderMap(self.header_items)
