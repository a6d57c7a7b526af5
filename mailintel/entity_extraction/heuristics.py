"""
Heuristic Entity Matchers — names and companies (lower confidence).

No statistical model is involved: names are capitalized word runs found in
fixed contexts (after a greeting, after an introduction, on the line after
a sign-off), companies are capitalized runs ending in a corporate suffix.
Recall is traded for predictability.
"""
import re
from typing import List, Optional, Sequence

from mailintel.config.constants import (
    COMPANY_LEADING_STOPWORDS,
    CORPORATE_SUFFIXES,
    GREETING_TOKENS,
    INTRODUCTION_PHRASES,
    NAME_STOPWORDS,
    SIGN_OFF_TOKENS,
)
from mailintel.entity_extraction.regex_matcher import EntityMatcher, make_match
from mailintel.models.email import PersonName
from mailintel.models.entity import EntityKind, EntityMatch

_CAP_WORD = r"[A-Z][A-Za-z'’-]*[a-z]"
_TITLE = r"(?:(?:Mr|Mrs|Ms|Dr|Prof)\.?[ \t]+)?"


def _alternation(phrases: Sequence[str]) -> str:
    # longest first so "good morning" wins over shorter prefixes
    return "|".join(re.escape(p) for p in sorted(phrases, key=len, reverse=True))


def is_sign_off_line(line: str) -> bool:
    """True when the line is only a sign-off token ("Best regards," ...)."""
    return line.strip().rstrip(",.!").strip().lower() in SIGN_OFF_TOKENS


class NameMatcher(EntityMatcher):
    """
    Person names in greeting / introduction / sign-off contexts.

    Args:
        max_words: Longest name accepted, in words.
        confidence: Confidence attached to every match.
    """

    kind = EntityKind.NAME

    def __init__(self, max_words: int = 3, confidence: float = 0.6):
        self.max_words = max_words
        self.confidence = confidence
        name = rf"(?P<name>{_CAP_WORD}(?:[ \t]+{_CAP_WORD}){{0,{max_words - 1}}})(?![\w'’-])"
        self._greeting_re = re.compile(
            rf"(?m)^[ \t]*(?i:{_alternation(GREETING_TOKENS)})[ \t,]+{_TITLE}{name}"
        )
        self._intro_re = re.compile(
            rf"(?<!\w)(?i:{_alternation(INTRODUCTION_PHRASES)})[ \t]+{_TITLE}{name}"
        )
        self._line_re = re.compile(rf"[ \t]*{_TITLE}{name}[ \t,.]*$")

    def find(self, text: str, field: str = "body") -> List[EntityMatch]:
        matches: List[EntityMatch] = []
        for pattern in (self._greeting_re, self._intro_re):
            for m in pattern.finditer(text):
                match = self._build(text, m.start("name"), m.group("name"), field)
                if match is not None:
                    matches.append(match)
        matches.extend(self._after_sign_off(text, field))
        matches.sort(key=lambda e: e.start)
        return matches

    def _after_sign_off(self, text: str, field: str) -> List[EntityMatch]:
        matches = []
        offset = 0
        lines = text.splitlines(keepends=True)
        for i, line in enumerate(lines):
            offset += len(line)
            if not is_sign_off_line(line):
                continue
            # first non-blank line after the sign-off
            line_start = offset
            for candidate in lines[i + 1:]:
                if candidate.strip():
                    m = self._line_re.match(candidate.rstrip("\r\n"))
                    if m:
                        match = self._build(text, line_start + m.start("name"), m.group("name"), field)
                        if match is not None:
                            matches.append(match)
                    break
                line_start += len(candidate)
        return matches

    def _build(self, text: str, start: int, raw: str, field: str) -> Optional[EntityMatch]:
        # "Hi John Thanks ..." runs are cut at the first stopword
        kept = []
        for word in raw.split():
            if word.lower() in NAME_STOPWORDS:
                break
            kept.append(word)
        if not kept:
            return None
        name = PersonName.parse(" ".join(kept))
        return make_match(
            self.kind, text, start, start + _end_of_words(raw, len(kept)), name.full, field,
            source="heuristic", confidence=self.confidence,
            details=(("first", name.first), ("last", name.last)),
        )


def _end_of_words(text: str, count: int) -> int:
    """Character offset just after the `count`-th word of `text`."""
    end = 0
    for m in re.finditer(r"\S+", text):
        count -= 1
        end = m.end()
        if count == 0:
            break
    return end


class CompanyMatcher(EntityMatcher):
    """
    Capitalized word run followed by a corporate suffix ("Acme Inc.",
    "Globex Corporation", "Initech GmbH").  Leading filler words such as
    "Visit" or "The" are dropped from the match.
    """

    kind = EntityKind.COMPANY

    def __init__(self, max_words: int = 4, confidence: float = 0.7):
        self.max_words = max_words
        self.confidence = confidence
        word = r"(?:[A-Z][\w'’.-]*|&)"
        self._pattern = re.compile(
            rf"(?<![\w.])(?P<run>(?:{word}[ \t]+){{1,{max_words}}})"
            rf"(?P<suffix>{_alternation(CORPORATE_SUFFIXES)})(?![\w])"
        )

    def find(self, text: str, field: str = "body") -> List[EntityMatch]:
        matches = []
        for m in self._pattern.finditer(text):
            words = list(re.finditer(r"\S+", m.group("run")))
            while words and words[0].group(0).lower().rstrip(".,") in COMPANY_LEADING_STOPWORDS:
                words.pop(0)
            if not words or words[0].group(0) == "&":
                continue
            start = m.start("run") + words[0].start()
            end = m.end("suffix")
            raw = text[start:end]
            normalized = " ".join(raw.split()).rstrip(".")
            matches.append(
                make_match(
                    self.kind, text, start, end, normalized, field,
                    source="heuristic", confidence=self.confidence,
                    details=(("suffix", m.group("suffix")),),
                )
            )
        return matches
