"""
Signature Separator — splits the resolved body into content and signature.

Detectors are tried in order; the first one that finds a boundary wins:
    1. DelimiterBoundary — the last "--" / "-- " line followed by text
    2. SignOffBoundary   — a bare sign-off ("Regards", "Thanks", ...) line
                           followed by a name-like line, or a
                           "Sent from my ..." line, near the end of the body

For every result ``content + separator + signature`` is the body verbatim.
"""
import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from mailintel.config import settings
from mailintel.config.constants import SENT_FROM_PREFIX, SIGNATURE_DELIMITERS
from mailintel.entity_extraction.heuristics import is_sign_off_line
from mailintel.models.email import SignatureSplit

logger = logging.getLogger(__name__)

_NAME_LIKE_RE = re.compile(r"^[A-Z][\w.'’-]*(?:[ \t]+[A-Z][\w.'’-]*){0,3}[ \t,]*$")


@dataclass(frozen=True)
class Boundary:
    """Content ends at ``content_end``; the signature starts at ``signature_start``."""

    content_end: int
    signature_start: int
    rule: str


def _line_spans(text: str) -> List[Tuple[int, int, str]]:
    """(start, end, line-without-newline) for every line of *text*."""
    spans = []
    offset = 0
    for line in text.splitlines(keepends=True):
        spans.append((offset, offset + len(line), line.rstrip("\r\n")))
        offset += len(line)
    return spans


class BoundaryDetector:
    rule: str = ""

    def detect(self, text: str) -> Optional[Boundary]:
        raise NotImplementedError


class DelimiterBoundary(BoundaryDetector):
    """The last line that is exactly "--" (or RFC 3676 "-- ") with text after it."""

    rule = "delimiter"

    def detect(self, text: str) -> Optional[Boundary]:
        spans = _line_spans(text)
        for i in range(len(spans) - 1, -1, -1):
            start, end, line = spans[i]
            if line not in SIGNATURE_DELIMITERS:
                continue
            following = [s for s in spans[i + 1:] if s[2].strip()]
            if not following:
                continue
            return Boundary(
                content_end=len(text[:start].rstrip()),
                signature_start=following[0][0],
                rule=self.rule,
            )
        return None


class SignOffBoundary(BoundaryDetector):
    """
    Sign-off heuristics restricted to the last *max_lines* non-blank lines.
    The topmost qualifying line starts the signature.
    """

    rule = "sign_off"

    def __init__(self, max_lines: int = settings.SIGNATURE_MAX_LINES):
        self.max_lines = max_lines

    def detect(self, text: str) -> Optional[Boundary]:
        non_blank = [s for s in _line_spans(text) if s[2].strip()]
        window = non_blank[-self.max_lines:]

        for i, (start, _end, line) in enumerate(window):
            if line.strip().lower().startswith(SENT_FROM_PREFIX):
                return self._boundary(text, start)
            if is_sign_off_line(line) and i + 1 < len(window):
                if _NAME_LIKE_RE.match(window[i + 1][2].strip()):
                    return self._boundary(text, start)
        return None

    def _boundary(self, text: str, start: int) -> Boundary:
        return Boundary(
            content_end=len(text[:start].rstrip()),
            signature_start=start,
            rule=self.rule,
        )


def default_detectors(max_lines: int = settings.SIGNATURE_MAX_LINES) -> List[BoundaryDetector]:
    return [DelimiterBoundary(), SignOffBoundary(max_lines=max_lines)]


def split_signature(
    text: str,
    detectors: Optional[Sequence[BoundaryDetector]] = None,
) -> SignatureSplit:
    """
    Split *text* at the first boundary any detector reports.

    Returns:
        SignatureSplit; with no boundary, ``content`` is the whole text and
        ``signature`` is None.
    """
    if detectors is None:
        detectors = default_detectors()

    for detector in detectors:
        boundary = detector.detect(text)
        if boundary is None:
            continue
        logger.debug("Signature boundary found by %s at offset %d", boundary.rule, boundary.signature_start)
        return SignatureSplit(
            content=text[:boundary.content_end],
            signature=text[boundary.signature_start:],
            separator=text[boundary.content_end:boundary.signature_start],
            rule=boundary.rule,
        )

    return SignatureSplit(content=text)
