"""HTML to plain text fallback using stdlib ``html.parser``.

Provides :func:`html_to_text` which converts HTML to readable plain text by:
- Removing all tags
- Turning block-level elements and ``<br>`` into line breaks
- Suppressing ``<script>``, ``<style>`` and ``<head>`` content
- Decoding HTML entities
- Optionally appending link targets as `` (url)``

Layout (tables, nesting) is not preserved; readability is the goal.
"""

from __future__ import annotations

import re
from html.parser import HTMLParser

BLOCK_TAGS = frozenset({
    "address", "article", "aside", "blockquote", "br", "dd", "div", "dl",
    "dt", "footer", "form", "h1", "h2", "h3", "h4", "h5", "h6", "header",
    "hr", "li", "main", "nav", "ol", "p", "pre", "section", "table", "tbody",
    "td", "th", "thead", "tr", "ul",
})

SUPPRESSED_TAGS = frozenset({"script", "style", "head", "noscript", "template"})

_INLINE_WS_RE = re.compile(r"[ \t\f\v\xa0]+")
_BLANK_LINES_RE = re.compile(r"\n{3,}")


class HTMLTextExtractor(HTMLParser):
    """HTMLParser subclass that collects visible text from HTML."""

    def __init__(self, include_link_targets: bool = True) -> None:
        super().__init__(convert_charrefs=True)
        self._pieces: list[str] = []
        self._suppress_depth = 0
        self._include_link_targets = include_link_targets
        self._link_stack: list[tuple[str | None, int]] = []

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        tag_lower = tag.lower()
        if tag_lower in SUPPRESSED_TAGS:
            self._suppress_depth += 1
        elif tag_lower in BLOCK_TAGS:
            self._pieces.append("\n")
        elif tag_lower == "a":
            href = dict(attrs).get("href")
            self._link_stack.append((href, len(self._pieces)))
        elif tag_lower == "img":
            alt = dict(attrs).get("alt")
            if alt and not self._suppress_depth:
                self._pieces.append(alt)

    def handle_startendtag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        # <br/>, <hr/>, <img/> never open a suppressed region; <a/> wraps no text
        if tag.lower() in SUPPRESSED_TAGS or tag.lower() == "a":
            return
        self.handle_starttag(tag, attrs)

    def handle_endtag(self, tag: str) -> None:
        tag_lower = tag.lower()
        if tag_lower in SUPPRESSED_TAGS:
            self._suppress_depth = max(0, self._suppress_depth - 1)
        elif tag_lower in BLOCK_TAGS:
            self._pieces.append("\n")
        elif tag_lower == "a" and self._link_stack:
            href, start = self._link_stack.pop()
            self._append_link_target(href, start)

    def handle_data(self, data: str) -> None:
        if not self._suppress_depth:
            self._pieces.append(data)

    def _append_link_target(self, href: str | None, start: int) -> None:
        if not self._include_link_targets or not href:
            return
        href = href.strip()
        if not href.lower().startswith(("http://", "https://", "www.")):
            return
        anchor_text = "".join(self._pieces[start:]).strip()
        if anchor_text and anchor_text != href:
            self._pieces.append(f" ({href})")
        elif not anchor_text:
            self._pieces.append(href)

    def get_text(self) -> str:
        """Return the accumulated text, before whitespace cleanup."""
        return "".join(self._pieces)


def html_to_text(html_content: str, include_link_targets: bool = True) -> str:
    """Convert HTML to plain text.

    Parameters
    ----------
    html_content:
        Raw HTML string.
    include_link_targets:
        Append ``(url)`` after link text that differs from its target.

    Returns
    -------
    str
        Plain text with one visual line per output line.
    """
    if not html_content:
        return ""

    extractor = HTMLTextExtractor(include_link_targets=include_link_targets)
    extractor.feed(html_content)
    extractor.close()
    text = extractor.get_text().replace("\r\n", "\n").replace("\r", "\n")

    # Normalize whitespace: per-line collapse, then collapse blank line runs
    lines = [_INLINE_WS_RE.sub(" ", line).strip() for line in text.split("\n")]
    text = "\n".join(lines)
    text = _BLANK_LINES_RE.sub("\n\n", text)
    return text.strip()
