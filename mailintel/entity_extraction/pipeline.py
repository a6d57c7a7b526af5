"""
Entity Extraction Pipeline — orchestrates matchers + merge.

Pipeline:
    1. RegEx matchers (high precision, confidence 0.95)
    2. Heuristic name/company matchers (confidence from ParserConfig)
    3. Deterministic merge (kind priority Email > Url > Amount > Phone,
       then first-occurrence dedup)

Subject and body are scanned as separate fields. Character offsets (start,
end) are field-relative; byte positions index the scanned text, the subject
and body joined by a newline. The extractor does not know about the
signature split.
"""
import dataclasses
import logging
from typing import Dict, List, Optional, Sequence

from mailintel.config.parser_config import ParserConfig
from mailintel.entity_extraction.heuristics import CompanyMatcher, NameMatcher
from mailintel.entity_extraction.merger import merge_entities_deterministic
from mailintel.entity_extraction.regex_matcher import DEFAULT_REGEX_MATCHERS, EntityMatcher
from mailintel.models.entity import EntityMatch, ExtractedEntities

logger = logging.getLogger(__name__)

SCAN_SEPARATOR = "\n"


def default_matchers(config: Optional[ParserConfig] = None) -> List[EntityMatcher]:
    """Regex matchers followed by the heuristic ones tuned from *config*."""
    config = config or ParserConfig()
    return [
        *DEFAULT_REGEX_MATCHERS,
        NameMatcher(max_words=config.name_max_words, confidence=config.name_confidence),
        CompanyMatcher(max_words=config.company_max_words, confidence=config.company_confidence),
    ]


def field_byte_offsets(subject: str, body: str) -> Dict[str, int]:
    """
    UTF-8 byte offset of each field inside the scanned text.

    The scanned text is the non-empty fields joined by SCAN_SEPARATOR, so
    body positions follow every subject position.
    """
    subject_bytes = len(subject.encode("utf-8", "surrogatepass"))
    body_base = subject_bytes + len(SCAN_SEPARATOR) if subject else 0
    return {"subject": 0, "body": body_base}


def extract_all_entities(
    subject: str,
    body: str,
    matchers: Optional[Sequence[EntityMatcher]] = None,
    config: Optional[ParserConfig] = None,
) -> ExtractedEntities:
    """
    Full entity extraction over subject and body.

    Args:
        subject: Raw subject text.
        body: Resolved plain-text body.
        matchers: Matcher strategies. Defaults to default_matchers(config).
        config: Tuning for the heuristic matchers.

    Returns:
        ExtractedEntities grouped by kind, each tuple ordered by byte position
        in the scanned text and unique by normalized value.
    """
    if matchers is None:
        matchers = default_matchers(config)

    bases = field_byte_offsets(subject, body)
    raw_matches: List[EntityMatch] = []
    for field, text in (("subject", subject), ("body", body)):
        if not text:
            continue
        base = bases[field]
        for matcher in matchers:
            for match in matcher.find(text, field):
                if base:
                    match = dataclasses.replace(match, position=match.position + base)
                raw_matches.append(match)

    merged = merge_entities_deterministic(raw_matches)
    logger.debug("Extracted %d entities (%d raw matches)", len(merged), len(raw_matches))
    return ExtractedEntities.from_matches(merged)
