"""
Message metadata — urgency, category hints, automated / mailing-list flags
and a keyword sentiment hint.
"""
import re
from typing import List, Optional

from mailintel.analysis.urgency import UrgencyScorer
from mailintel.config.constants import NEGATIVE_TERMS, POSITIVE_TERMS
from mailintel.models.email import Body, CategoryHint, MessageMetadata, Sentiment
from mailintel.models.entity import ExtractedEntities
from mailintel.parsing.headers import NormalizedHeaders


def detect_sentiment(text: str) -> Sentiment:
    """Positive/negative keyword hint; both present → MIXED."""
    lower = text.lower()
    positive = any(re.search(rf"\b{re.escape(term)}", lower) for term in POSITIVE_TERMS)
    negative = any(re.search(rf"\b{re.escape(term)}", lower) for term in NEGATIVE_TERMS)
    if positive and negative:
        return Sentiment.MIXED
    if positive:
        return Sentiment.POSITIVE
    if negative:
        return Sentiment.NEGATIVE
    return Sentiment.NEUTRAL


def category_hints(headers: NormalizedHeaders, entities: ExtractedEntities) -> List[CategoryHint]:
    hints = []
    if headers.summary.list_unsubscribe is not None:
        hints.append(CategoryHint("newsletter", 0.9, "Has List-Unsubscribe header"))
    if headers.from_address.is_noreply():
        hints.append(CategoryHint("automated", 0.8, "From no-reply address"))
    if entities.phones and entities.companies:
        hints.append(CategoryHint("lead", 0.6, "Contains contact information"))
    return hints


def analyze_metadata(
    headers: NormalizedHeaders,
    body: Body,
    entities: ExtractedEntities,
    urgency_scorer: Optional[UrgencyScorer] = None,
) -> MessageMetadata:
    scorer = urgency_scorer or UrgencyScorer()
    urgency = scorer.score(headers.subject.original, body.rendered_text, headers.summary.priority)
    summary = headers.summary

    return MessageMetadata(
        urgency=urgency.value,
        urgency_signals=urgency.signals,
        category_hints=tuple(category_hints(headers, entities)),
        is_automated=headers.from_address.is_noreply() or summary.mailer is not None,
        is_mailing_list=summary.list_unsubscribe is not None or summary.list_id is not None,
        sentiment=detect_sentiment(body.rendered_text),
    )
