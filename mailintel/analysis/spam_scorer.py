"""
Spam Indicator Scorer — rule-based parametric scorer.

Each indicator is an independent, side-effect-free predicate over a
SpamContext paired with a weight.  The score is the sum of the active
weights divided by the sum of all weights, clamped to [0, 1], so it only
grows as more indicators fire.

Indicators:
- display_name_mismatch: display name names a different address/domain
- subject_uppercase: mostly upper-case subject
- urgency_language / financial_lure: lure keywords in subject or body
- reply_to_mismatch: Reply-To on another domain than From
- excessive_urls: many URLs relative to the word count
- missing_message_id: Message-ID absent or malformed
- noreply_sender: automated/no-reply mailbox
- excessive_tracking: many tracking links
- authentication_failure: SPF/DKIM/DMARC reported "fail"

Weights are configurable (ParserConfig.spam_weights) and approximate.
"""
import logging
import re
from dataclasses import dataclass
from typing import Callable, Dict, Mapping, Optional

import numpy as np

from mailintel.analysis.thread import is_valid_message_id
from mailintel.config.constants import FINANCIAL_LURE_TERMS, URGENCY_LURE_TERMS
from mailintel.config.parser_config import DEFAULT_SPAM_WEIGHTS, ParserConfig
from mailintel.models.email import Body, SpamIndicator, SpamIndicators
from mailintel.models.entity import ExtractedEntities
from mailintel.parsing.headers import NormalizedHeaders

logger = logging.getLogger(__name__)

_EMBEDDED_ADDRESS_RE = re.compile(r"[\w.+-]+@([\w-]+(?:\.[\w-]+)+)")
_EMBEDDED_DOMAIN_RE = re.compile(r"\b((?:[a-z0-9-]+\.)+(?:com|net|org|io|co|info|biz|gov|edu|us|uk|de|it|fr))\b")


@dataclass(frozen=True)
class SpamContext:
    """Everything a spam check may look at."""

    headers: NormalizedHeaders
    body: Body
    entities: ExtractedEntities

    @property
    def text(self) -> str:
        """Subject and body, lower-cased."""
        return f"{self.headers.subject.original}\n{self.body.rendered_text}".lower()


SpamPredicate = Callable[[SpamContext, ParserConfig], bool]


@dataclass(frozen=True)
class SpamCheck:
    predicate: SpamPredicate
    weight: float


# ==========================================================================
# Predicates
# ==========================================================================

def display_name_mismatch(ctx: SpamContext, config: ParserConfig) -> bool:
    sender = ctx.headers.from_address
    if not sender.display_name or not sender.domain:
        return False
    name = sender.display_name.lower()

    for domain in _EMBEDDED_ADDRESS_RE.findall(name):
        if domain != sender.domain:
            return True
    for domain in _EMBEDDED_DOMAIN_RE.findall(_EMBEDDED_ADDRESS_RE.sub(" ", name)):
        if not (sender.domain == domain or sender.domain.endswith("." + domain)):
            return True
    return False


def subject_uppercase(ctx: SpamContext, config: ParserConfig) -> bool:
    letters = [ch for ch in ctx.headers.subject.original if ch.isalpha()]
    if len(letters) < config.subject_uppercase_min_letters:
        return False
    upper = sum(1 for ch in letters if ch.isupper())
    return upper / len(letters) >= config.subject_uppercase_ratio


def urgency_language(ctx: SpamContext, config: ParserConfig) -> bool:
    text = ctx.text
    return any(term in text for term in URGENCY_LURE_TERMS)


def financial_lure(ctx: SpamContext, config: ParserConfig) -> bool:
    text = ctx.text
    return any(term in text for term in FINANCIAL_LURE_TERMS)


def reply_to_mismatch(ctx: SpamContext, config: ParserConfig) -> bool:
    reply_to = ctx.headers.reply_to
    sender = ctx.headers.from_address
    if reply_to is None or not reply_to.domain or not sender.domain:
        return False
    return reply_to.domain != sender.domain


def excessive_urls(ctx: SpamContext, config: ParserConfig) -> bool:
    url_count = len(ctx.entities.urls)
    if url_count < config.min_urls_for_density:
        return False
    words = max(ctx.body.word_count, 1)
    return url_count / words >= config.url_density_threshold


def missing_message_id(ctx: SpamContext, config: ParserConfig) -> bool:
    return not is_valid_message_id(ctx.headers.message_id)


def noreply_sender(ctx: SpamContext, config: ParserConfig) -> bool:
    return ctx.headers.from_address.is_noreply()


def excessive_tracking(ctx: SpamContext, config: ParserConfig) -> bool:
    if config.tracking_url_threshold <= 0:
        return False
    tracking = sum(1 for url in ctx.entities.urls if url.detail("is_tracking"))
    return tracking >= config.tracking_url_threshold


def authentication_failure(ctx: SpamContext, config: ParserConfig) -> bool:
    return ctx.headers.summary.authentication.any_failed()


DEFAULT_SPAM_PREDICATES: Dict[str, SpamPredicate] = {
    "display_name_mismatch": display_name_mismatch,
    "subject_uppercase": subject_uppercase,
    "urgency_language": urgency_language,
    "financial_lure": financial_lure,
    "reply_to_mismatch": reply_to_mismatch,
    "excessive_urls": excessive_urls,
    "missing_message_id": missing_message_id,
    "noreply_sender": noreply_sender,
    "excessive_tracking": excessive_tracking,
    "authentication_failure": authentication_failure,
}


def build_spam_checks(
    config: ParserConfig,
    predicates: Optional[Mapping[str, SpamPredicate]] = None,
) -> Dict[str, SpamCheck]:
    """Pair each predicate with its configured weight."""
    if predicates is None:
        predicates = DEFAULT_SPAM_PREDICATES
    checks = {}
    for tag, predicate in predicates.items():
        weight = config.spam_weights.get(tag, DEFAULT_SPAM_WEIGHTS.get(tag, 0.0))
        checks[tag] = SpamCheck(predicate=predicate, weight=weight)
    return checks


class SpamScorer:
    """
    Parametric spam indicator scorer.

    Args:
        config: Weights and thresholds. Defaults to ParserConfig().
        checks: tag → SpamCheck mapping. Defaults to the built-in checks
            weighted from *config*.
    """

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        checks: Optional[Mapping[str, SpamCheck]] = None,
    ):
        self.config = config or ParserConfig()
        self.checks: Dict[str, SpamCheck] = dict(checks) if checks is not None else build_spam_checks(self.config)

    @property
    def total_weight(self) -> float:
        return sum(check.weight for check in self.checks.values())

    def score(self, ctx: SpamContext) -> SpamIndicators:
        """
        Evaluate every check against *ctx*.

        Returns:
            SpamIndicators with the active tags, their (tag, weight) pairs
            in check order and the normalized score.
        """
        active = [
            SpamIndicator(tag=tag, weight=check.weight)
            for tag, check in self.checks.items()
            if check.predicate(ctx, self.config)
        ]
        return SpamIndicators(
            flags=frozenset(indicator.tag for indicator in active),
            score=self.normalize(sum(indicator.weight for indicator in active)),
            indicators=tuple(active),
        )

    def normalize(self, active_weight: float) -> float:
        total = self.total_weight
        if total <= 0:
            return 0.0
        return float(np.clip(active_weight / total, 0.0, 1.0))
