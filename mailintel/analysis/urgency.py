"""
Urgency Scoring — rule-based parametric scorer.

Computes message urgency by combining:
- Urgent/High keyword detection
- Deadline detection (regex)
- X-Priority / Importance header

Weights are configurable through ParserConfig.urgency_weights.
"""
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from mailintel.config.constants import DEADLINE_PATTERNS, HIGH_TERMS, URGENT_TERMS
from mailintel.config.parser_config import ParserConfig
from mailintel.models.email import Priority, Urgency

_DEADLINE_RES = [re.compile(pattern, re.IGNORECASE) for pattern in DEADLINE_PATTERNS]


def _term_count(terms: List[str], text: str) -> int:
    return sum(1 for term in terms if re.search(rf"\b{re.escape(term)}\b", text))


@dataclass(frozen=True)
class UrgencyResult:
    value: Urgency
    signals: Tuple[str, ...]
    raw_score: float


class UrgencyScorer:
    """
    Parametric urgency scorer.

    Bucket thresholds (ParserConfig):
        >= urgency_critical_threshold → CRITICAL
        >= urgency_high_threshold     → HIGH
        > 0                           → NORMAL
        low/lowest header priority    → LOW
    """

    def __init__(self, config: Optional[ParserConfig] = None):
        self.config = config or ParserConfig()
        self.weights = self.config.urgency_weights

    def score(self, subject: str, body: str, priority: Optional[Priority] = None) -> UrgencyResult:
        text = f"{subject} {body}".lower()
        raw_score = 0.0
        signals: List[str] = []

        # 1. Urgent terms
        urgent_count = _term_count(URGENT_TERMS, text)
        if urgent_count > 0:
            raw_score += self.weights.get("urgent_terms", 0.0) * urgent_count
            signals.append(f"urgent_keywords:{urgent_count}")

        # 2. High priority terms
        high_count = _term_count(HIGH_TERMS, text)
        if high_count > 0:
            raw_score += self.weights.get("high_terms", 0.0) * high_count
            signals.append(f"high_keywords:{high_count}")

        # 3. Deadline
        if any(pattern.search(text) for pattern in _DEADLINE_RES):
            raw_score += self.weights.get("deadline_signal", 0.0)
            signals.append("deadline_mentioned")

        # 4. Header priority
        if priority in (Priority.HIGHEST, Priority.HIGH):
            raw_score += self.weights.get("header_priority", 0.0)
            signals.append(f"header_priority:{priority.value}")

        # Bucketing
        if raw_score >= self.config.urgency_critical_threshold:
            value = Urgency.CRITICAL
        elif raw_score >= self.config.urgency_high_threshold:
            value = Urgency.HIGH
        elif raw_score == 0 and priority in (Priority.LOW, Priority.LOWEST):
            value = Urgency.LOW
            signals.append(f"header_priority:{priority.value}")
        else:
            value = Urgency.NORMAL

        return UrgencyResult(value=value, signals=tuple(signals), raw_score=raw_score)
