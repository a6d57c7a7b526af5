"""
ParserConfig — every heuristic tuning knob of the parser in one model.

Weights and thresholds are approximate by design: they are starting points
for spam scoring, urgency bucketing and the lower-confidence entity
heuristics, and callers are expected to override them for their own mail.
Defaults for the thresholds come from the environment (see settings.py).
"""
from __future__ import annotations

from typing import Dict

from pydantic import BaseModel, Field, field_validator

from mailintel.config import settings

# Default weights (can be overridden per ParserConfig)
DEFAULT_SPAM_WEIGHTS: Dict[str, float] = {
    "display_name_mismatch": 0.25,
    "subject_uppercase": 0.10,
    "urgency_language": 0.15,
    "financial_lure": 0.20,
    "reply_to_mismatch": 0.15,
    "excessive_urls": 0.10,
    "missing_message_id": 0.10,
    "noreply_sender": 0.05,
    "excessive_tracking": 0.10,
    "authentication_failure": 0.20,
}

DEFAULT_URGENCY_WEIGHTS: Dict[str, float] = {
    "urgent_terms": 3.0,
    "high_terms": 1.5,
    "deadline_signal": 2.0,
    "header_priority": 3.0,
}


class ParserConfig(BaseModel):
    """All tunable parameters with sensible defaults."""

    # --- Spam scoring ---
    spam_weights: Dict[str, float] = Field(default_factory=lambda: dict(DEFAULT_SPAM_WEIGHTS))
    subject_uppercase_ratio: float = Field(settings.SPAM_UPPERCASE_RATIO, ge=0.0, le=1.0)
    subject_uppercase_min_letters: int = Field(6, ge=1)
    min_urls_for_density: int = Field(settings.SPAM_MIN_URLS, ge=1)
    url_density_threshold: float = Field(settings.SPAM_URL_DENSITY, ge=0.0)
    tracking_url_threshold: int = Field(settings.SPAM_TRACKING_URLS, ge=0)

    # --- Urgency ---
    urgency_weights: Dict[str, float] = Field(default_factory=lambda: dict(DEFAULT_URGENCY_WEIGHTS))
    urgency_critical_threshold: float = Field(6.0, ge=0.0)
    urgency_high_threshold: float = Field(3.0, ge=0.0)

    # --- Body / Signature ---
    html_include_link_targets: bool = settings.HTML_INCLUDE_LINK_TARGETS
    signature_max_lines: int = Field(settings.SIGNATURE_MAX_LINES, ge=1)

    # --- Entity heuristics (lower confidence) ---
    name_max_words: int = Field(3, ge=1, le=5)
    company_max_words: int = Field(4, ge=1, le=6)
    name_confidence: float = Field(0.6, ge=0.0, le=1.0)
    company_confidence: float = Field(0.7, ge=0.0, le=1.0)

    # --- Output ---
    validate_output: bool = settings.VALIDATE_OUTPUT

    @field_validator("spam_weights", "urgency_weights")
    @classmethod
    def validate_weights(cls, v: Dict[str, float]) -> Dict[str, float]:
        negative = sorted(tag for tag, weight in v.items() if weight < 0)
        if negative:
            raise ValueError(f"weights must be non-negative, got negative values for {negative}")
        return v
