"""
Prometheus Metrics — parser observability.

Exposes counters and a histogram for:
- Parse outcomes (ok / error code)
- Degraded stages
- Spam indicator flags
- Extracted entities per kind
- Stage processing latency

Usage
-----
    from mailintel.parsing.metrics import record_parse_outcome, timed_stage

    with timed_stage("entities"):
        entities = extract_all_entities(...)

    record_parse_outcome("ok")
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Generator, Iterable

from prometheus_client import Counter, Histogram

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Metric definitions
# ---------------------------------------------------------------------------

# Parse calls by outcome: "ok" or an ErrorCode value.
PARSE_OUTCOMES: Counter = Counter(
    "mailintel_parse_total",
    "Parse calls by outcome",
    ["outcome"],
)

# Non-fatal stage failures replaced by defaults.
DEGRADED_STAGES: Counter = Counter(
    "mailintel_degraded_stage_total",
    "Stages that failed and fell back to an empty/default value",
    ["stage"],
)

SPAM_FLAGS: Counter = Counter(
    "mailintel_spam_flags_total",
    "Spam indicator flags raised",
    ["tag"],
)

ENTITIES_EXTRACTED: Counter = Counter(
    "mailintel_entities_extracted_total",
    "Entities extracted, by kind",
    ["kind"],
)

# Processing latency per stage (seconds).
STAGE_LATENCY: Histogram = Histogram(
    "mailintel_stage_processing_seconds",
    "Processing time per parser stage in seconds",
    ["stage"],
    buckets=(0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0),
)


# ---------------------------------------------------------------------------
# Convenience helpers
# ---------------------------------------------------------------------------

def record_parse_outcome(outcome: str) -> None:
    """Increment the parse counter for *outcome*."""
    PARSE_OUTCOMES.labels(outcome=outcome).inc()


def record_degraded_stage(stage: str) -> None:
    DEGRADED_STAGES.labels(stage=stage).inc()


def record_spam_flags(tags: Iterable[str]) -> None:
    for tag in tags:
        SPAM_FLAGS.labels(tag=tag).inc()


def record_entities(kind: str, count: int) -> None:
    if count > 0:
        ENTITIES_EXTRACTED.labels(kind=kind).inc(count)


@contextmanager
def timed_stage(stage: str) -> Generator[None, None, None]:
    """
    Context manager that records stage processing latency.

    Usage::

        with timed_stage("spam"):
            spam = scorer.score(ctx)
    """
    with STAGE_LATENCY.labels(stage=stage).time():
        yield
