"""
Unit tests for mailintel.parsing.metrics.

Counters are process-global, so assertions compare sample values before
and after the call under test.
"""
from __future__ import annotations

import pytest
from prometheus_client import REGISTRY

from mailintel.errors import MissingRequiredHeader
from mailintel.parsing import metrics
from mailintel.parsing.pipeline import parse_email


def _sample(name: str, **labels) -> float:
    return REGISTRY.get_sample_value(name, labels) or 0.0


class TestMetricHelpers:
    """Every helper increments the expected series."""

    def test_public_symbols(self):
        for name in (
            "record_parse_outcome",
            "record_degraded_stage",
            "record_spam_flags",
            "record_entities",
            "timed_stage",
            "PARSE_OUTCOMES",
            "DEGRADED_STAGES",
            "SPAM_FLAGS",
            "ENTITIES_EXTRACTED",
            "STAGE_LATENCY",
        ):
            assert hasattr(metrics, name), f"Missing public symbol: {name}"

    def test_record_parse_outcome(self):
        before = _sample("mailintel_parse_total", outcome="unit_test")
        metrics.record_parse_outcome("unit_test")
        assert _sample("mailintel_parse_total", outcome="unit_test") == before + 1

    def test_record_degraded_stage(self):
        before = _sample("mailintel_degraded_stage_total", stage="unit_stage")
        metrics.record_degraded_stage("unit_stage")
        assert _sample("mailintel_degraded_stage_total", stage="unit_stage") == before + 1

    def test_record_spam_flags(self):
        before = _sample("mailintel_spam_flags_total", tag="unit_flag")
        metrics.record_spam_flags(["unit_flag", "unit_flag"])
        assert _sample("mailintel_spam_flags_total", tag="unit_flag") == before + 2

    def test_record_entities_skips_zero(self):
        before = _sample("mailintel_entities_extracted_total", kind="unit_kind")
        metrics.record_entities("unit_kind", 0)
        metrics.record_entities("unit_kind", 3)
        assert _sample("mailintel_entities_extracted_total", kind="unit_kind") == before + 3

    def test_timed_stage_observes(self):
        before = _sample("mailintel_stage_processing_seconds_count", stage="unit_timed")
        with metrics.timed_stage("unit_timed"):
            pass
        assert _sample("mailintel_stage_processing_seconds_count", stage="unit_timed") == before + 1


class TestPipelineMetrics:
    """parse_email reports outcomes and extracted entities."""

    def test_ok_outcome_and_entities(self, simple_raw):
        ok_before = _sample("mailintel_parse_total", outcome="ok")
        phones_before = _sample("mailintel_entities_extracted_total", kind="phone")
        parse_email("m-1", simple_raw)
        assert _sample("mailintel_parse_total", outcome="ok") == ok_before + 1
        assert _sample("mailintel_entities_extracted_total", kind="phone") == phones_before + 1

    def test_error_outcome(self):
        before = _sample("mailintel_parse_total", outcome="E_MISSING_HEADER")
        with pytest.raises(MissingRequiredHeader):
            parse_email("m-2", b"Subject: no sender\r\n\r\nbody")
        assert _sample("mailintel_parse_total", outcome="E_MISSING_HEADER") == before + 1
