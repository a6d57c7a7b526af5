"""
Unit tests for the output builder (Email → JSON-ready record).
"""
import dataclasses
import json

from mailintel.models.email import CategoryHint, HeaderSummary, MessageMetadata, SpamIndicators, Urgency
from mailintel.parsing.output_builder import build_email_record, build_header_summary, build_metadata
from mailintel.parsing.pipeline import parse_email


class TestBuildEmailRecord:
    """Tests for build_email_record."""

    def test_simple_record(self, simple_raw):
        record = build_email_record(parse_email("e-1", simple_raw))
        assert record["email_id"] == "e-1"
        assert record["from"] == {"display_name": None, "address": "alice@example.com"}
        assert record["to"] == []
        assert record["reply_to"] is None
        assert record["subject"]["normalized"] == "Hello"
        assert record["body"]["content_type"] == "text/plain"
        assert record["body"]["has_html"] is False
        assert [m["normalized_value"] for m in record["entities"]["phone"]] == ["5551234"]
        assert record["diagnostics"] == {"warnings": []}

    def test_json_serializable(self, signature_raw):
        record = build_email_record(parse_email("e-2", signature_raw))
        restored = json.loads(json.dumps(record))
        assert restored == record
        assert record["date"] == "2025-01-01T12:00:00+00:00"

    def test_signature_section(self, signature_raw):
        record = build_email_record(parse_email("e-3", signature_raw))
        assert record["signature"] == {
            "content": "Thanks",
            "signature": "John Smith\nAcme Inc.",
            "separator": "\n--\n",
            "rule": "delimiter",
        }

    def test_spam_flags_sorted_and_score_clamped(self, simple_raw):
        email = parse_email("e-4", simple_raw)
        email = dataclasses.replace(
            email, spam=SpamIndicators(flags=frozenset({"z_flag", "a_flag"}), score=1.7)
        )
        record = build_email_record(email)
        assert record["spam"]["flags"] == ["a_flag", "z_flag"]
        assert record["spam"]["score"] == 1.0

    def test_thread_section(self, reply_raw):
        thread = build_email_record(parse_email("e-5", reply_raw))["thread"]
        assert thread["depth"] == 2
        assert thread["is_reply"] is True
        assert thread["references"] == ["<root-000@acme.com>", "<sig-001@acme.com>"]

    def test_deterministic(self, multipart_raw):
        first = build_email_record(parse_email("e-6", multipart_raw))
        second = build_email_record(parse_email("e-6", multipart_raw))
        assert json.dumps(first, sort_keys=True) == json.dumps(second, sort_keys=True)


class TestSectionBuilders:

    def test_header_summary_custom_grouped(self):
        summary = HeaderSummary(custom=(("X-Tag", "a"), ("x-tag", "b"), ("X-Other", "c")))
        built = build_header_summary(summary)
        assert built["custom"] == {"x-tag": ["a", "b"], "x-other": ["c"]}
        assert built["authentication"] == {"spf": None, "dkim": None, "dmarc": None}
        assert built["priority"] is None

    def test_metadata_confidence_clamped(self):
        meta = MessageMetadata(
            urgency=Urgency.HIGH,
            category_hints=(CategoryHint("lead", 1.4, "test"),),
        )
        built = build_metadata(meta)
        assert built["urgency"] == "high"
        assert built["category_hints"][0]["confidence"] == 1.0
        assert built["sentiment"] == "neutral"
