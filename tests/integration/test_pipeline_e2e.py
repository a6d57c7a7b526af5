"""
End-to-end tests for parse_email: raw bytes → Email → validated record.
"""
import pytest

from mailintel.analysis.signature import Boundary, BoundaryDetector
from mailintel.config.parser_config import DEFAULT_SPAM_WEIGHTS, ParserConfig
from mailintel.entity_extraction.regex_matcher import EntityMatcher
from mailintel.errors import DecodeFailure, ErrorCode, MissingRequiredHeader
from mailintel.models.email import ContentType
from mailintel.models.entity import EntityKind
from mailintel.models.mime import BodyPart, DecodedMessage
from mailintel.parsing.output_builder import build_email_record
from mailintel.parsing.pipeline import parse_email
from mailintel.parsing.validation import validate_email_record


class ExplodingMatcher(EntityMatcher):
    kind = EntityKind.EMAIL

    def find(self, text, field="body"):
        raise RuntimeError("boom")


class InconsistentBoundary(BoundaryDetector):
    """Reports a boundary whose slices do not rebuild the body."""

    rule = "delimiter"

    def detect(self, text):
        return Boundary(content_end=len(text), signature_start=0, rule=self.rule)


class TestParseEmailScenarios:
    """Representative messages through the whole pipeline."""

    def test_simple_phone_message(self, simple_raw):
        email = parse_email("e2e-1", simple_raw)
        assert email.email_id == "e2e-1"
        assert email.from_address.address == "alice@example.com"
        assert email.subject.normalized == "Hello"
        assert email.body.rendered_text == "Call me at 555-1234"
        assert email.extracted.values_of(EntityKind.PHONE) == ("5551234",)
        assert email.extracted.phones[0].position == len("Hello\n") + 11
        assert email.thread.depth == 0
        assert email.signature_split.signature is None
        assert email.diagnostics == ()

    def test_signature_split(self, signature_raw):
        email = parse_email("e2e-2", signature_raw)
        split = email.signature_split
        assert split.content == "Thanks"
        assert split.signature == "John Smith\nAcme Inc."
        assert split.reconstruct() == email.body.rendered_text
        assert email.from_address.display_name == "John Smith"
        assert email.date.isoformat() == "2025-01-01T12:00:00+00:00"
        assert email.message_id == "<sig-001@acme.com>"
        assert "missing_message_id" not in email.spam.flags

    def test_reply_thread_depth(self, reply_raw):
        email = parse_email("e2e-3", reply_raw)
        assert email.thread.depth == 2
        assert email.thread.is_reply
        assert email.thread.root_id == "<root-000@acme.com>"
        assert email.subject.reply_depth == 1
        assert email.subject.normalized == "Proposal"

    def test_html_only_message(self, html_only_raw):
        email = parse_email("e2e-4", html_only_raw)
        text = email.body.rendered_text
        assert email.body.content_type == ContentType.HTML
        assert email.body.html is not None
        assert text.startswith("Hello\n\nWorld & friends")
        assert "<" not in text and "color" not in text
        assert email.extracted.values_of(EntityKind.URL) == ("https://shop.example.com/deals",)

    def test_multipart_message(self, multipart_raw):
        email = parse_email("e2e-5", multipart_raw)
        assert email.subject.original == "Café meeting"
        assert [a.address for a in email.to] == ["a@example.com", "bob@example.com"]
        assert email.to[1].display_name == "Smith, Bob"
        assert email.from_address.display_name == "Doe, Jane"
        assert email.body.content_type == ContentType.PLAIN_TEXT
        assert email.body.rendered_text.startswith("Plain version")
        assert email.body.has_attachments is True

    def test_spammy_message(self, spammy_raw):
        email = parse_email("e2e-6", spammy_raw)
        expected = {
            "display_name_mismatch",
            "subject_uppercase",
            "urgency_language",
            "financial_lure",
            "reply_to_mismatch",
            "excessive_urls",
            "missing_message_id",
            "authentication_failure",
        }
        assert email.spam.flags == frozenset(expected)
        total = sum(DEFAULT_SPAM_WEIGHTS.values())
        active = sum(DEFAULT_SPAM_WEIGHTS[tag] for tag in expected)
        assert email.spam.score == pytest.approx(active / total)

    def test_unparsable_date_kept_raw(self, raw_builder):
        raw = raw_builder([("From", "a@x.com"), ("Date", "someday soon")], "hi")
        email = parse_email("e2e-7", raw)
        assert email.date is None
        assert email.date_raw == "someday soon"


class TestFatalErrors:
    """Only decode failures and a missing From abort the parse."""

    def test_missing_from(self, raw_builder):
        raw = raw_builder([("To", "bob@example.org"), ("Subject", "Hi")], "body")
        with pytest.raises(MissingRequiredHeader) as exc_info:
            parse_email("e2e-err-1", raw)
        assert exc_info.value.code == ErrorCode.E_MISSING_HEADER

    def test_undecodable_bytes(self):
        with pytest.raises(DecodeFailure):
            parse_email("e2e-err-2", b"")

    def test_decoder_exception_wrapped(self):
        def bad_decoder(raw):
            raise ValueError("corrupt")

        with pytest.raises(DecodeFailure) as exc_info:
            parse_email("e2e-err-3", b"From: a@x.com\r\n\r\nhi", decoder=bad_decoder)
        assert "corrupt" in str(exc_info.value)

    def test_custom_decoder(self):
        def stub_decoder(raw):
            return DecodedMessage(
                header_items=(("From", "a@x.com"), ("Subject", "Stub")),
                body_parts=(BodyPart(content_type="text/plain", text="From a stub"),),
            )

        email = parse_email("e2e-stub", b"ignored", decoder=stub_decoder)
        assert email.subject.original == "Stub"
        assert email.body.rendered_text == "From a stub"


class TestDegradationAndValidation:

    def test_failing_stage_degrades(self, signature_raw):
        email = parse_email("e2e-8", signature_raw, matchers=[ExplodingMatcher()])
        assert email.extracted.is_empty()
        assert email.diagnostics == ("entities: RuntimeError: boom",)
        assert email.signature_split.signature == "John Smith\nAcme Inc."
        assert validate_email_record(build_email_record(email)).valid

    def test_validate_output_clean(self, signature_raw):
        email = parse_email("e2e-9", signature_raw, config=ParserConfig(validate_output=True))
        assert email.diagnostics == ()

    def test_validate_output_reports_errors(self, signature_raw):
        email = parse_email(
            "e2e-10",
            signature_raw,
            config=ParserConfig(validate_output=True),
            signature_detectors=[InconsistentBoundary()],
        )
        assert "validation: Signature split does not reconstruct the body" in email.diagnostics

    @pytest.mark.parametrize("fixture_name", [
        "simple_raw", "signature_raw", "reply_raw", "html_only_raw", "multipart_raw", "spammy_raw",
    ])
    def test_records_validate_and_are_deterministic(self, request, fixture_name):
        raw = request.getfixturevalue(fixture_name)
        first = build_email_record(parse_email("det", raw))
        second = build_email_record(parse_email("det", raw))
        assert first == second
        result = validate_email_record(first)
        assert result.valid, result.errors

    def test_multi_author_from(self, raw_builder):
        raw = raw_builder([("From", "a@x.com, b@y.com"), ("Subject", "Joint note")], "hi")
        email = parse_email("e2e-11", raw)
        assert email.from_address.address == "a@x.com"
        assert validate_email_record(build_email_record(email)).valid
