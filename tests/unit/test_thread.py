"""
Unit tests for the thread analyzer.
"""
import pytest

from mailintel.analysis.thread import (
    analyze_thread,
    is_valid_message_id,
    parse_in_reply_to,
    parse_references,
)


class TestParseReferences:

    def test_bracketed_ids_in_order(self):
        refs = parse_references("<a@x.com> <b@x.com>\r\n <c@x.com>")
        assert refs == ("<a@x.com>", "<b@x.com>", "<c@x.com>")

    def test_duplicates_preserved(self):
        assert parse_references("<a@x.com> <a@x.com>") == ("<a@x.com>", "<a@x.com>")

    def test_unbracketed_tokens(self):
        assert parse_references("a@x.com b@x.com") == ("a@x.com", "b@x.com")

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_absent(self, value):
        assert parse_references(value) == ()


class TestMessageIds:

    def test_in_reply_to_takes_first_id(self):
        assert parse_in_reply_to("<p@x.com> (sent by Bob)") == "<p@x.com>"

    def test_in_reply_to_without_brackets(self):
        assert parse_in_reply_to("  p@x.com ") == "p@x.com"

    def test_in_reply_to_absent(self):
        assert parse_in_reply_to(None) is None

    @pytest.mark.parametrize("value, expected", [
        ("<abc@example.com>", True),
        ("  <abc@example.com>  ", True),
        ("abc@example.com", False),
        ("<no-at-sign>", False),
        ("<a@b@c>", False),
        ("", False),
        (None, False),
    ])
    def test_validity(self, value, expected):
        assert is_valid_message_id(value) is expected


class TestAnalyzeThread:

    def test_root_message(self):
        info = analyze_thread("<m@x.com>", None, None)
        assert info.depth == 0
        assert info.is_reply is False
        assert info.root_id is None
        assert info.message_id == "<m@x.com>"

    def test_depth_from_references(self):
        info = analyze_thread("<m3@x.com>", "<m1@x.com> <m2@x.com>", "<m2@x.com>")
        assert info.depth == 2
        assert info.references == ("<m1@x.com>", "<m2@x.com>")
        assert info.in_reply_to == "<m2@x.com>"
        assert info.root_id == "<m1@x.com>"
        assert info.is_reply is True

    def test_in_reply_to_only(self):
        info = analyze_thread(None, None, "<parent@x.com>")
        assert info.depth == 1
        assert info.root_id == "<parent@x.com>"

    def test_blank_message_id(self):
        assert analyze_thread("   ", None, None).message_id is None

    @pytest.mark.parametrize("references, in_reply_to", [
        (None, None),
        ("<a@x.com>", None),
        ("<a@x.com> <b@x.com> <c@x.com>", "<c@x.com>"),
        (None, "<p@x.com>"),
        ("garbage", None),
    ])
    def test_depth_matches_reference_count(self, references, in_reply_to):
        info = analyze_thread(None, references, in_reply_to)
        if info.references:
            assert info.depth == len(info.references)
        elif info.in_reply_to:
            assert info.depth == 1
        else:
            assert info.depth == 0
