"""
Unit tests for the signature separator.
"""
import pytest

from mailintel.analysis.signature import (
    DelimiterBoundary,
    SignOffBoundary,
    split_signature,
)


class TestDelimiterBoundary:
    """Tests for "--" delimited signatures."""

    def test_standard_delimiter(self):
        split = split_signature("Thanks\n--\nJohn Smith\nAcme Inc.")
        assert split.content == "Thanks"
        assert split.separator == "\n--\n"
        assert split.signature == "John Smith\nAcme Inc."
        assert split.rule == "delimiter"

    def test_rfc3676_delimiter_with_trailing_space(self):
        split = split_signature("Body text\n\n-- \nJane\n")
        assert split.content == "Body text"
        assert split.signature == "Jane\n"

    def test_last_delimiter_wins(self):
        text = "Intro\n--\nquoted sig\n\nMore text\n--\nReal Sig"
        split = split_signature(text)
        assert split.signature == "Real Sig"
        assert split.content == "Intro\n--\nquoted sig\n\nMore text"

    def test_trailing_delimiter_ignored(self):
        assert DelimiterBoundary().detect("Body\n--\n\n") is None

    def test_three_dashes_not_a_delimiter(self):
        split = split_signature("Body\n---\nnot a signature")
        assert split.signature is None


class TestSignOffBoundary:
    """Tests for sign-off and "Sent from my" detection."""

    def test_sign_off_followed_by_name(self):
        text = "Hi Bob,\n\nSee attached.\n\nBest regards,\nJane Doe\nSales"
        split = split_signature(text)
        assert split.content == "Hi Bob,\n\nSee attached."
        assert split.separator == "\n\n"
        assert split.signature == "Best regards,\nJane Doe\nSales"
        assert split.rule == "sign_off"

    def test_sent_from_device(self):
        split = split_signature("Looks fine.\n\nSent from my iPhone")
        assert split.content == "Looks fine."
        assert split.signature == "Sent from my iPhone"
        assert split.rule == "sign_off"

    def test_sign_off_without_name_ignored(self):
        assert split_signature("Thanks\nfor the update, will check.").signature is None

    def test_sign_off_outside_window_ignored(self):
        lines = ["Regards,", "Jane"] + [f"line {i}" for i in range(10)]
        assert SignOffBoundary(max_lines=5).detect("\n".join(lines)) is None

    def test_delimiter_takes_precedence(self):
        split = split_signature("Text\n\nCheers,\nJane\n--\nJane Doe | Acme")
        assert split.rule == "delimiter"
        assert split.signature == "Jane Doe | Acme"


class TestSplitSignature:
    """Tests for split_signature as a whole."""

    def test_no_signature(self):
        split = split_signature("Just a short note.")
        assert split.content == "Just a short note."
        assert split.signature is None
        assert split.separator == ""
        assert split.rule is None

    def test_empty_body(self):
        split = split_signature("")
        assert split.content == ""
        assert split.signature is None

    def test_custom_detectors(self):
        split = split_signature("Thanks\n--\nJohn", detectors=[SignOffBoundary()])
        assert split.signature is None

    @pytest.mark.parametrize("text", [
        "Thanks\n--\nJohn Smith\nAcme Inc.",
        "Body text\r\n\r\n-- \r\nJane\r\n",
        "Hi,\n\nok\n\nKind regards,\nMaria Garcia\n",
        "Looks fine.\n\n\nSent from my iPhone\n",
        "Nothing to split here.",
        "",
    ])
    def test_reconstruction_is_exact(self, text):
        split = split_signature(text)
        assert split.content + split.separator + (split.signature or "") == text
        assert split.reconstruct() == text
