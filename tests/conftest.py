"""
Shared test fixtures for the parser test suite.
"""
import pytest

from mailintel.config.parser_config import ParserConfig
from mailintel.models.email import Address, Body, Subject
from mailintel.models.entity import ExtractedEntities
from mailintel.models.mime import HeaderMap
from mailintel.parsing.headers import NormalizedHeaders


def build_raw(headers, body="", newline="\r\n"):
    """Assemble raw message bytes from (name, value) pairs and a body."""
    head = newline.join(f"{name}: {value}" for name, value in headers)
    return (head + newline + newline + body).encode("utf-8")


# ==========================================================================
# Config
# ==========================================================================

@pytest.fixture
def config():
    return ParserConfig()


# ==========================================================================
# Raw messages
# ==========================================================================

@pytest.fixture
def raw_builder():
    return build_raw


@pytest.fixture
def simple_raw():
    return b"From: alice@example.com\r\nSubject: Hello\r\n\r\nCall me at 555-1234"


@pytest.fixture
def signature_raw():
    return build_raw(
        [
            ("From", "John Smith <john@acme.com>"),
            ("To", "bob@example.org"),
            ("Subject", "Proposal"),
            ("Date", "Thu, 01 Jan 2025 12:00:00 +0000"),
            ("Message-ID", "<sig-001@acme.com>"),
        ],
        "Thanks\n--\nJohn Smith\nAcme Inc.",
    )


@pytest.fixture
def reply_raw():
    return build_raw(
        [
            ("From", "Bob <bob@example.org>"),
            ("To", "John Smith <john@acme.com>"),
            ("Subject", "Re: Proposal"),
            ("Message-ID", "<reply-002@example.org>"),
            ("References", "<root-000@acme.com> <sig-001@acme.com>"),
        ],
        "Sounds good.",
    )


@pytest.fixture
def html_only_raw():
    return build_raw(
        [
            ("From", "news@shop.example.com"),
            ("Subject", "Weekly deals"),
            ("MIME-Version", "1.0"),
            ("Content-Type", "text/html; charset=utf-8"),
        ],
        "<html><head><style>p {color: red}</style></head>"
        "<body><h1>Hello</h1><p>World &amp; friends</p>"
        '<p><a href="https://shop.example.com/deals">See deals</a></p></body></html>',
    )


@pytest.fixture
def multipart_raw():
    return build_raw(
        [
            ("From", '"Doe, Jane" <jane@example.com>'),
            ("To", "a@example.com, \"Smith, Bob\" <bob@example.com>"),
            ("Subject", "=?utf-8?q?Caf=C3=A9_meeting?="),
            ("MIME-Version", "1.0"),
            ("Content-Type", 'multipart/mixed; boundary="XYZ"'),
        ],
        "--XYZ\r\n"
        'Content-Type: multipart/alternative; boundary="ALT"\r\n'
        "\r\n"
        "--ALT\r\n"
        "Content-Type: text/plain; charset=utf-8\r\n"
        "\r\n"
        "Plain version of the meeting note.\r\n"
        "--ALT\r\n"
        "Content-Type: text/html; charset=utf-8\r\n"
        "\r\n"
        "<p>HTML version of the meeting note.</p>\r\n"
        "--ALT--\r\n"
        "--XYZ\r\n"
        "Content-Type: application/pdf\r\n"
        'Content-Disposition: attachment; filename="agenda.pdf"\r\n'
        "Content-Transfer-Encoding: base64\r\n"
        "\r\n"
        "JVBERi0xLjQK\r\n"
        "--XYZ--\r\n",
    )


@pytest.fixture
def spammy_raw():
    return build_raw(
        [
            ("From", "\"security@bank.com\" <alerts@phish.example.net>"),
            ("Reply-To", "collect@other.example.org"),
            ("Subject", "URGENT ACTION REQUIRED NOW"),
            ("Authentication-Results", "mx.example.org; spf=fail smtp.mailfrom=phish.example.net; dkim=none"),
        ],
        "Act now! You have won the lottery. Send your bank details via wire transfer.\n"
        "https://a.example.net/x https://b.example.net/y https://c.example.net/z",
    )


# ==========================================================================
# Normalized headers (for analysis-level tests)
# ==========================================================================

@pytest.fixture
def make_headers():
    def _make(
        from_address=Address("john@acme.com", "John Smith"),
        subject="Hello",
        **kwargs,
    ):
        return NormalizedHeaders(
            from_address=from_address,
            subject=Subject(original=subject, normalized=subject),
            **kwargs,
        )

    return _make


@pytest.fixture
def plain_body():
    def _make(text):
        return Body(original=text, rendered_text=text)

    return _make


@pytest.fixture
def no_entities():
    return ExtractedEntities()


@pytest.fixture
def header_map():
    def _make(*pairs):
        return HeaderMap(tuple(pairs))

    return _make
