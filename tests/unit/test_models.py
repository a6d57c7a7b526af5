"""
Unit tests for the data models.
"""
import dataclasses

import pytest
from pydantic import ValidationError

from mailintel.models.email import (
    Address,
    AuthenticationResults,
    AuthResult,
    Body,
    PersonName,
    SignatureSplit,
    ThreadInfo,
)
from mailintel.models.entity import EntityKind, EntityMatch, ExtractedEntities
from mailintel.models.mime import BodyPart, ContentType
from mailintel.models.parser_version import ParserVersion


class TestParserVersion:

    def test_frozen(self):
        version = ParserVersion()
        with pytest.raises(dataclasses.FrozenInstanceError):
            version.parserversion = "other"

    def test_to_dict_keys(self):
        assert set(ParserVersion().to_dict()) == {
            "parserversion", "extractorversion", "signatureversion",
            "spamrulesversion", "schemaversion",
        }

    def test_equality(self):
        assert ParserVersion() == ParserVersion()
        assert ParserVersion(parserversion="x") != ParserVersion()


class TestAddressModel:

    def test_domain_lowercased(self):
        assert Address("Bob@Example.COM").domain == "example.com"

    def test_address_without_at(self):
        addr = Address("undisclosed")
        assert addr.domain == ""
        assert addr.local_part == "undisclosed"

    @pytest.mark.parametrize("address, expected", [
        ("noreply@x.com", True),
        ("do-not-reply@x.com", True),
        ("mailer-daemon@x.com", True),
        ("jane@x.com", False),
    ])
    def test_is_noreply(self, address, expected):
        assert Address(address).is_noreply() is expected

    def test_freemail(self):
        assert Address("someone@gmail.com").is_freemail()
        assert not Address("someone@acme.com").is_freemail()

    def test_person_name(self):
        assert PersonName.parse('"Jane"') == PersonName(full="Jane", first="Jane")
        assert PersonName.parse("Mary Ann Smith").last == "Smith"
        assert PersonName.parse("  ").full == ""


class TestBodyAndSplit:

    def test_counts(self):
        body = Body(original="a b\nc", rendered_text="a b\nc")
        assert body.word_count == 3
        assert body.line_count == 2
        assert body.char_count == 5

    def test_reconstruct_without_signature(self):
        assert SignatureSplit(content="hello").reconstruct() == "hello"


class TestThreadInfoModel:

    def test_defaults(self):
        info = ThreadInfo()
        assert info.depth == 0
        assert not info.is_reply
        assert info.root_id is None


class TestAuthenticationResults:

    def test_any_failed(self):
        assert not AuthenticationResults().any_failed()
        assert not AuthenticationResults(spf=AuthResult.SOFTFAIL).any_failed()
        assert AuthenticationResults(dmarc=AuthResult.FAIL).any_failed()


class TestEntityModels:

    def test_details_and_to_dict(self):
        match = EntityMatch(
            EntityKind.URL, "www.x.com", "http://www.x.com", 0, 9, 0,
            details=(("domain", "x.com"), ("is_tracking", False)),
        )
        assert match.detail("domain") == "x.com"
        assert match.detail("missing", "dflt") == "dflt"
        data = match.to_dict()
        assert data["kind"] == "url"
        assert data["details"] == {"domain": "x.com", "is_tracking": False}

    def test_extracted_entities_grouping(self):
        email = EntityMatch(EntityKind.EMAIL, "a@x.com", "a@x.com", 0, 7, 0)
        phone = EntityMatch(EntityKind.PHONE, "555-1234", "5551234", 8, 16, 8)
        entities = ExtractedEntities.from_matches([email, phone])
        assert entities.emails == (email,)
        assert entities[EntityKind.PHONE] == (phone,)
        assert entities.total_count() == 2
        assert set(entities.to_dict()) == {kind.value for kind in EntityKind}

    def test_empty(self):
        assert ExtractedEntities().is_empty()


class TestBodyPart:

    def test_parameters_stripped(self):
        part = BodyPart(content_type="TEXT/HTML; charset=utf-8", text="<p>x</p>")
        assert part.content_type == ContentType.HTML

    def test_unsupported_type_rejected(self):
        with pytest.raises(ValidationError):
            BodyPart(content_type="application/pdf", text="")

    def test_frozen(self):
        part = BodyPart(content_type="text/plain", text="x")
        with pytest.raises(ValidationError):
            part.text = "y"
