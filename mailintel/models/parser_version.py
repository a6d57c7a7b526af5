"""
ParserVersion — frozen dataclass for deterministic reproducibility.

Every parsed Email carries the full ParserVersion so that extracted entities
and spam scores can be traced back to the exact rule set that produced them.
"""
from dataclasses import dataclass

from mailintel.config.constants import (
    EXTRACTOR_VERSION,
    PARSER_VERSION,
    SCHEMA_VERSION,
    SIGNATURE_RULES_VERSION,
    SPAM_RULES_VERSION,
)


@dataclass(frozen=True)
class ParserVersion:
    """Contract of version to guarantee repeatability."""

    parserversion: str = PARSER_VERSION
    extractorversion: str = EXTRACTOR_VERSION
    signatureversion: str = SIGNATURE_RULES_VERSION
    spamrulesversion: str = SPAM_RULES_VERSION
    schemaversion: str = SCHEMA_VERSION

    def to_dict(self) -> dict:
        return {
            "parserversion": self.parserversion,
            "extractorversion": self.extractorversion,
            "signatureversion": self.signatureversion,
            "spamrulesversion": self.spamrulesversion,
            "schemaversion": self.schemaversion,
        }

    def __repr__(self) -> str:
        return f"Parser-{self.parserversion}-{self.spamrulesversion}"
