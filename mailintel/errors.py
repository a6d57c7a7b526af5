"""
Error codes and exception hierarchy for the parser.

Only two conditions abort a parse: the MIME collaborator could not decode
the bytes at all, or the From header is missing.  Everything else degrades
to empty/default values and is reported through ``Email.diagnostics``.
"""
from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Stable error identifiers, values equal to their names."""

    E_DECODE_FAILED = "E_DECODE_FAILED"
    E_MISSING_HEADER = "E_MISSING_HEADER"


class ParseError(Exception):
    """Base class for fatal parse failures."""

    code: ErrorCode

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class DecodeFailure(ParseError):
    """The raw bytes are not a structurally valid message."""

    code = ErrorCode.E_DECODE_FAILED


class MissingRequiredHeader(ParseError):
    """A header the parser cannot work without is absent or blank."""

    code = ErrorCode.E_MISSING_HEADER

    def __init__(self, header: str) -> None:
        super().__init__(f"Missing required header: {header}")
        self.header = header
