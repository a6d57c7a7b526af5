"""
Record Validation — schema conformance plus consistency checks.

Stages:
    1. Schema conformance (jsonschema)
    2. Consistency rules (thread depth, signature round-trip, entity spans)
    3. Quality warnings (empty body, missing date)
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from jsonschema import ValidationError, validate

from mailintel.config.schemas import EMAIL_RECORD_SCHEMA

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    data: Optional[dict] = None


def validate_email_record(record: dict) -> ValidationResult:
    """
    Validate a record produced by build_email_record.

    Returns:
        ValidationResult with valid flag, errors, warnings and the record.
    """
    errors: List[str] = []
    warnings: List[str] = []

    # ------------------------------------------------------------------
    # Stage 1: Schema validation
    # ------------------------------------------------------------------
    try:
        validate(instance=record, schema=EMAIL_RECORD_SCHEMA)
    except ValidationError as e:
        path = "/".join(str(p) for p in e.absolute_path)
        errors.append(f"Schema violation at '{path}': {e.message}")
        return ValidationResult(valid=False, errors=errors, warnings=warnings)

    # ------------------------------------------------------------------
    # Stage 2: Consistency rules
    # ------------------------------------------------------------------
    errors.extend(check_thread_depth(record["thread"]))
    errors.extend(check_signature_roundtrip(record["signature"], record["body"]["rendered_text"]))
    errors.extend(check_entity_order(record["entities"]))

    # ------------------------------------------------------------------
    # Stage 3: Quality warnings
    # ------------------------------------------------------------------
    if not record["body"]["rendered_text"].strip():
        warnings.append("Empty body")
    if record.get("date") is None:
        warnings.append("Date missing or unparsable")

    valid = len(errors) == 0
    if not valid:
        logger.warning("Email record %s failed validation: %s", record.get("email_id"), errors)
    return ValidationResult(valid=valid, errors=errors, warnings=warnings, data=record)


def check_thread_depth(thread: dict) -> List[str]:
    refs = thread["references"]
    depth = thread["depth"]
    if not refs and thread["in_reply_to"] is None:
        expected = 0
    elif refs:
        expected = max(1, len(refs))
    else:
        expected = 1
    if depth != expected:
        return [f"Thread depth {depth} inconsistent with headers (expected {expected})"]
    return []


def check_signature_roundtrip(signature: dict, rendered_text: str) -> List[str]:
    rebuilt = signature["content"] + signature["separator"] + (signature["signature"] or "")
    if rebuilt != rendered_text:
        return ["Signature split does not reconstruct the body"]
    if signature["signature"] is None and signature["separator"]:
        return ["Separator present without a signature"]
    return []


def check_entity_order(entities: dict) -> List[str]:
    """Per kind: unique normalized values, byte positions ascending, spans well-formed."""
    errors: List[str] = []
    for kind, matches in entities.items():
        seen = set()
        last_position = -1
        for match in matches:
            position = match.get("position")
            if position is not None:
                if position < last_position:
                    errors.append(f"{kind} entities out of position order at {position}")
                last_position = position
            value = match["normalized_value"]
            if value in seen:
                errors.append(f"Duplicate {kind} entity: {value!r}")
            seen.add(value)
            if match["end"] <= match["start"]:
                errors.append(f"Empty span for {kind} entity {value!r}")
    return errors
