"""
JSON Schema for the JSON-ready email record produced by
``mailintel.parsing.output_builder.build_email_record``.
"""
from mailintel.models.email import AuthResult, Priority, Sentiment, Urgency
from mailintel.models.entity import EntityKind

_NULLABLE_STRING: dict = {"type": ["string", "null"]}

_ADDRESS_SCHEMA: dict = {
    "type": "object",
    "additionalProperties": False,
    "required": ["display_name", "address"],
    "properties": {
        "display_name": _NULLABLE_STRING,
        "address": {"type": "string", "minLength": 1},
    },
}

_ENTITY_SCHEMA: dict = {
    "type": "object",
    "required": ["kind", "raw_text", "normalized_value", "position", "start", "end", "field", "source", "confidence"],
    "properties": {
        "kind": {"type": "string", "enum": [kind.value for kind in EntityKind]},
        "raw_text": {"type": "string", "minLength": 1},
        "normalized_value": {"type": "string"},
        "position": {"type": "integer", "minimum": 0},
        "start": {"type": "integer", "minimum": 0},
        "end": {"type": "integer", "minimum": 0},
        "field": {"type": "string", "enum": ["subject", "body"]},
        "source": {"type": "string", "enum": ["regex", "heuristic"]},
        "confidence": {"type": "number", "minimum": 0, "maximum": 1},
        "details": {"type": "object"},
    },
}

_AUTH_VALUE: dict = {"enum": [result.value for result in AuthResult] + [None]}


EMAIL_RECORD_SCHEMA: dict = {
    "type": "object",
    "required": [
        "email_id",
        "message_id",
        "parser_version",
        "from",
        "to",
        "cc",
        "subject",
        "body",
        "signature",
        "entities",
        "thread",
        "spam",
        "diagnostics",
    ],
    "properties": {
        "email_id": {"type": "string"},
        "message_id": _NULLABLE_STRING,
        "parser_version": {
            "type": "object",
            "required": ["parserversion", "extractorversion", "spamrulesversion", "schemaversion"],
        },
        "from": _ADDRESS_SCHEMA,
        "to": {"type": "array", "items": _ADDRESS_SCHEMA},
        "cc": {"type": "array", "items": _ADDRESS_SCHEMA},
        "bcc": {"type": "array", "items": _ADDRESS_SCHEMA},
        "reply_to": {"anyOf": [_ADDRESS_SCHEMA, {"type": "null"}]},
        "date": _NULLABLE_STRING,
        "date_raw": _NULLABLE_STRING,
        "subject": {
            "type": "object",
            "required": ["original", "normalized", "reply_depth", "is_forward"],
            "properties": {
                "original": {"type": "string"},
                "normalized": {"type": "string"},
                "reply_depth": {"type": "integer", "minimum": 0},
                "is_forward": {"type": "boolean"},
            },
        },
        "body": {
            "type": "object",
            "required": ["content_type", "rendered_text", "has_html", "has_attachments"],
            "properties": {
                "content_type": {"type": "string", "enum": ["text/plain", "text/html"]},
                "rendered_text": {"type": "string"},
                "has_html": {"type": "boolean"},
                "has_attachments": {"type": "boolean"},
                "word_count": {"type": "integer", "minimum": 0},
                "char_count": {"type": "integer", "minimum": 0},
                "line_count": {"type": "integer", "minimum": 0},
            },
        },
        "signature": {
            "type": "object",
            "required": ["content", "signature", "separator", "rule"],
            "properties": {
                "content": {"type": "string"},
                "signature": _NULLABLE_STRING,
                "separator": {"type": "string"},
                "rule": {"enum": ["delimiter", "sign_off", None]},
            },
        },
        "entities": {
            "type": "object",
            "required": [kind.value for kind in EntityKind],
            "additionalProperties": False,
            "properties": {
                kind.value: {"type": "array", "items": _ENTITY_SCHEMA} for kind in EntityKind
            },
        },
        "thread": {
            "type": "object",
            "required": ["message_id", "references", "in_reply_to", "depth", "is_reply"],
            "properties": {
                "message_id": _NULLABLE_STRING,
                "references": {"type": "array", "items": {"type": "string"}},
                "in_reply_to": _NULLABLE_STRING,
                "depth": {"type": "integer", "minimum": 0},
                "is_reply": {"type": "boolean"},
            },
        },
        "spam": {
            "type": "object",
            "required": ["flags", "score", "indicators"],
            "properties": {
                "flags": {"type": "array", "items": {"type": "string"}, "uniqueItems": True},
                "score": {"type": "number", "minimum": 0, "maximum": 1},
                "indicators": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "required": ["tag", "weight"],
                        "properties": {
                            "tag": {"type": "string"},
                            "weight": {"type": "number", "minimum": 0},
                        },
                    },
                },
            },
        },
        "header_summary": {
            "type": "object",
            "properties": {
                "content_type": _NULLABLE_STRING,
                "mailer": _NULLABLE_STRING,
                "priority": {"enum": [p.value for p in Priority] + [None]},
                "list_unsubscribe": _NULLABLE_STRING,
                "list_id": _NULLABLE_STRING,
                "authentication": {
                    "type": "object",
                    "properties": {"spf": _AUTH_VALUE, "dkim": _AUTH_VALUE, "dmarc": _AUTH_VALUE},
                },
                "custom": {"type": "object"},
            },
        },
        "metadata": {
            "type": "object",
            "required": ["urgency", "category_hints", "is_automated", "is_mailing_list", "sentiment"],
            "properties": {
                "urgency": {"type": "string", "enum": [u.value for u in Urgency]},
                "urgency_signals": {"type": "array", "items": {"type": "string"}},
                "category_hints": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "required": ["category", "confidence", "reason"],
                        "properties": {
                            "category": {"type": "string"},
                            "confidence": {"type": "number", "minimum": 0, "maximum": 1},
                            "reason": {"type": "string"},
                        },
                    },
                },
                "is_automated": {"type": "boolean"},
                "is_mailing_list": {"type": "boolean"},
                "sentiment": {"type": "string", "enum": [s.value for s in Sentiment]},
            },
        },
        "diagnostics": {
            "type": "object",
            "required": ["warnings"],
            "properties": {
                "warnings": {"type": "array", "items": {"type": "string"}},
            },
        },
    },
}
