"""
Output Normalization — Email → JSON-ready record.

The record conforms to EMAIL_RECORD_SCHEMA; confidences and the spam score
are clamped to [0, 1] on the way out.
"""
from typing import List, Optional

import numpy as np

from mailintel.models.email import Address, Email, HeaderSummary, MessageMetadata


def _address(address: Optional[Address]) -> Optional[dict]:
    return address.to_dict() if address is not None else None


def _addresses(addresses) -> List[dict]:
    return [a.to_dict() for a in addresses]


def _clamp(value: float) -> float:
    return float(np.clip(value, 0.0, 1.0))


def build_header_summary(summary: HeaderSummary) -> dict:
    auth = summary.authentication
    custom: dict = {}
    for name, value in summary.custom:
        custom.setdefault(name.lower(), []).append(value)
    return {
        "content_type": summary.content_type,
        "mailer": summary.mailer,
        "priority": summary.priority.value if summary.priority else None,
        "list_unsubscribe": summary.list_unsubscribe,
        "list_id": summary.list_id,
        "authentication": {
            "spf": auth.spf.value if auth.spf else None,
            "dkim": auth.dkim.value if auth.dkim else None,
            "dmarc": auth.dmarc.value if auth.dmarc else None,
        },
        "custom": custom,
    }


def build_metadata(metadata: MessageMetadata) -> dict:
    return {
        "urgency": metadata.urgency.value,
        "urgency_signals": list(metadata.urgency_signals),
        "category_hints": [
            {"category": h.category, "confidence": _clamp(h.confidence), "reason": h.reason}
            for h in metadata.category_hints
        ],
        "is_automated": metadata.is_automated,
        "is_mailing_list": metadata.is_mailing_list,
        "sentiment": metadata.sentiment.value,
    }


def build_email_record(email: Email) -> dict:
    """
    Render a parsed Email as a plain dict (JSON-serializable).

    Entities keep their per-kind order; spam flags are sorted so the record
    is byte-for-byte reproducible.
    """
    entities = email.extracted.to_dict()
    for matches in entities.values():
        for match in matches:
            match["confidence"] = _clamp(match["confidence"])

    return {
        "email_id": email.email_id,
        "message_id": email.message_id,
        "parser_version": email.parser_version.to_dict(),
        "from": email.from_address.to_dict(),
        "to": _addresses(email.to),
        "cc": _addresses(email.cc),
        "bcc": _addresses(email.bcc),
        "reply_to": _address(email.reply_to),
        "date": email.date.isoformat() if email.date else None,
        "date_raw": email.date_raw,
        "subject": {
            "original": email.subject.original,
            "normalized": email.subject.normalized,
            "reply_depth": email.subject.reply_depth,
            "is_forward": email.subject.is_forward,
        },
        "body": {
            "content_type": email.body.content_type.value,
            "rendered_text": email.body.rendered_text,
            "has_html": email.body.html is not None,
            "has_attachments": email.body.has_attachments,
            "word_count": email.body.word_count,
            "char_count": email.body.char_count,
            "line_count": email.body.line_count,
        },
        "signature": {
            "content": email.signature_split.content,
            "signature": email.signature_split.signature,
            "separator": email.signature_split.separator,
            "rule": email.signature_split.rule,
        },
        "entities": entities,
        "thread": {
            "message_id": email.thread.message_id,
            "references": list(email.thread.references),
            "in_reply_to": email.thread.in_reply_to,
            "depth": email.thread.depth,
            "is_reply": email.thread.is_reply,
        },
        "spam": {
            "flags": sorted(email.spam.flags),
            "score": _clamp(email.spam.score),
            "indicators": [{"tag": i.tag, "weight": i.weight} for i in email.spam.indicators],
        },
        "header_summary": build_header_summary(email.header_summary),
        "metadata": build_metadata(email.metadata),
        "diagnostics": {"warnings": list(email.diagnostics)},
    }
