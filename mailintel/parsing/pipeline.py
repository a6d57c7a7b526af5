"""
Pipeline Orchestrator — the single public entry point, parse_email().

Executes the stages in order:
    1. MIME decode (collaborator)          — fatal: DecodeFailure
    2. Header normalization                — fatal: MissingRequiredHeader
    3. Body resolution (HTML fallback)
    4. Entity extraction (subject + body)
    5. Signature separation
    6. Thread analysis
    7. Spam indicator scoring
    8. Metadata (urgency, categories, sentiment)
    9. Optional output validation

Stages 3-9 never abort the parse: a failing stage is logged, counted and
recorded in Email.diagnostics, and its result is replaced by an
empty/default value.
"""
import dataclasses
import logging
import time
from typing import Callable, List, Optional, Sequence, TypeVar

from mailintel.analysis.metadata import analyze_metadata
from mailintel.analysis.signature import BoundaryDetector, default_detectors, split_signature
from mailintel.analysis.spam_scorer import SpamContext, SpamScorer
from mailintel.analysis.thread import analyze_thread
from mailintel.analysis.urgency import UrgencyScorer
from mailintel.config import settings
from mailintel.config.parser_config import ParserConfig
from mailintel.entity_extraction.pipeline import extract_all_entities
from mailintel.entity_extraction.regex_matcher import EntityMatcher
from mailintel.errors import DecodeFailure, ParseError
from mailintel.mime.decoder import decode_message
from mailintel.models.email import (
    Body,
    Email,
    MessageMetadata,
    SignatureSplit,
    SpamIndicators,
    ThreadInfo,
)
from mailintel.models.entity import ExtractedEntities
from mailintel.models.mime import DecodedMessage
from mailintel.models.parser_version import ParserVersion
from mailintel.parsing.body import resolve_body
from mailintel.parsing.headers import normalize_headers
from mailintel.parsing.metrics import (
    record_degraded_stage,
    record_entities,
    record_parse_outcome,
    record_spam_flags,
    timed_stage,
)
from mailintel.parsing.output_builder import build_email_record
from mailintel.parsing.validation import validate_email_record

logger = logging.getLogger(__name__)

T = TypeVar("T")

Decoder = Callable[[bytes], DecodedMessage]


def parse_email(
    email_id: str,
    raw: bytes,
    config: Optional[ParserConfig] = None,
    decoder: Optional[Decoder] = None,
    matchers: Optional[Sequence[EntityMatcher]] = None,
    spam_scorer: Optional[SpamScorer] = None,
    signature_detectors: Optional[Sequence[BoundaryDetector]] = None,
    parser_version: Optional[ParserVersion] = None,
) -> Email:
    """
    Parse one raw message into an immutable Email.

    Args:
        email_id: Caller-supplied identifier, copied to the result.
        raw: Complete message bytes (headers + body).
        config: Tuning knobs. Defaults to ParserConfig().
        decoder: MIME collaborator. Defaults to the stdlib-backed decoder.
        matchers: Entity matcher strategies. Defaults to all built-in ones.
        spam_scorer: SpamScorer instance. Defaults to one built from config.
        signature_detectors: Ordered boundary detectors.
        parser_version: Version contract stamped on the result.

    Returns:
        Email with literal fields and derived intelligence.

    Raises:
        DecodeFailure: The bytes are not a decodable message.
        MissingRequiredHeader: From is absent or blank.
    """
    start_time = time.monotonic()

    config = config or ParserConfig()
    decoder = decoder or decode_message
    spam_scorer = spam_scorer or SpamScorer(config)
    if signature_detectors is None:
        signature_detectors = default_detectors(config.signature_max_lines)

    diagnostics: List[str] = []

    def degrade(stage: str, fn: Callable[[], T], default: T) -> T:
        try:
            with timed_stage(stage):
                return fn()
        except ParseError:
            raise
        except Exception as exc:
            logger.warning(
                "Stage '%s' failed for email %s, using default: %s",
                stage, email_id, exc, exc_info=True,
            )
            record_degraded_stage(stage)
            diagnostics.append(f"{stage}: {type(exc).__name__}: {exc}")
            return default

    try:
        # ==================================================================
        # Stage 1: MIME decode
        # ==================================================================
        with timed_stage("decode"):
            decoded = _decode(decoder, raw)

        # ==================================================================
        # Stage 2: Header normalization
        # ==================================================================
        headers_map = decoded.headers
        with timed_stage("headers"):
            headers = normalize_headers(headers_map)
    except ParseError as e:
        logger.error("Email %s could not be parsed [%s]: %s", email_id, e.code.value, e.message)
        record_parse_outcome(e.code.value)
        raise

    # ==================================================================
    # Stage 3: Body resolution
    # ==================================================================
    body = degrade(
        "body",
        lambda: resolve_body(
            decoded.body_parts,
            attachment_count=decoded.attachment_count,
            include_link_targets=config.html_include_link_targets,
        ),
        Body(has_attachments=decoded.attachment_count > 0),
    )

    # ==================================================================
    # Stage 4: Entity extraction
    # ==================================================================
    entities = degrade(
        "entities",
        lambda: extract_all_entities(
            headers.subject.original, body.rendered_text, matchers=matchers, config=config
        ),
        ExtractedEntities(),
    )

    # ==================================================================
    # Stage 5: Signature separation
    # ==================================================================
    signature_split = degrade(
        "signature",
        lambda: split_signature(body.rendered_text, signature_detectors),
        SignatureSplit(content=body.rendered_text),
    )

    # ==================================================================
    # Stage 6: Thread analysis
    # ==================================================================
    thread = degrade(
        "thread",
        lambda: analyze_thread(headers.message_id, headers.references, headers.in_reply_to),
        ThreadInfo(message_id=headers.message_id),
    )

    # ==================================================================
    # Stage 7: Spam indicators
    # ==================================================================
    spam = degrade(
        "spam",
        lambda: spam_scorer.score(SpamContext(headers=headers, body=body, entities=entities)),
        SpamIndicators(),
    )

    # ==================================================================
    # Stage 8: Metadata
    # ==================================================================
    metadata = degrade(
        "metadata",
        lambda: analyze_metadata(headers, body, entities, UrgencyScorer(config)),
        MessageMetadata(),
    )

    # ==================================================================
    # Assembly
    # ==================================================================
    email = Email(
        email_id=email_id,
        from_address=headers.from_address,
        to=headers.to,
        cc=headers.cc,
        bcc=headers.bcc,
        reply_to=headers.reply_to,
        subject=headers.subject,
        date=headers.date,
        date_raw=headers.date_raw,
        body=body,
        signature_split=signature_split,
        headers=headers_map,
        extracted=entities,
        thread=thread,
        spam=spam,
        header_summary=headers.summary,
        metadata=metadata,
        parser_version=parser_version or ParserVersion(),
        diagnostics=tuple(diagnostics),
    )

    # ==================================================================
    # Stage 9: Output validation (optional)
    # ==================================================================
    if config.validate_output:
        result = degrade("validation", lambda: validate_email_record(build_email_record(email)), None)
        if result is not None and not result.valid:
            diagnostics.extend(f"validation: {error}" for error in result.errors)
        email = dataclasses.replace(email, diagnostics=tuple(diagnostics))

    record_parse_outcome("ok")
    record_spam_flags(spam.flags)
    for kind, matches in entities.items():
        record_entities(kind.value, len(matches))

    elapsed_ms = (time.monotonic() - start_time) * 1000
    logger.debug(
        "Parsed email %s in %.1f ms: %d entities, thread depth %d, spam score %.2f, body %r",
        email_id,
        elapsed_ms,
        entities.total_count(),
        thread.depth,
        spam.score,
        body.rendered_text[: settings.MAX_BODY_LOG_CHARS],
    )
    return email


def _decode(decoder: Decoder, raw: bytes) -> DecodedMessage:
    try:
        return decoder(raw)
    except DecodeFailure:
        raise
    except Exception as exc:
        raise DecodeFailure(f"Decoder error: {type(exc).__name__}: {exc}") from exc
