"""
Deterministic Entity Merger.

Two passes with fixed rules:
1. Overlap resolution among the precise kinds, by kind priority
   Email > Url > Amount > Phone (same kind → longest span, then earliest).
   An email lying wholly inside a URL (query string, userinfo) does not
   conflict with it, so both are kept.
   Name, Company and SocialHandle matches are never dropped for overlap.
2. Per-kind dedup by normalized value, first occurrence wins.

Result order: byte position in the scanned text (subject, then body).
"""
from typing import Dict, List, Set

from mailintel.models.entity import EntityKind, EntityMatch

KIND_PRIORITY: Dict[EntityKind, int] = {
    EntityKind.EMAIL: 0,
    EntityKind.URL: 1,
    EntityKind.AMOUNT: 2,
    EntityKind.PHONE: 3,
}

# (outer, inner) kinds allowed to nest without conflict
NESTABLE_KINDS = {(EntityKind.URL, EntityKind.EMAIL)}

FIELD_ORDER: Dict[str, int] = {"subject": 0, "body": 1}


def document_order(match: EntityMatch):
    return (match.position, FIELD_ORDER.get(match.field, 99), match.end)


def _contains(outer: EntityMatch, inner: EntityMatch) -> bool:
    return outer.field == inner.field and outer.start <= inner.start and inner.end <= outer.end


def conflicts(candidate: EntityMatch, existing: EntityMatch) -> bool:
    """True when *candidate* must yield to the already accepted *existing*."""
    if not candidate.overlaps(existing):
        return False
    for outer, inner in ((candidate, existing), (existing, candidate)):
        if (outer.kind, inner.kind) in NESTABLE_KINDS and _contains(outer, inner):
            return False
    return True


def resolve_overlaps(matches: List[EntityMatch]) -> List[EntityMatch]:
    """
    Drop precise-kind matches that conflict with a higher-priority one.

    Candidates are accepted greedily in priority order, so the outcome does
    not depend on the order the matchers ran in.
    """
    precise = [m for m in matches if m.kind in KIND_PRIORITY]
    others = [m for m in matches if m.kind not in KIND_PRIORITY]

    ranked = sorted(
        precise,
        key=lambda m: (KIND_PRIORITY[m.kind], -m.span_length(), FIELD_ORDER.get(m.field, 99), m.start),
    )

    accepted: List[EntityMatch] = []
    for candidate in ranked:
        if not any(conflicts(candidate, existing) for existing in accepted):
            accepted.append(candidate)

    return accepted + others


def dedupe_by_value(matches: List[EntityMatch]) -> List[EntityMatch]:
    """Keep the first occurrence of each (kind, normalized value)."""
    seen: Dict[EntityKind, Set[str]] = {}
    unique: List[EntityMatch] = []
    for match in sorted(matches, key=document_order):
        values = seen.setdefault(match.kind, set())
        if match.normalized_value in values:
            continue
        values.add(match.normalized_value)
        unique.append(match)
    return unique


def merge_entities_deterministic(matches: List[EntityMatch]) -> List[EntityMatch]:
    """
    Merge raw matcher output into the final ordered, unique match list.

    Args:
        matches: All matches from all matchers over all fields (may overlap).

    Returns:
        Deduplicated matches in byte-position order, with conflicting
        precise-kind overlaps removed.
    """
    if not matches:
        return []
    return dedupe_by_value(resolve_overlaps(matches))
