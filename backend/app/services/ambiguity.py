"""Ambiguity detection and the strict-failure policy."""

from collections.abc import Sequence

from app.schemas.base import AmbiguityPolicy
from app.schemas.query_flow import Ambiguity
from app.services.alias_resolver import ResolvedConcept
from app.services.normalization import dedupe

STRICT_AMBIGUITY_REASON = "Ambiguous internal term detected under strict policy."
GENERIC_AMBIGUITY_REASON = "Term maps to multiple concepts depending on scope/time."

STRICT_FAILURE_LEAD = "Need verification workflow before answering this request."
AMBIGUITY_FAILURE_REASON = "Ambiguous internal terminology requires manual clarification."
MISSING_DEFINITION_REASON = "Missing approved definition for critical concepts"


def build_ambiguities(
    resolved: Sequence[ResolvedConcept],
    policy: AmbiguityPolicy,
) -> list[Ambiguity]:
    """Flag every term that maps to more than one distinct concept key.

    Terms are reported in first-seen order; keys are sorted.
    """
    keys_by_term: dict[str, set[str]] = {}
    for entry in resolved:
        keys_by_term.setdefault(entry.alias_normalized, set()).add(entry.concept_key)

    reason = STRICT_AMBIGUITY_REASON if policy == AmbiguityPolicy.STRICT else GENERIC_AMBIGUITY_REASON
    return [
        Ambiguity(term=term, candidate_concepts=sorted(keys), reason=reason)
        for term, keys in keys_by_term.items()
        if len(keys) > 1
    ]


def collect_strict_failure_reasons(
    resolved: Sequence[ResolvedConcept],
    ambiguities: Sequence[Ambiguity],
    policy: AmbiguityPolicy,
    strict_grounding: bool,
) -> list[str]:
    """Accumulate every reason generation must wait for clarification."""
    reasons: list[str] = []

    if policy == AmbiguityPolicy.STRICT and ambiguities:
        reasons.append(AMBIGUITY_FAILURE_REASON)

    if strict_grounding:
        missing = dedupe(
            entry.concept_key
            for entry in resolved
            if entry.is_critical and entry.definition_version_id is None
        )
        if missing:
            reasons.append(f"{MISSING_DEFINITION_REASON}: {', '.join(missing)}")

    return reasons


def build_strict_failure_message(reasons: Sequence[str]) -> str | None:
    """Render reasons as a lead sentence plus bullets, or None when empty."""
    if not reasons:
        return None
    return "\n".join([STRICT_FAILURE_LEAD, *(f"- {reason}" for reason in reasons)])
