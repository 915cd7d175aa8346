"""Query flow orchestration.

One stateless pipeline per query:

    extract candidates -> resolve aliases -> (LLM fallback -> re-resolve)
    -> detect ambiguities -> strict policy -> (internal rewrite + graph hints)

The flow only reads from the store. Alias and definition lookups are
structural, so their errors propagate; the LLM fallback is optional and
swallows its own failures.
"""

import logging
import time
from collections.abc import Sequence
from datetime import UTC, datetime

from sqlalchemy.orm import Session

from app.schemas.base import AmbiguityPolicy
from app.schemas.concept import ContextScope
from app.schemas.query_flow import (
    InterpretationPayload,
    QueryFlowResult,
    QueryFlowStats,
    ResolvedConceptSummary,
)
from app.services.alias_resolver import AliasResolverService, ResolvedConcept
from app.services.ambiguity import (
    build_ambiguities,
    build_strict_failure_message,
    collect_strict_failure_reasons,
)
from app.services.candidate_extraction import extract_candidates
from app.services.graph_expander import GraphExpanderService, render_graph_section
from app.services.llm_fallback import FallbackTermClassifier
from app.services.normalization import dedupe
from app.services.scope import parse_effective_at

logger = logging.getLogger(__name__)

INTERNAL_MEANING_MARKER = "[INTERNAL_MEANING]"


def build_internal_rewrite(
    query: str,
    resolved: Sequence[ResolvedConcept],
    context_scope: ContextScope | None,
    effective_at: datetime,
) -> str:
    """Append the internal meaning of resolved concepts to the query.

    Returns the query unchanged when nothing resolved.
    """
    if not resolved:
        return query

    lines = [query, "", INTERNAL_MEANING_MARKER]
    if context_scope is not None and not context_scope.is_empty():
        lines.append(f"Scope: {context_scope.model_dump_json(exclude_none=True)}")
    lines.append(f"EffectiveAt: {effective_at.astimezone(UTC).isoformat()}")
    lines.append("Resolved concepts:")
    for concept in resolved:
        meaning = concept.definition if concept.definition else "(definition missing)"
        lines.append(f"- {concept.concept_key}: {meaning}")
    return "\n".join(lines)


def to_interpretation_payload(
    expanded_query: str,
    resolved: Sequence[ResolvedConcept],
) -> InterpretationPayload:
    """Summarize which terms resolved to which concepts and definitions."""
    return InterpretationPayload(
        detected_terms=dedupe(item.alias_normalized for item in resolved),
        resolved_concepts=[
            ResolvedConceptSummary(
                concept_id=item.concept_id,
                concept_key=item.concept_key,
                alias=item.alias,
                definition_version_id=item.definition_version_id,
                confidence=item.confidence,
            )
            for item in resolved
        ],
        definition_version_ids=dedupe(
            item.definition_version_id for item in resolved if item.definition_version_id
        ),
        rewritten_query=expanded_query,
    )


class QueryFlowService:
    """Run the terminology resolution pipeline for one query.

    Usage:
        service = QueryFlowService(session, classifier=None)
        result = service.run("Je to GREEN?", graph_enabled=True)
    """

    def __init__(
        self,
        session: Session,
        classifier: FallbackTermClassifier | None = None,
    ) -> None:
        self._resolver = AliasResolverService(session)
        self._graph = GraphExpanderService(session)
        self._classifier = classifier

    def run(
        self,
        query: str,
        context_scope: ContextScope | None = None,
        effective_at: datetime | str | None = None,
        ambiguity_policy: AmbiguityPolicy = AmbiguityPolicy.SHOW_BOTH,
        rewrite_enabled: bool = False,
        graph_enabled: bool = False,
        strict_grounding: bool = False,
    ) -> QueryFlowResult:
        """Resolve internal terminology in a query.

        Args:
            query: Raw user query.
            context_scope: Scope of the asker; None matches everything.
            effective_at: Instant for validity windows; defaults to now.
            ambiguity_policy: How ambiguous terms are treated.
            rewrite_enabled: Allow one LLM fallback round when nothing resolves.
            graph_enabled: Build the internal rewrite and graph hints.
            strict_grounding: Block critical concepts without a definition.

        Returns:
            QueryFlowResult. A non-null strict_failure_message means the
            caller must ask for clarification instead of generating.
        """
        start = time.perf_counter()
        at = parse_effective_at(effective_at)

        candidates = extract_candidates(query)
        resolution = self._resolver.resolve(candidates, context_scope, at)

        if not resolution.resolved and rewrite_enabled and self._classifier is not None:
            fallback_terms = self._classifier.classify(query)
            if fallback_terms:
                logger.info(f"Fallback classifier proposed {len(fallback_terms)} terms")
                candidates = dedupe([*candidates, *fallback_terms])
                resolution = self._resolver.resolve(candidates, context_scope, at)

        ambiguities = build_ambiguities(resolution.resolved, ambiguity_policy)
        interpretation_ms = (time.perf_counter() - start) * 1000

        reasons = collect_strict_failure_reasons(
            resolution.resolved,
            ambiguities,
            ambiguity_policy,
            strict_grounding,
        )

        expanded_query = query
        graph_start = time.perf_counter()
        if graph_enabled:
            rewritten = build_internal_rewrite(query, resolution.resolved, context_scope, at)
            hints = self._graph.expand(
                [item.concept_id for item in resolution.resolved],
                context_scope,
                at,
            )
            section = render_graph_section(hints)
            expanded_query = f"{rewritten}\n\n{section}" if section else rewritten
        graph_ms = (time.perf_counter() - graph_start) * 1000

        if reasons:
            logger.info(f"Query flow blocked: {len(reasons)} strict failure reason(s)")

        return QueryFlowResult(
            expanded_query=expanded_query,
            interpretation=to_interpretation_payload(expanded_query, resolution.resolved),
            ambiguities=ambiguities,
            unresolved_terms=resolution.unresolved_terms,
            strict_failure_message=build_strict_failure_message(reasons),
            stats=QueryFlowStats(
                interpretation_time_ms=interpretation_ms,
                graph_expansion_time_ms=graph_ms,
            ),
        )
