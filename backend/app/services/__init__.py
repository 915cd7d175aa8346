"""Services for the concept graph resolver.

Services implement the terminology pipeline:
- normalize_term / extract_candidates: query-side term candidates
- AliasResolverService: alias lookup with scope and validity filtering
- build_ambiguities: ambiguity detection and strict policy
- FallbackTermClassifier: LLM fallback for unknown slang
- GraphExpanderService: relationship hints for resolved concepts
- QueryFlowService: end-to-end query flow
- TermMiningService: ingestion-side slang mining
- ReviewWorkflowService: human approval of mined candidates
- ConceptStoreService: concept graph administration
"""

from app.services.alias_resolver import AliasResolution, AliasResolverService, ResolvedConcept
from app.services.ambiguity import (
    build_ambiguities,
    build_strict_failure_message,
    collect_strict_failure_reasons,
)
from app.services.candidate_extraction import extract_candidates
from app.services.concept_store import (
    ConceptAlreadyExistsError,
    ConceptNotFoundError,
    ConceptStoreService,
)
from app.services.graph_expander import GraphExpanderService, render_graph_section
from app.services.llm_fallback import FallbackTermClassifier, parse_fallback_terms
from app.services.normalization import dedupe, normalize_term
from app.services.query_flow import QueryFlowService, build_internal_rewrite
from app.services.review_workflow import (
    CandidateAlreadyReviewedError,
    ReviewWorkflowService,
    TermCandidateNotFoundError,
)
from app.services.scope import parse_effective_at, scope_matches, temporal_matches
from app.services.term_mining import TermMiningService, dedupe_candidates

__all__ = [
    # Normalization
    "dedupe",
    "extract_candidates",
    "normalize_term",
    # Scope
    "parse_effective_at",
    "scope_matches",
    "temporal_matches",
    # Resolution
    "AliasResolution",
    "AliasResolverService",
    "ResolvedConcept",
    "build_ambiguities",
    "build_strict_failure_message",
    "collect_strict_failure_reasons",
    "FallbackTermClassifier",
    "parse_fallback_terms",
    "GraphExpanderService",
    "render_graph_section",
    "QueryFlowService",
    "build_internal_rewrite",
    # Mining and review
    "TermMiningService",
    "dedupe_candidates",
    "CandidateAlreadyReviewedError",
    "ReviewWorkflowService",
    "TermCandidateNotFoundError",
    # Concept store
    "ConceptAlreadyExistsError",
    "ConceptNotFoundError",
    "ConceptStoreService",
]
