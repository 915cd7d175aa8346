"""Query flow request/response schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from app.schemas.base import AmbiguityPolicy
from app.schemas.concept import ContextScope


class Ambiguity(BaseModel):
    """A single term that resolved to more than one concept."""

    term: str = Field(..., description="Normalized alias that is ambiguous")
    candidate_concepts: list[str] = Field(..., description="Sorted concept keys the term maps to")
    reason: str = Field(..., description="Human-readable explanation")


class ResolvedConceptSummary(BaseModel):
    """Per-concept resolution summary included in the interpretation."""

    concept_id: str
    concept_key: str
    alias: str
    definition_version_id: str | None = None
    confidence: float


class InterpretationPayload(BaseModel):
    """How the query was interpreted against internal terminology."""

    detected_terms: list[str] = Field(default_factory=list)
    resolved_concepts: list[ResolvedConceptSummary] = Field(default_factory=list)
    definition_version_ids: list[str] = Field(default_factory=list)
    rewritten_query: str | None = None


class QueryFlowStats(BaseModel):
    """Wall-clock timings in milliseconds."""

    interpretation_time_ms: float = 0.0
    graph_expansion_time_ms: float = 0.0


class QueryFlowResult(BaseModel):
    """Outcome of one query flow run.

    A non-null strict_failure_message means generation must not proceed
    until the user clarifies; it is a normal result, not an error.
    """

    expanded_query: str
    interpretation: InterpretationPayload
    ambiguities: list[Ambiguity] = Field(default_factory=list)
    unresolved_terms: list[str] = Field(default_factory=list)
    strict_failure_message: str | None = None
    stats: QueryFlowStats = Field(default_factory=QueryFlowStats)


class QueryFlowRequest(BaseModel):
    """API request for running the query flow.

    Flags left unset fall back to the process-wide feature flags.
    """

    query: str = Field(..., max_length=8000, description="Raw user query")
    context_scope: ContextScope | None = Field(None, description="Scope of the asker")
    effective_at: datetime | str | None = Field(
        None, description="Instant for temporal validity (ISO-8601, defaults to now)"
    )
    ambiguity_policy: AmbiguityPolicy | None = None
    rewrite_enabled: bool | None = None
    graph_enabled: bool | None = None
    strict_grounding: bool | None = None


class QueryFlowResponse(QueryFlowResult):
    """API response; bypassed is set when the kill switch is on."""

    bypassed: bool = False
