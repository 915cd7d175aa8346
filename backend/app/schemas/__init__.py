"""Pydantic schemas for the concept graph resolver."""

from app.schemas.base import (
    AliasStatus,
    AmbiguityPolicy,
    CandidateStatus,
    ConceptCriticality,
    ConceptStatus,
    DefinitionStatus,
    RelationshipStatus,
    RelationType,
    ReviewDecision,
)
from app.schemas.concept import (
    AliasCreate,
    Concept,
    ConceptCreate,
    ConceptRelationship,
    ContextScope,
    DefinitionCreate,
    RelationshipCreate,
)
from app.schemas.query_flow import (
    Ambiguity,
    InterpretationPayload,
    QueryFlowRequest,
    QueryFlowResponse,
    QueryFlowResult,
    QueryFlowStats,
)
from app.schemas.review import (
    ApprovalInput,
    ApprovalResult,
    RejectionInput,
    RejectionResult,
    ReviewQueueFilters,
    SlangSourceMetadata,
    TermCandidate,
)

__all__ = [
    # Enums
    "AliasStatus",
    "AmbiguityPolicy",
    "CandidateStatus",
    "ConceptCriticality",
    "ConceptStatus",
    "DefinitionStatus",
    "RelationshipStatus",
    "RelationType",
    "ReviewDecision",
    # Concept store
    "AliasCreate",
    "Concept",
    "ConceptCreate",
    "ConceptRelationship",
    "ContextScope",
    "DefinitionCreate",
    "RelationshipCreate",
    # Query flow
    "Ambiguity",
    "InterpretationPayload",
    "QueryFlowRequest",
    "QueryFlowResponse",
    "QueryFlowResult",
    "QueryFlowStats",
    # Review
    "ApprovalInput",
    "ApprovalResult",
    "RejectionInput",
    "RejectionResult",
    "ReviewQueueFilters",
    "SlangSourceMetadata",
    "TermCandidate",
]
