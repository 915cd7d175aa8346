"""Base schemas and enums for the concept graph resolver."""

from enum import Enum


class ConceptStatus(str, Enum):
    """Lifecycle status of a concept. Concepts are never hard-deleted."""

    DRAFT = "draft"
    APPROVED = "approved"
    DEPRECATED = "deprecated"


class ConceptCriticality(str, Enum):
    """How strictly a concept must be grounded before answering."""

    NORMAL = "normal"
    CRITICAL = "critical"


class AliasStatus(str, Enum):
    """Status of a concept alias."""

    ACTIVE = "active"
    RETIRED = "retired"


class DefinitionStatus(str, Enum):
    """Status of a definition version."""

    DRAFT = "draft"
    APPROVED = "approved"
    SUPERSEDED = "superseded"


class RelationshipStatus(str, Enum):
    """Status of a concept relationship."""

    DRAFT = "draft"
    PENDING = "pending"
    APPROVED = "approved"


class RelationType(str, Enum):
    """Well-known directed relationship types between concepts."""

    IMPLIES = "implies"
    SUPERSEDES = "supersedes"
    PART_OF = "partOf"
    RELATED_TO = "relatedTo"
    DEPENDS_ON = "dependsOn"


class CandidateStatus(str, Enum):
    """Review status of a mined term candidate."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ReviewDecision(str, Enum):
    """Decision recorded in the definition review audit trail."""

    APPROVED = "approved"
    REJECTED = "rejected"


class AmbiguityPolicy(str, Enum):
    """How the caller wants ambiguous terms handled."""

    ASK = "ask"
    SHOW_BOTH = "show_both"
    STRICT = "strict"
