"""SQLAlchemy ORM models for the concept graph resolver.

All models inherit from Base which provides:
- id: UUID primary key
- created_at: Timestamp

Models:
- Concept, ConceptAlias, ConceptDefinitionVersion (versioned terminology)
- ConceptRelationship (directed concept graph)
- ConceptEvidence (citations for approved definitions)
- TermCandidate, DefinitionReview (mining and review workflow)
"""

from app.core.database import Base
from app.models.concept import (
    Concept,
    ConceptAlias,
    ConceptDefinitionVersion,
    ConceptEvidence,
    ConceptRelationship,
)
from app.models.term_candidate import DefinitionReview, TermCandidate

__all__ = [
    "Base",
    "Concept",
    "ConceptAlias",
    "ConceptDefinitionVersion",
    "ConceptEvidence",
    "ConceptRelationship",
    "TermCandidate",
    "DefinitionReview",
]
