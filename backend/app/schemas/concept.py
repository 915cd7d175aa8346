"""Concept store schemas (concepts, aliases, definitions, relationships)."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.base import (
    AliasStatus,
    ConceptCriticality,
    ConceptStatus,
    DefinitionStatus,
    RelationshipStatus,
)


class ContextScope(BaseModel):
    """Five-dimensional scope qualifier. A missing dimension matches anything."""

    model_config = ConfigDict(extra="forbid")

    team: str | None = Field(None, max_length=128, description="Owning team")
    product: str | None = Field(None, max_length=128, description="Product line")
    region: str | None = Field(None, max_length=128, description="Region")
    process: str | None = Field(None, max_length=128, description="Business process")
    role: str | None = Field(None, max_length=128, description="Role of the asker")

    def is_empty(self) -> bool:
        """Check if no dimension is set."""
        return not any(self.model_dump().values())


class ScopedValidity(BaseModel):
    """Scope and validity window shared by alias/definition/relationship inputs."""

    model_config = ConfigDict(extra="forbid")

    scope: ContextScope = Field(default_factory=ContextScope, description="Scope qualifier")
    valid_from: datetime | None = Field(None, description="Start of validity (defaults to now)")
    valid_to: datetime | None = Field(None, description="End of validity (exclusive, open if null)")


class ConceptCreate(BaseModel):
    """Schema for creating a concept."""

    key: str = Field(..., min_length=1, max_length=128, description="Canonical key, stored uppercase")
    label: str = Field(..., min_length=1, max_length=256, description="Human-readable label")
    description: str | None = Field(None, description="Free-text description")
    status: ConceptStatus = Field(default=ConceptStatus.APPROVED)
    criticality: ConceptCriticality = Field(default=ConceptCriticality.NORMAL)
    defined_by: str | None = Field(None, description="Author of the concept")


class AliasCreate(ScopedValidity):
    """Schema for attaching an alias to a concept."""

    alias: str = Field(..., min_length=1, max_length=256, description="Surface form, original casing")
    language: str = Field(default="cs", max_length=16)
    status: AliasStatus = Field(default=AliasStatus.ACTIVE)
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)


class DefinitionCreate(ScopedValidity):
    """Schema for adding a definition version to a concept."""

    definition: str = Field(..., min_length=1, description="Definition text")
    status: DefinitionStatus = Field(default=DefinitionStatus.APPROVED)
    confidence: float = Field(default=0.7, ge=0.0, le=1.0)
    source_of_truth_doc_id: str | None = Field(None, description="Authoritative document reference")
    defined_by: str | None = None


class RelationshipCreate(ScopedValidity):
    """Schema for a directed relationship between two concept keys."""

    from_key: str = Field(..., min_length=1, description="Source concept key")
    to_key: str = Field(..., min_length=1, description="Target concept key")
    relation_type: str = Field(..., min_length=1, max_length=32, description="e.g. implies, supersedes, partOf")
    status: RelationshipStatus = Field(default=RelationshipStatus.APPROVED)
    weight: float = Field(default=1.0)
    confidence: float = Field(default=0.7, ge=0.0, le=1.0)


class ConceptAlias(BaseModel):
    """Alias as stored."""

    id: UUID
    alias: str
    alias_normalized: str
    status: AliasStatus
    confidence: float
    team: str | None = None
    product: str | None = None
    region: str | None = None
    process: str | None = None
    role: str | None = None
    valid_from: datetime
    valid_to: datetime | None = None

    model_config = {"from_attributes": True}


class ConceptDefinitionVersion(BaseModel):
    """Definition version as stored."""

    id: UUID
    version: int
    definition: str
    status: DefinitionStatus
    confidence: float
    team: str | None = None
    product: str | None = None
    region: str | None = None
    process: str | None = None
    role: str | None = None
    valid_from: datetime
    valid_to: datetime | None = None
    source_of_truth_doc_id: str | None = None

    model_config = {"from_attributes": True}


class Concept(BaseModel):
    """Concept with its aliases and definition history."""

    id: UUID
    key: str
    label: str
    description: str | None = None
    status: ConceptStatus
    criticality: ConceptCriticality
    aliases: list[ConceptAlias] = Field(default_factory=list)
    definition_versions: list[ConceptDefinitionVersion] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class ConceptRelationship(BaseModel):
    """Relationship as stored."""

    id: UUID
    from_concept_id: UUID
    to_concept_id: UUID
    relation_type: str
    status: RelationshipStatus
    weight: float
    confidence: float
    valid_from: datetime
    valid_to: datetime | None = None

    model_config = {"from_attributes": True}
