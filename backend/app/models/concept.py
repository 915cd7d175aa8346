"""SQLAlchemy models for concepts, aliases, definitions and relationships.

Every scoped table carries the same five nullable scope dimensions
(team, product, region, process, role) and a validity window. A NULL
dimension means "applies to all".
"""

from datetime import UTC, datetime

from sqlalchemy import DateTime, Enum, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base, UUIDType
from app.schemas.base import (
    AliasStatus,
    ConceptCriticality,
    ConceptStatus,
    DefinitionStatus,
    RelationshipStatus,
)


SCOPE_COLUMNS = ("team", "product", "region", "process", "role")


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _enum_values(enum_cls: type) -> list[str]:
    return [member.value for member in enum_cls]


class ScopedMixin:
    """Scope dimensions shared by aliases, definitions, relationships and evidence."""

    team: Mapped[str | None] = mapped_column(String(128), nullable=True)
    product: Mapped[str | None] = mapped_column(String(128), nullable=True)
    region: Mapped[str | None] = mapped_column(String(128), nullable=True)
    process: Mapped[str | None] = mapped_column(String(128), nullable=True)
    role: Mapped[str | None] = mapped_column(String(128), nullable=True)


class ValidityMixin:
    """Temporal validity window: valid_from <= t < valid_to (open-ended when NULL)."""

    valid_from: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )
    valid_to: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )


class Concept(Base):
    """Canonical internal meaning behind one or more slang terms."""

    __tablename__ = "concepts"

    key: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
        unique=True,
        index=True,
    )
    label: Mapped[str] = mapped_column(
        String(256),
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    status: Mapped[ConceptStatus] = mapped_column(
        Enum(
            ConceptStatus,
            name="concept_status",
            native_enum=False,
            length=32,
            values_callable=_enum_values,
        ),
        nullable=False,
        default=ConceptStatus.DRAFT,
        index=True,
    )
    criticality: Mapped[ConceptCriticality] = mapped_column(
        Enum(
            ConceptCriticality,
            name="concept_criticality",
            native_enum=False,
            length=32,
            values_callable=_enum_values,
        ),
        nullable=False,
        default=ConceptCriticality.NORMAL,
    )
    defined_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    approved_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )

    aliases = relationship(
        "ConceptAlias",
        back_populates="concept",
        cascade="all, delete-orphan",
    )
    definition_versions = relationship(
        "ConceptDefinitionVersion",
        back_populates="concept",
        cascade="all, delete-orphan",
        order_by="ConceptDefinitionVersion.version",
    )

    def __repr__(self) -> str:
        return f"<Concept(key='{self.key}', status={self.status}, criticality={self.criticality})>"

    @property
    def is_critical(self) -> bool:
        """Check if the concept requires a grounded definition."""
        return bool(self.criticality == ConceptCriticality.CRITICAL)


class ConceptAlias(ScopedMixin, ValidityMixin, Base):
    """Surface form mapped to a concept.

    The same normalized alias may exist for several concepts or scopes;
    that is how ambiguity arises. Within one concept and one exact scope
    it is unique.
    """

    __tablename__ = "concept_aliases"
    __table_args__ = (
        Index("ix_concept_aliases_lookup", "alias_normalized", "status"),
        Index("ix_concept_aliases_validity", "valid_from", "valid_to"),
        Index(
            "uq_concept_aliases_scope",
            "concept_id",
            "alias_normalized",
            *SCOPE_COLUMNS,
            unique=True,
            postgresql_nulls_not_distinct=True,
        ),
    )

    concept_id: Mapped[str] = mapped_column(
        UUIDType,
        ForeignKey("concepts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    alias: Mapped[str] = mapped_column(
        String(256),
        nullable=False,
    )
    alias_normalized: Mapped[str] = mapped_column(
        String(256),
        nullable=False,
    )
    language: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default="cs",
    )
    status: Mapped[AliasStatus] = mapped_column(
        Enum(
            AliasStatus,
            name="alias_status",
            native_enum=False,
            length=32,
            values_callable=_enum_values,
        ),
        nullable=False,
        default=AliasStatus.ACTIVE,
    )
    confidence: Mapped[float] = mapped_column(
        Float,
        nullable=False,
        default=1.0,
    )
    defined_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    approved_by: Mapped[str | None] = mapped_column(String(255), nullable=True)

    concept = relationship("Concept", back_populates="aliases")

    def __repr__(self) -> str:
        return f"<ConceptAlias(alias='{self.alias}', concept_id={self.concept_id}, status={self.status})>"


class ConceptDefinitionVersion(ScopedMixin, ValidityMixin, Base):
    """One versioned, scope- and time-qualified definition of a concept.

    Which version is current is decided at resolution time (highest
    confidence, then latest valid_from), not by a constraint.
    """

    __tablename__ = "concept_definition_versions"
    __table_args__ = (
        Index("uq_concept_definition_version", "concept_id", "version", unique=True),
        Index("ix_concept_definition_validity", "valid_from", "valid_to"),
    )

    concept_id: Mapped[str] = mapped_column(
        UUIDType,
        ForeignKey("concepts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    definition: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    status: Mapped[DefinitionStatus] = mapped_column(
        Enum(
            DefinitionStatus,
            name="definition_status",
            native_enum=False,
            length=32,
            values_callable=_enum_values,
        ),
        nullable=False,
        default=DefinitionStatus.DRAFT,
        index=True,
    )
    confidence: Mapped[float] = mapped_column(
        Float,
        nullable=False,
        default=0.7,
    )
    defined_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    approved_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    source_of_truth_doc_id: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )

    concept = relationship("Concept", back_populates="definition_versions")

    def __repr__(self) -> str:
        return f"<ConceptDefinitionVersion(concept_id={self.concept_id}, version={self.version}, status={self.status})>"


class ConceptRelationship(ScopedMixin, ValidityMixin, Base):
    """Directed typed edge between two concepts (e.g. A implies B)."""

    __tablename__ = "concept_relationships"
    __table_args__ = (
        Index("ix_concept_relationship_validity", "valid_from", "valid_to"),
        Index(
            "uq_concept_relationships_scope",
            "from_concept_id",
            "to_concept_id",
            "relation_type",
            *SCOPE_COLUMNS,
            unique=True,
            postgresql_nulls_not_distinct=True,
        ),
    )

    from_concept_id: Mapped[str] = mapped_column(
        UUIDType,
        ForeignKey("concepts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    to_concept_id: Mapped[str] = mapped_column(
        UUIDType,
        ForeignKey("concepts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    relation_type: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
    )
    weight: Mapped[float] = mapped_column(
        Float,
        nullable=False,
        default=1.0,
    )
    status: Mapped[RelationshipStatus] = mapped_column(
        Enum(
            RelationshipStatus,
            name="relationship_status",
            native_enum=False,
            length=32,
            values_callable=_enum_values,
        ),
        nullable=False,
        default=RelationshipStatus.DRAFT,
        index=True,
    )
    confidence: Mapped[float] = mapped_column(
        Float,
        nullable=False,
        default=0.7,
    )
    defined_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    approved_by: Mapped[str | None] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<ConceptRelationship({self.from_concept_id} -{self.relation_type}-> {self.to_concept_id})>"


class ConceptEvidence(ScopedMixin, Base):
    """Excerpt citing where a concept, definition or alias came from."""

    __tablename__ = "concept_evidence"

    concept_id: Mapped[str] = mapped_column(
        UUIDType,
        ForeignKey("concepts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    definition_version_id: Mapped[str | None] = mapped_column(
        UUIDType,
        ForeignKey("concept_definition_versions.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    alias_id: Mapped[str | None] = mapped_column(
        UUIDType,
        ForeignKey("concept_aliases.id", ondelete="SET NULL"),
        nullable=True,
    )
    document_id: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        index=True,
    )
    source_type: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        default="document",
    )
    source_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    excerpt: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    author: Mapped[str | None] = mapped_column(String(256), nullable=True)

    def __repr__(self) -> str:
        return f"<ConceptEvidence(concept_id={self.concept_id}, document_id={self.document_id})>"
