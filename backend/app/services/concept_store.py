"""Concept store accessor.

Writes concepts, aliases, definition versions and relationships. Used by
the admin API and the glossary seed script. Methods flush but never
commit; the caller owns the transaction.
"""

import logging
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from app.core.audit import AuditAction, log_audit
from app.models.concept import Concept, ConceptAlias, ConceptDefinitionVersion, ConceptRelationship
from app.schemas.concept import (
    AliasCreate,
    ConceptCreate,
    DefinitionCreate,
    RelationshipCreate,
    ScopedValidity,
)
from app.services.normalization import normalize_term
from app.services.scope import same_scope_criteria

logger = logging.getLogger(__name__)


class ConceptNotFoundError(LookupError):
    """Raised when a concept key does not exist."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Concept {key} not found")
        self.key = key


class ConceptAlreadyExistsError(ValueError):
    """Raised when creating a concept whose key is taken."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Concept {key} already exists")
        self.key = key


def canonical_key(key: str) -> str:
    """Concept keys are stored trimmed and uppercase."""
    return key.strip().upper()


def _scoped_columns(data: ScopedValidity) -> dict[str, Any]:
    columns: dict[str, Any] = data.scope.model_dump()
    columns["valid_from"] = data.valid_from or datetime.now(UTC)
    columns["valid_to"] = data.valid_to
    return columns


class ConceptStoreService:
    """Read/write access to the concept graph tables."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_concept_by_key(self, key: str) -> Concept | None:
        stmt = (
            select(Concept)
            .where(Concept.key == canonical_key(key))
            .options(selectinload(Concept.aliases), selectinload(Concept.definition_versions))
            .execution_options(populate_existing=True)
        )
        return self._session.execute(stmt).scalar_one_or_none()

    def require_concept(self, key: str) -> Concept:
        concept = self.get_concept_by_key(key)
        if concept is None:
            raise ConceptNotFoundError(canonical_key(key))
        return concept

    def create_concept(self, data: ConceptCreate) -> Concept:
        """Create a concept.

        Raises:
            ValueError: Blank key.
            ConceptAlreadyExistsError: Key already taken.
        """
        key = canonical_key(data.key)
        if not key:
            raise ValueError("Concept key must not be empty")
        if self.get_concept_by_key(key) is not None:
            raise ConceptAlreadyExistsError(key)

        concept = Concept(
            key=key,
            label=data.label,
            description=data.description,
            status=data.status,
            criticality=data.criticality,
            defined_by=data.defined_by,
        )
        self._session.add(concept)
        self._session.flush()

        log_audit(AuditAction.CREATE, "concept", resource_id=concept.id, user_id=data.defined_by)
        return concept

    def find_alias(self, concept_id: str, alias_normalized: str, scope: Any) -> ConceptAlias | None:
        """Alias of a concept with this normalized text and exactly this scope."""
        stmt = select(ConceptAlias).where(
            ConceptAlias.concept_id == concept_id,
            ConceptAlias.alias_normalized == alias_normalized,
            *same_scope_criteria(ConceptAlias, scope),
        )
        return self._session.execute(stmt.limit(1)).scalar_one_or_none()

    def add_alias(self, key: str, data: AliasCreate) -> ConceptAlias:
        """Attach an alias; the normalized form is derived from the alias text.

        An alias already stored for the concept with the same normalized
        text and scope is returned unchanged instead of being duplicated.
        """
        concept = self.require_concept(key)
        alias_normalized = normalize_term(data.alias)
        if not alias_normalized:
            raise ValueError(f"Alias {data.alias!r} normalizes to an empty term")

        existing = self.find_alias(concept.id, alias_normalized, data.scope)
        if existing is not None:
            logger.info(f"Alias {alias_normalized!r} already exists for {concept.key}, skipping")
            return existing

        alias = ConceptAlias(
            concept_id=concept.id,
            alias=data.alias,
            alias_normalized=alias_normalized,
            language=data.language,
            status=data.status,
            confidence=data.confidence,
            **_scoped_columns(data),
        )
        self._session.add(alias)
        self._session.flush()
        return alias

    def add_definition_version(self, key: str, data: DefinitionCreate) -> ConceptDefinitionVersion:
        """Append the next definition version (1, 2, ...) to a concept."""
        concept = self.require_concept(key)
        current = self._session.execute(
            select(func.max(ConceptDefinitionVersion.version)).where(
                ConceptDefinitionVersion.concept_id == concept.id
            )
        ).scalar()

        definition = ConceptDefinitionVersion(
            concept_id=concept.id,
            version=(current or 0) + 1,
            definition=data.definition,
            status=data.status,
            confidence=data.confidence,
            source_of_truth_doc_id=data.source_of_truth_doc_id,
            defined_by=data.defined_by,
            **_scoped_columns(data),
        )
        self._session.add(definition)
        self._session.flush()

        log_audit(
            AuditAction.CREATE,
            "concept_definition_version",
            resource_id=definition.id,
            user_id=data.defined_by,
            details={"concept_key": concept.key, "version": definition.version},
        )
        return definition

    def find_relationship(self, data: RelationshipCreate) -> ConceptRelationship | None:
        """Edge with the same endpoints, type and exact scope, if stored."""
        source = self.require_concept(data.from_key)
        target = self.require_concept(data.to_key)
        stmt = select(ConceptRelationship).where(
            ConceptRelationship.from_concept_id == source.id,
            ConceptRelationship.to_concept_id == target.id,
            ConceptRelationship.relation_type == data.relation_type,
            *same_scope_criteria(ConceptRelationship, data.scope),
        )
        return self._session.execute(stmt.limit(1)).scalar_one_or_none()

    def add_relationship(self, data: RelationshipCreate) -> ConceptRelationship:
        """Create a directed edge between two existing concepts.

        An identical edge (endpoints, type, scope) is returned unchanged.
        """
        existing = self.find_relationship(data)
        if existing is not None:
            return existing

        source = self.require_concept(data.from_key)
        target = self.require_concept(data.to_key)

        relationship = ConceptRelationship(
            from_concept_id=source.id,
            to_concept_id=target.id,
            relation_type=data.relation_type,
            weight=data.weight,
            status=data.status,
            confidence=data.confidence,
            **_scoped_columns(data),
        )
        self._session.add(relationship)
        self._session.flush()
        return relationship

    def load_fixture(self, payload: dict[str, Any]) -> dict[str, int]:
        """Load a glossary fixture.

        Expected shape::

            {
              "concepts": [
                {"key": ..., "label": ..., "aliases": [{...}], "definitions": [{...}]}
              ],
              "relationships": [{"from_key": ..., "to_key": ..., "relation_type": ...}]
            }

        Concepts that already exist are skipped together with their
        aliases and definitions; relationships already stored are skipped
        too, so reloading the same fixture is a no-op.

        Returns:
            Counts of created rows per kind.
        """
        counts = {"concepts": 0, "aliases": 0, "definitions": 0, "relationships": 0}

        for entry in payload.get("concepts", []):
            entry = dict(entry)
            aliases = entry.pop("aliases", [])
            definitions = entry.pop("definitions", [])
            data = ConceptCreate.model_validate(entry)

            if self.get_concept_by_key(data.key) is not None:
                logger.info(f"Concept {canonical_key(data.key)} exists, skipping")
                continue

            self.create_concept(data)
            counts["concepts"] += 1
            for alias in aliases:
                self.add_alias(data.key, AliasCreate.model_validate(alias))
                counts["aliases"] += 1
            for definition in definitions:
                self.add_definition_version(data.key, DefinitionCreate.model_validate(definition))
                counts["definitions"] += 1

        for relationship in payload.get("relationships", []):
            data = RelationshipCreate.model_validate(relationship)
            if self.find_relationship(data) is not None:
                continue
            self.add_relationship(data)
            counts["relationships"] += 1

        logger.info(f"Loaded glossary fixture: {counts}")
        return counts
