"""Alias resolution against the concept store.

Maps normalized candidate terms to approved concepts through active
aliases, honoring scope compatibility and temporal validity, and picks
the best approved definition for every matched concept.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.concept import Concept, ConceptAlias, ConceptDefinitionVersion
from app.schemas.base import AliasStatus, ConceptCriticality, ConceptStatus, DefinitionStatus
from app.schemas.concept import ContextScope
from app.services.normalization import dedupe
from app.services.scope import as_utc, is_applicable

logger = logging.getLogger(__name__)


@dataclass
class ResolvedConcept:
    """A candidate term matched to a concept through one alias.

    Attributes:
        concept_id: Matched concept id.
        concept_key: Uppercase canonical key.
        concept_label: Human-readable label.
        alias: Alias in its original casing.
        alias_normalized: Normalized alias (the matched term).
        definition_version_id: Best applicable definition, if any.
        definition: Text of that definition, if any.
        confidence: Definition confidence, else alias confidence.
        criticality: Concept criticality.
    """

    concept_id: str
    concept_key: str
    concept_label: str
    alias: str
    alias_normalized: str
    definition_version_id: str | None
    definition: str | None
    confidence: float
    criticality: ConceptCriticality

    @property
    def is_critical(self) -> bool:
        return self.criticality == ConceptCriticality.CRITICAL


@dataclass
class AliasResolution:
    """Resolved concepts plus the candidates nothing matched."""

    resolved: list[ResolvedConcept] = field(default_factory=list)
    unresolved_terms: list[str] = field(default_factory=list)


def pick_best_definition(
    definitions: list[ConceptDefinitionVersion],
) -> ConceptDefinitionVersion | None:
    """Highest confidence wins; ties go to the most recent valid_from."""
    if not definitions:
        return None
    return max(definitions, key=lambda d: (d.confidence, as_utc(d.valid_from)))


class AliasResolverService:
    """Resolve candidate terms to concepts using a sync session.

    Usage:
        resolver = AliasResolverService(session)
        resolution = resolver.resolve(["green", "release gate"], scope, now)
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def resolve(
        self,
        candidates: list[str],
        context_scope: ContextScope | None,
        effective_at: datetime,
    ) -> AliasResolution:
        """Resolve normalized candidates.

        Store errors propagate; zero matches is a normal outcome.
        """
        terms = dedupe(candidates)
        if not terms:
            return AliasResolution()

        stmt = (
            select(ConceptAlias, Concept)
            .join(Concept, Concept.id == ConceptAlias.concept_id)
            .where(
                ConceptAlias.alias_normalized.in_(terms),
                ConceptAlias.status == AliasStatus.ACTIVE,
                Concept.status == ConceptStatus.APPROVED,
            )
            .order_by(ConceptAlias.alias_normalized, Concept.key)
        )
        rows = [
            (alias, concept)
            for alias, concept in self._session.execute(stmt).all()
            if is_applicable(alias, context_scope, effective_at)
        ]

        best_definitions = self._best_definitions(
            dedupe(concept.id for _, concept in rows),
            context_scope,
            effective_at,
        )

        resolved: list[ResolvedConcept] = []
        seen: set[tuple[str, str]] = set()
        for alias, concept in rows:
            pair = (alias.alias_normalized, concept.id)
            if pair in seen:
                continue
            seen.add(pair)

            definition = best_definitions.get(concept.id)
            resolved.append(
                ResolvedConcept(
                    concept_id=concept.id,
                    concept_key=concept.key,
                    concept_label=concept.label,
                    alias=alias.alias,
                    alias_normalized=alias.alias_normalized,
                    definition_version_id=definition.id if definition else None,
                    definition=definition.definition if definition else None,
                    confidence=definition.confidence if definition else alias.confidence,
                    criticality=concept.criticality,
                )
            )

        matched = {entry.alias_normalized for entry in resolved}
        unresolved = [term for term in terms if term not in matched]

        logger.debug(
            f"Resolved {len(resolved)} alias matches for {len(terms)} candidates "
            f"({len(unresolved)} unresolved)"
        )
        return AliasResolution(resolved=resolved, unresolved_terms=unresolved)

    def _best_definitions(
        self,
        concept_ids: list[str],
        context_scope: ContextScope | None,
        effective_at: datetime,
    ) -> dict[str, ConceptDefinitionVersion]:
        if not concept_ids:
            return {}

        stmt = select(ConceptDefinitionVersion).where(
            ConceptDefinitionVersion.concept_id.in_(concept_ids),
            ConceptDefinitionVersion.status == DefinitionStatus.APPROVED,
        )
        by_concept: dict[str, list[ConceptDefinitionVersion]] = {}
        for definition in self._session.execute(stmt).scalars():
            if is_applicable(definition, context_scope, effective_at):
                by_concept.setdefault(definition.concept_id, []).append(definition)

        best: dict[str, ConceptDefinitionVersion] = {}
        for concept_id, definitions in by_concept.items():
            chosen = pick_best_definition(definitions)
            if chosen is not None:
                best[concept_id] = chosen
        return best
