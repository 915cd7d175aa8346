"""Graph expansion over approved concept relationships."""

import logging
from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.concept import Concept, ConceptRelationship
from app.schemas.base import RelationshipStatus
from app.schemas.concept import ContextScope
from app.services.normalization import dedupe
from app.services.scope import is_applicable

logger = logging.getLogger(__name__)

GRAPH_SECTION_MARKER = "[GRAPH_RELATIONSHIPS]"


def render_graph_section(hints: Sequence[str]) -> str:
    """Render hint lines under the graph marker; empty string for no hints."""
    if not hints:
        return ""
    return "\n".join([GRAPH_SECTION_MARKER, *(f"- {hint}" for hint in hints)])


class GraphExpanderService:
    """Turn outgoing relationships of resolved concepts into hint lines.

    Each hint reads "<FROM_KEY> <relation_type> <TO_KEY>". Endpoints whose
    key cannot be looked up fall back to the raw concept id.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def expand(
        self,
        concept_ids: Sequence[str],
        context_scope: ContextScope | None,
        effective_at: datetime,
    ) -> list[str]:
        ids = dedupe(concept_ids)
        if not ids:
            return []

        stmt = (
            select(ConceptRelationship)
            .where(
                ConceptRelationship.from_concept_id.in_(ids),
                ConceptRelationship.status == RelationshipStatus.APPROVED,
            )
            .order_by(ConceptRelationship.created_at, ConceptRelationship.id)
        )
        relationships = [
            rel
            for rel in self._session.execute(stmt).scalars()
            if is_applicable(rel, context_scope, effective_at)
        ]
        if not relationships:
            return []

        keys = self._concept_keys(
            dedupe(
                concept_id
                for rel in relationships
                for concept_id in (rel.from_concept_id, rel.to_concept_id)
            )
        )
        hints = [
            f"{keys.get(rel.from_concept_id, rel.from_concept_id)} "
            f"{rel.relation_type} "
            f"{keys.get(rel.to_concept_id, rel.to_concept_id)}"
            for rel in relationships
        ]
        logger.debug(f"Graph expansion produced {len(hints)} hints for {len(ids)} concepts")
        return dedupe(hints)

    def _concept_keys(self, concept_ids: list[str]) -> dict[str, str]:
        stmt = select(Concept.id, Concept.key).where(Concept.id.in_(concept_ids))
        return {concept_id: key for concept_id, key in self._session.execute(stmt).all()}
