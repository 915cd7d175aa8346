"""Human review of mined term candidates.

Approval turns a candidate into an approved concept, alias and
definition version; rejection closes it. Each decision is one unit of
work: every write is committed together or rolled back together, and a
DefinitionReview row records it.
"""

import logging
from datetime import UTC, datetime

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.core.audit import log_review_decision
from app.models.concept import Concept, ConceptAlias, ConceptDefinitionVersion, ConceptEvidence
from app.models.term_candidate import DefinitionReview, TermCandidate
from app.schemas.base import (
    AliasStatus,
    CandidateStatus,
    ConceptCriticality,
    ConceptStatus,
    DefinitionStatus,
    ReviewDecision,
)
from app.schemas.review import ApprovalInput, ApprovalResult, RejectionInput, RejectionResult, ReviewQueueFilters
from app.services.normalization import normalize_term
from app.services.scope import SCOPE_DIMENSIONS, same_scope_criteria, scope_values

logger = logging.getLogger(__name__)

DEFAULT_DEFINITION_CONFIDENCE = 0.7
APPROVAL_NOTES = "Approved via review workflow"
REJECTION_NOTES = "Rejected via review workflow"


def _first_set(*values: float | None) -> float:
    """First value that is not None; 0.0 counts as set."""
    return next(value for value in values if value is not None)


class TermCandidateNotFoundError(LookupError):
    """Raised when a review targets a candidate that does not exist."""

    def __init__(self, candidate_id: str) -> None:
        super().__init__(f"Term candidate {candidate_id} not found")
        self.candidate_id = candidate_id


class CandidateAlreadyReviewedError(ValueError):
    """Raised when a candidate is approved or rejected a second time."""

    def __init__(self, candidate_id: str, status: CandidateStatus) -> None:
        super().__init__(f"Term candidate {candidate_id} is already {status.value}")
        self.candidate_id = candidate_id
        self.status = status


class ReviewWorkflowService:
    """Review queue listing and approve/reject decisions."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def list_review_queue(self, filters: ReviewQueueFilters | None = None) -> list[TermCandidate]:
        """Candidates in the given status, newest first."""
        filters = filters or ReviewQueueFilters()
        stmt = (
            select(TermCandidate)
            .where(TermCandidate.status == filters.status)
            .order_by(TermCandidate.detected_at.desc())
            .limit(filters.limit)
        )
        return list(self._session.execute(stmt).scalars().all())

    def approve_term_candidate(self, candidate_id: str, data: ApprovalInput) -> ApprovalResult:
        """Approve a candidate into the concept store.

        Raises:
            TermCandidateNotFoundError: Unknown candidate.
            CandidateAlreadyReviewedError: Candidate is not pending.
            ValueError: Blank concept key or definition.
        """
        concept_key = data.concept_key.strip().upper()
        if not concept_key:
            raise ValueError("concept_key must not be empty")
        definition_text = data.definition.strip()
        if not definition_text:
            raise ValueError("definition must not be empty")

        candidate = self._get_pending(candidate_id)
        reviewer = data.reviewer_id
        now = datetime.now(UTC)
        scope = dict(zip(SCOPE_DIMENSIONS, scope_values(candidate)))

        try:
            concept = self._get_or_create_concept(concept_key, data, candidate, reviewer)

            definition = ConceptDefinitionVersion(
                concept_id=concept.id,
                version=self._next_version(concept.id),
                definition=definition_text,
                status=DefinitionStatus.APPROVED,
                confidence=_first_set(data.confidence, candidate.confidence, DEFAULT_DEFINITION_CONFIDENCE),
                source_of_truth_doc_id=data.source_of_truth_doc_id or candidate.document_id,
                defined_by=reviewer,
                approved_by=reviewer,
                valid_from=now,
                **scope,
            )
            self._session.add(definition)
            self._session.flush()

            alias = self._get_or_create_alias(concept.id, candidate, reviewer, now, scope)

            if candidate.contexts or candidate.document_id:
                excerpt = (
                    (candidate.contexts[0] if candidate.contexts else None)
                    or candidate.suggested_definition
                    or candidate.term_original
                )
                self._session.add(
                    ConceptEvidence(
                        concept_id=concept.id,
                        definition_version_id=definition.id,
                        alias_id=alias.id,
                        document_id=candidate.document_id,
                        source_type=candidate.source_type,
                        excerpt=excerpt,
                        author=candidate.author,
                        **scope,
                    )
                )

            candidate.status = CandidateStatus.APPROVED
            candidate.reviewed_at = now
            candidate.reviewed_by = reviewer
            candidate.candidate_concept_key = concept_key
            candidate.updated_at = now

            self._session.add(
                DefinitionReview(
                    candidate_id=candidate.id,
                    concept_id=concept.id,
                    definition_version_id=definition.id,
                    reviewer_id=reviewer,
                    decision=ReviewDecision.APPROVED,
                    notes=data.notes or APPROVAL_NOTES,
                )
            )
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        log_review_decision(
            candidate_id=candidate_id,
            approved=True,
            reviewer_id=reviewer,
            concept_key=concept_key,
            definition_version_id=definition.id,
        )
        logger.info(f"Approved term candidate {candidate_id} as {concept_key} v{definition.version}")

        return ApprovalResult(
            candidate_id=candidate_id,
            concept_id=concept.id,
            definition_version_id=definition.id,
            alias_id=alias.id,
        )

    def reject_term_candidate(self, candidate_id: str, data: RejectionInput | None = None) -> RejectionResult:
        """Reject a candidate. Terminal.

        Raises:
            TermCandidateNotFoundError: Unknown candidate.
            CandidateAlreadyReviewedError: Candidate is not pending.
        """
        data = data or RejectionInput()
        candidate = self._get_pending(candidate_id)
        now = datetime.now(UTC)

        try:
            candidate.status = CandidateStatus.REJECTED
            candidate.reviewed_at = now
            candidate.reviewed_by = data.reviewer_id
            candidate.updated_at = now

            self._session.add(
                DefinitionReview(
                    candidate_id=candidate.id,
                    concept_id=None,
                    definition_version_id=None,
                    reviewer_id=data.reviewer_id,
                    decision=ReviewDecision.REJECTED,
                    notes=data.notes or REJECTION_NOTES,
                )
            )
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        log_review_decision(candidate_id=candidate_id, approved=False, reviewer_id=data.reviewer_id)
        logger.info(f"Rejected term candidate {candidate_id}")

        return RejectionResult(candidate_id=candidate_id)

    def _get_pending(self, candidate_id: str) -> TermCandidate:
        candidate = self._session.get(TermCandidate, candidate_id)
        if candidate is None:
            raise TermCandidateNotFoundError(candidate_id)
        if candidate.status != CandidateStatus.PENDING:
            raise CandidateAlreadyReviewedError(candidate_id, candidate.status)
        return candidate

    def _get_or_create_concept(
        self,
        key: str,
        data: ApprovalInput,
        candidate: TermCandidate,
        reviewer: str | None,
    ) -> Concept:
        concept = self._session.execute(select(Concept).where(Concept.key == key)).scalar_one_or_none()
        if concept is not None:
            return concept

        concept = Concept(
            key=key,
            label=data.concept_label.strip(),
            description=candidate.suggested_definition,
            status=data.status or ConceptStatus.APPROVED,
            criticality=data.criticality or ConceptCriticality.NORMAL,
            defined_by=reviewer,
            approved_by=reviewer,
        )
        self._session.add(concept)
        self._session.flush()
        return concept

    def _next_version(self, concept_id: str) -> int:
        stmt = select(func.max(ConceptDefinitionVersion.version)).where(
            ConceptDefinitionVersion.concept_id == concept_id
        )
        current = self._session.execute(stmt).scalar()
        return (current or 0) + 1

    def _get_or_create_alias(
        self,
        concept_id: str,
        candidate: TermCandidate,
        reviewer: str | None,
        now: datetime,
        scope: dict[str, str | None],
    ) -> ConceptAlias:
        alias_normalized = normalize_term(candidate.term_original)
        stmt = select(ConceptAlias).where(
            ConceptAlias.concept_id == concept_id,
            ConceptAlias.alias_normalized == alias_normalized,
            *same_scope_criteria(ConceptAlias, scope),
        )

        alias = self._session.execute(stmt.limit(1)).scalar_one_or_none()
        if alias is not None:
            return alias

        alias = ConceptAlias(
            concept_id=concept_id,
            alias=candidate.term_original,
            alias_normalized=alias_normalized,
            status=AliasStatus.ACTIVE,
            confidence=candidate.confidence,
            defined_by=reviewer,
            approved_by=reviewer,
            valid_from=now,
            **scope,
        )
        self._session.add(alias)
        self._session.flush()
        return alias
