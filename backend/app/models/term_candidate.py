"""SQLAlchemy models for mined term candidates and their review trail."""

from datetime import UTC, datetime

from sqlalchemy import JSON, DateTime, Enum, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base, UUIDType
from app.models.concept import ScopedMixin
from app.schemas.base import CandidateStatus, ReviewDecision


def _utcnow() -> datetime:
    return datetime.now(UTC)


class TermCandidate(ScopedMixin, Base):
    """Unreviewed slang term mined from ingested documents.

    Created or bumped by the term miner; closed by the review workflow
    (approved or rejected). Approval records a weak reference to the
    resulting concept key only.
    """

    __tablename__ = "term_candidates"
    __table_args__ = (
        Index("uq_term_candidates_term_document", "term_normalized", "document_id", unique=True),
    )

    term_original: Mapped[str] = mapped_column(
        String(256),
        nullable=False,
    )
    term_normalized: Mapped[str] = mapped_column(
        String(256),
        nullable=False,
        index=True,
    )
    contexts: Mapped[list[str]] = mapped_column(
        JSON().with_variant(JSONB, "postgresql"),
        nullable=False,
        default=list,
    )
    frequency: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=1,
    )
    source_type: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        default="document",
    )
    document_id: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )
    author: Mapped[str | None] = mapped_column(String(256), nullable=True)
    candidate_concept_key: Mapped[str | None] = mapped_column(String(128), nullable=True)
    suggested_definition: Mapped[str | None] = mapped_column(Text, nullable=True)
    confidence: Mapped[float] = mapped_column(
        Float,
        nullable=False,
        default=0.3,
    )
    status: Mapped[CandidateStatus] = mapped_column(
        Enum(
            CandidateStatus,
            name="candidate_status",
            native_enum=False,
            length=32,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
        default=CandidateStatus.PENDING,
        index=True,
    )
    detected_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )
    reviewed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    reviewed_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )

    def __repr__(self) -> str:
        return f"<TermCandidate(term='{self.term_normalized}', frequency={self.frequency}, status={self.status})>"

    @property
    def is_pending(self) -> bool:
        """Check if the candidate still awaits review."""
        return bool(self.status == CandidateStatus.PENDING)


class DefinitionReview(Base):
    """Immutable audit record of one review decision."""

    __tablename__ = "definition_reviews"

    candidate_id: Mapped[str | None] = mapped_column(
        UUIDType,
        ForeignKey("term_candidates.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    concept_id: Mapped[str | None] = mapped_column(
        UUIDType,
        ForeignKey("concepts.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    definition_version_id: Mapped[str | None] = mapped_column(
        UUIDType,
        ForeignKey("concept_definition_versions.id", ondelete="SET NULL"),
        nullable=True,
    )
    reviewer_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    decision: Mapped[ReviewDecision] = mapped_column(
        Enum(
            ReviewDecision,
            name="review_decision",
            native_enum=False,
            length=32,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<DefinitionReview(candidate_id={self.candidate_id}, decision={self.decision})>"
