"""Term candidate mining and review workflow schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from app.schemas.base import CandidateStatus, ConceptCriticality, ConceptStatus


class SlangSourceMetadata(BaseModel):
    """Provenance of a text fed to the term miner."""

    source_type: str = Field(default="document", max_length=64)
    document_id: str | None = Field(None, description="Source document, if any")
    author: str | None = None
    team: str | None = None
    product: str | None = None
    region: str | None = None
    process: str | None = None
    role: str | None = None


class TermCandidate(BaseModel):
    """Mined term candidate as shown in the review queue."""

    id: UUID
    term_original: str
    term_normalized: str
    contexts: list[str] = Field(default_factory=list)
    frequency: int
    source_type: str
    document_id: str | None = None
    author: str | None = None
    team: str | None = None
    product: str | None = None
    region: str | None = None
    process: str | None = None
    role: str | None = None
    candidate_concept_key: str | None = None
    suggested_definition: str | None = None
    confidence: float
    status: CandidateStatus
    detected_at: datetime
    reviewed_at: datetime | None = None
    reviewed_by: str | None = None

    model_config = {"from_attributes": True}


class ReviewQueueFilters(BaseModel):
    """Filters for listing the review queue."""

    status: CandidateStatus = CandidateStatus.PENDING
    limit: int = Field(default=50, ge=1, le=500)


class ApprovalInput(BaseModel):
    """Reviewer input for approving a candidate into a concept."""

    reviewer_id: str | None = None
    concept_key: str = Field(..., max_length=128, description="Target concept key (uppercased)")
    concept_label: str = Field(..., max_length=256)
    definition: str = Field(..., min_length=1)
    confidence: float | None = Field(None, ge=0.0, le=1.0)
    status: ConceptStatus | None = Field(None, description="Status for a newly created concept")
    criticality: ConceptCriticality | None = None
    source_of_truth_doc_id: str | None = None
    notes: str | None = None


class ApprovalResult(BaseModel):
    """Ids produced by an approval."""

    candidate_id: str
    concept_id: str
    definition_version_id: str
    alias_id: str


class RejectionInput(BaseModel):
    """Reviewer input for rejecting a candidate."""

    reviewer_id: str | None = None
    notes: str | None = None


class RejectionResult(BaseModel):
    """Outcome of a rejection."""

    candidate_id: str
    status: CandidateStatus = CandidateStatus.REJECTED


class IngestRequest(BaseModel):
    """Text to mine for slang candidates."""

    text: str = Field(..., min_length=1, max_length=2_000_000)
    metadata: SlangSourceMetadata = Field(default_factory=SlangSourceMetadata)
    inline: bool = Field(False, description="Mine synchronously instead of queueing a job")


class IngestResponse(BaseModel):
    """Result of an ingest request."""

    queued: bool
    job_id: str | None = None
    inserted: int | None = None


class MiningJobStatus(BaseModel):
    """State of a queued term mining job."""

    job_id: str
    status: str = Field(..., description="RQ status: queued, started, finished, failed, ...")
    result: dict | None = Field(None, description="Job return value once finished")
