"""Term candidate review API endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, status
from redis.exceptions import RedisError

from app.api.deps import SyncDbSession
from app.core.queue import QUEUE_NAMES, enqueue_job, get_job_result, get_job_status
from app.jobs import mine_document_terms
from app.schemas.base import CandidateStatus
from app.schemas.review import (
    ApprovalInput,
    ApprovalResult,
    IngestRequest,
    IngestResponse,
    MiningJobStatus,
    RejectionInput,
    RejectionResult,
    ReviewQueueFilters,
    TermCandidate,
)
from app.services.review_workflow import (
    CandidateAlreadyReviewedError,
    ReviewWorkflowService,
    TermCandidateNotFoundError,
)
from app.services.term_mining import TermMiningService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/review", tags=["Review"])


@router.get(
    "/candidates",
    response_model=list[TermCandidate],
    summary="List the definition review queue",
)
def list_candidates(
    db: SyncDbSession,
    candidate_status: Annotated[CandidateStatus, Query(alias="status")] = CandidateStatus.PENDING,
    limit: Annotated[int, Query(ge=1, le=500)] = 50,
) -> list[TermCandidate]:
    """List term candidates, newest first."""
    filters = ReviewQueueFilters(status=candidate_status, limit=limit)
    candidates = ReviewWorkflowService(db).list_review_queue(filters)
    return [TermCandidate.model_validate(candidate) for candidate in candidates]


@router.post(
    "/candidates/{candidate_id}/approve",
    response_model=ApprovalResult,
    summary="Approve a term candidate into a concept",
)
def approve_candidate(
    candidate_id: str,
    data: ApprovalInput,
    db: SyncDbSession,
) -> ApprovalResult:
    """Approve a candidate, creating the concept, alias and definition version.

    Raises:
        HTTPException: 404 unknown candidate, 409 already reviewed,
            400 invalid concept key.
    """
    try:
        return ReviewWorkflowService(db).approve_term_candidate(candidate_id, data)
    except TermCandidateNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except CandidateAlreadyReviewedError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e


@router.post(
    "/candidates/{candidate_id}/reject",
    response_model=RejectionResult,
    summary="Reject a term candidate",
)
def reject_candidate(
    candidate_id: str,
    db: SyncDbSession,
    data: RejectionInput | None = None,
) -> RejectionResult:
    """Reject a candidate. Rejection is terminal."""
    try:
        return ReviewWorkflowService(db).reject_term_candidate(candidate_id, data)
    except TermCandidateNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except CandidateAlreadyReviewedError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e


@router.post(
    "/ingest",
    response_model=IngestResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Mine slang candidates from document text",
    description="Queues a term mining job, or mines synchronously when inline is set.",
)
def ingest_text(request: IngestRequest, db: SyncDbSession) -> IngestResponse:
    """Feed extracted document text to the term miner."""
    if request.inline:
        inserted = TermMiningService(db).ingest_slang_candidates(request.text, request.metadata)
        db.commit()
        return IngestResponse(queued=False, inserted=inserted)

    job = enqueue_job(
        mine_document_terms,
        request.text,
        request.metadata.model_dump(),
        queue_name=QUEUE_NAMES["term_mining"],
    )
    logger.info(f"Queued term mining job {job.id} for document_id={request.metadata.document_id}")
    return IngestResponse(queued=True, job_id=job.id)


@router.get(
    "/jobs/{job_id}",
    response_model=MiningJobStatus,
    summary="Get term mining job status",
    description="Poll a job id returned by POST /review/ingest.",
)
def get_mining_job(job_id: str) -> MiningJobStatus:
    """Look up a queued mining job in RQ; the result is included once finished."""
    try:
        job_status = get_job_status(job_id)
        result = get_job_result(job_id) if job_status == "finished" else None
    except RedisError as e:
        logger.warning(f"Failed to get RQ job status for {job_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Job store unavailable",
        ) from e

    if job_status is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Job with ID {job_id} not found",
        )

    return MiningJobStatus(job_id=job_id, status=job_status, result=result)
