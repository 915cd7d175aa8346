"""Query flow API endpoint."""

import logging

from fastapi import APIRouter, status

from app.api.deps import Classifier, Flags, SyncDbSession
from app.core.config import settings
from app.schemas.query_flow import InterpretationPayload, QueryFlowRequest, QueryFlowResponse
from app.services.query_flow import QueryFlowService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/concepts", tags=["Query Flow"])


def _pick(override: bool | None, default: bool) -> bool:
    return default if override is None else override


@router.post(
    "/query-flow",
    response_model=QueryFlowResponse,
    status_code=status.HTTP_200_OK,
    summary="Resolve internal terminology in a query",
    description=(
        "Detects internal slang, resolves it to scoped, time-valid definitions, "
        "flags ambiguity and optionally expands the query with graph hints."
    ),
)
def run_query_flow(
    request: QueryFlowRequest,
    db: SyncDbSession,
    flags: Flags,
    classifier: Classifier,
) -> QueryFlowResponse:
    """Run the query flow for one query.

    With the kill switch on the raw query is returned untouched and the
    store is not consulted. Flags left unset in the request come from
    process configuration.
    """
    if flags.kill_switch:
        logger.info("Concept graph kill switch is on, bypassing query flow")
        return QueryFlowResponse(
            expanded_query=request.query,
            interpretation=InterpretationPayload(),
            bypassed=True,
        )

    service = QueryFlowService(db, classifier=classifier)
    result = service.run(
        query=request.query,
        context_scope=request.context_scope,
        effective_at=request.effective_at,
        ambiguity_policy=request.ambiguity_policy or settings.default_ambiguity_policy,
        rewrite_enabled=_pick(request.rewrite_enabled, flags.rewrite_enabled),
        graph_enabled=_pick(request.graph_enabled, flags.graph_enabled),
        strict_grounding=_pick(request.strict_grounding, flags.strict_grounding),
    )
    return QueryFlowResponse(**result.model_dump())
