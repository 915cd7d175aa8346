"""Term mining job functions."""

import logging
from typing import Any

from sqlalchemy.orm import Session

from app.core.database import get_sync_engine
from app.schemas.review import SlangSourceMetadata
from app.services.term_mining import TermMiningService

logger = logging.getLogger(__name__)


def mine_document_terms(text: str, metadata: dict[str, Any] | None = None) -> dict:
    """Mine slang term candidates from one document's text.

    Executed by an RQ worker after text extraction. Candidates land in
    the review queue; nothing is approved here.

    Args:
        text: Extracted document text.
        metadata: SlangSourceMetadata fields (document_id, author, scope).

    Returns:
        Dictionary with the number of newly inserted candidates.
    """
    source = SlangSourceMetadata.model_validate(metadata or {})
    logger.info(f"Starting term mining for document_id={source.document_id}")

    try:
        with Session(get_sync_engine()) as session:
            inserted = TermMiningService(session).ingest_slang_candidates(text, source)
            session.commit()
    except Exception as e:
        logger.exception(f"Error mining terms for document {source.document_id}: {e}")
        return {"success": False, "document_id": source.document_id, "error": str(e)}

    logger.info(
        f"Term mining completed for document_id={source.document_id}, inserted={inserted}"
    )
    return {"success": True, "document_id": source.document_id, "inserted": inserted}
