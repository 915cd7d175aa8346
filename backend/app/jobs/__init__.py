"""Background jobs executed by RQ workers."""

from app.jobs.term_mining import mine_document_terms

__all__ = ["mine_document_terms"]
