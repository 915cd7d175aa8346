"""API routers for the concept graph resolver."""

from app.api.concepts import router as concepts_router
from app.api.query_flow import router as query_flow_router
from app.api.review import router as review_router

__all__ = [
    "concepts_router",
    "query_flow_router",
    "review_router",
]
