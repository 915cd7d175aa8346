"""Shared FastAPI dependencies."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from app.core.config import FeatureFlags, get_feature_flags, settings
from app.core.database import get_sync_db
from app.services.llm_fallback import FallbackTermClassifier

# Type alias for sync database session dependency (avoids B008 linting issue)
SyncDbSession = Annotated[Session, Depends(get_sync_db)]


def get_flags() -> FeatureFlags:
    """Process-wide feature flags."""
    return get_feature_flags(settings)


def get_fallback_classifier() -> FallbackTermClassifier | None:
    """LLM fallback classifier, or None when no API key is configured."""
    return FallbackTermClassifier.from_settings(settings)


Flags = Annotated[FeatureFlags, Depends(get_flags)]
Classifier = Annotated[FallbackTermClassifier | None, Depends(get_fallback_classifier)]
