"""Pytest configuration and fixtures for backend tests."""

from collections.abc import AsyncGenerator, Callable, Generator
from datetime import UTC, datetime
from unittest.mock import MagicMock

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.deps import get_fallback_classifier, get_flags
from app.core.config import FeatureFlags
from app.core.database import Base, get_sync_db
from app.main import app
from app.models import (
    Concept,
    ConceptAlias,
    ConceptDefinitionVersion,
    ConceptEvidence,
    ConceptRelationship,
    DefinitionReview,
    TermCandidate,
)
from app.schemas.base import AliasStatus, ConceptCriticality, ConceptStatus, DefinitionStatus
from app.services.normalization import normalize_term

# Shared in-memory database; StaticPool keeps one connection so sync
# endpoints running in the threadpool see the same data.
_test_engine = create_engine(
    "sqlite://",
    echo=False,
    future=True,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
_TestSession = sessionmaker(
    bind=_test_engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
)

CONCEPT_GRAPH_TABLES = [
    model.__table__
    for model in (
        Concept,
        ConceptAlias,
        ConceptDefinitionVersion,
        ConceptRelationship,
        ConceptEvidence,
        TermCandidate,
        DefinitionReview,
    )
]

LONG_AGO = datetime(2020, 1, 1, tzinfo=UTC)


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Create a database session with the concept graph tables."""
    Base.metadata.create_all(bind=_test_engine, tables=CONCEPT_GRAPH_TABLES)

    session = _TestSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=_test_engine, tables=CONCEPT_GRAPH_TABLES)


@pytest.fixture
def make_concept(db_session: Session) -> Callable[..., Concept]:
    """Factory for approved concepts with aliases and an optional definition.

    Aliases and definitions default to valid since 2020 with no scope.
    """

    def _make(
        key: str,
        aliases: list[str] | None = None,
        definition: str | None = None,
        criticality: ConceptCriticality = ConceptCriticality.NORMAL,
        status: ConceptStatus = ConceptStatus.APPROVED,
        definition_confidence: float = 0.8,
        alias_scope: dict | None = None,
        definition_scope: dict | None = None,
        valid_from: datetime = LONG_AGO,
        valid_to: datetime | None = None,
    ) -> Concept:
        concept = Concept(key=key, label=key.title(), status=status, criticality=criticality)
        db_session.add(concept)
        db_session.flush()

        for alias in aliases or []:
            db_session.add(
                ConceptAlias(
                    concept_id=concept.id,
                    alias=alias,
                    alias_normalized=normalize_term(alias),
                    status=AliasStatus.ACTIVE,
                    confidence=0.9,
                    valid_from=valid_from,
                    valid_to=valid_to,
                    **(alias_scope or {}),
                )
            )
        if definition is not None:
            db_session.add(
                ConceptDefinitionVersion(
                    concept_id=concept.id,
                    version=1,
                    definition=definition,
                    status=DefinitionStatus.APPROVED,
                    confidence=definition_confidence,
                    valid_from=valid_from,
                    valid_to=valid_to,
                    **(definition_scope or {}),
                )
            )
        db_session.flush()
        return concept

    return _make


@pytest.fixture
def feature_flags() -> FeatureFlags:
    """Feature flags used by API tests (all off)."""
    return FeatureFlags()


@pytest.fixture
def mock_classifier() -> MagicMock:
    """Fallback classifier that proposes no terms."""
    classifier = MagicMock()
    classifier.classify.return_value = []
    return classifier


@pytest.fixture
def mock_enqueue_job() -> MagicMock:
    """Create a mock enqueue_job function.

    Returns a mock that can be used to verify job enqueueing.
    """
    mock_job = MagicMock()
    mock_job.id = "mock-job-id"
    return MagicMock(return_value=mock_job)


@pytest.fixture
async def api_client(
    db_session: Session,
    feature_flags: FeatureFlags,
    mock_classifier: MagicMock,
) -> AsyncGenerator[AsyncClient, None]:
    """Async test client backed by the in-memory SQLite session."""

    def override_get_sync_db() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[get_sync_db] = override_get_sync_db
    app.dependency_overrides[get_flags] = lambda: feature_flags
    app.dependency_overrides[get_fallback_classifier] = lambda: mock_classifier

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    # Clean up overrides
    app.dependency_overrides.clear()


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Create async test client without database access.

    Use this for endpoints that don't require database access.
    """
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
