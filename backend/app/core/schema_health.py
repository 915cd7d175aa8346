"""Schema health checks for the concept graph tables.

The readiness probe verifies that every table and column the resolver
reads exists. Results are cached in a TTLCache that the application
creates once at startup and hands to the checker.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import inspect
from sqlalchemy.engine import Connection
from sqlalchemy.orm import Session

from app.models import (
    Concept,
    ConceptAlias,
    ConceptDefinitionVersion,
    ConceptEvidence,
    ConceptRelationship,
    DefinitionReview,
    TermCandidate,
)

logger = logging.getLogger(__name__)

REQUIRED_TABLE_COLUMNS: dict[str, frozenset[str]] = {
    model.__table__.name: frozenset(column.name for column in model.__table__.columns)
    for model in (
        Concept,
        ConceptAlias,
        ConceptDefinitionVersion,
        ConceptRelationship,
        ConceptEvidence,
        TermCandidate,
        DefinitionReview,
    )
}


class SchemaHealthError(RuntimeError):
    """Raised when required concept graph tables or columns are missing."""


@dataclass
class TTLCache:
    """Single-value cache with an absolute expiry timestamp.

    Attributes:
        ttl_seconds: Lifetime of a stored value.
        value: Cached value, None when empty.
        expires_at: Monotonic time after which value is stale.
    """

    ttl_seconds: float
    value: Any = None
    expires_at: float = 0.0
    clock: Callable[[], float] = time.monotonic

    def get(self) -> Any:
        if self.value is None or self.clock() >= self.expires_at:
            return None
        return self.value

    def set(self, value: Any) -> None:
        self.value = value
        self.expires_at = self.clock() + self.ttl_seconds

    def clear(self) -> None:
        self.value = None
        self.expires_at = 0.0


@dataclass(frozen=True)
class SchemaHealthReport:
    """Outcome of one schema inspection."""

    missing_tables: tuple[str, ...] = ()
    missing_columns: dict[str, tuple[str, ...]] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.missing_tables and not self.missing_columns

    def describe(self) -> str:
        parts = []
        if self.missing_tables:
            parts.append(f"missing tables: {', '.join(self.missing_tables)}")
        for table, columns in self.missing_columns.items():
            parts.append(f"{table} missing columns: {', '.join(columns)}")
        return "; ".join(parts) or "ok"


class SchemaHealthChecker:
    """Inspect the database schema, caching the report in a TTLCache.

    Usage:
        checker = SchemaHealthChecker(app.state.schema_health_cache)
        report = await db.run_sync(checker.check)
    """

    def __init__(
        self,
        cache: TTLCache,
        required: dict[str, frozenset[str]] | None = None,
    ) -> None:
        self._cache = cache
        self._required = required or REQUIRED_TABLE_COLUMNS

    def check(self, bind: Session | Connection) -> SchemaHealthReport:
        cached = self._cache.get()
        if cached is not None:
            return cached

        connection = bind.connection() if isinstance(bind, Session) else bind
        inspector = inspect(connection)
        existing_tables = set(inspector.get_table_names())

        missing_tables = tuple(sorted(name for name in self._required if name not in existing_tables))
        missing_columns: dict[str, tuple[str, ...]] = {}
        for table, columns in sorted(self._required.items()):
            if table not in existing_tables:
                continue
            present = {column["name"] for column in inspector.get_columns(table)}
            absent = tuple(sorted(columns - present))
            if absent:
                missing_columns[table] = absent

        report = SchemaHealthReport(missing_tables=missing_tables, missing_columns=missing_columns)
        if not report.ok:
            logger.warning(f"Concept graph schema is incomplete: {report.describe()}")
        self._cache.set(report)
        return report

    def assert_healthy(self, bind: Session | Connection) -> SchemaHealthReport:
        report = self.check(bind)
        if not report.ok:
            raise SchemaHealthError(report.describe())
        return report
