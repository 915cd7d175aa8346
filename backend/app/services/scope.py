"""Scope compatibility and temporal validity predicates.

Aliases, definition versions and relationships are all filtered with the
same two checks, so they live here once.
"""

import logging
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

logger = logging.getLogger(__name__)

SCOPE_DIMENSIONS: tuple[str, ...] = ("team", "product", "region", "process", "role")

ScopeValues = tuple[str | None, ...]


def scope_values(source: Any) -> ScopeValues:
    """Read the five scope dimensions from a model, schema or mapping.

    Missing attributes and a None source yield None for every dimension.
    """
    if source is None:
        return (None,) * len(SCOPE_DIMENSIONS)
    if isinstance(source, Mapping):
        return tuple(source.get(dim) for dim in SCOPE_DIMENSIONS)
    return tuple(getattr(source, dim, None) for dim in SCOPE_DIMENSIONS)


def scope_matches(entity: Any, context: Any) -> bool:
    """Check if an entity's scope is compatible with the query context.

    A dimension only rejects when both sides set it and the values
    differ. An unscoped entity matches every context, and an empty
    context matches every entity.
    """
    for entity_value, context_value in zip(scope_values(entity), scope_values(context)):
        if entity_value and context_value and entity_value != context_value:
            return False
    return True


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes (stores without tz support)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def temporal_matches(entity: Any, effective_at: datetime) -> bool:
    """Check valid_from <= effective_at < valid_to (valid_to open when None)."""
    at = as_utc(effective_at)
    valid_from = getattr(entity, "valid_from", None)
    valid_to = getattr(entity, "valid_to", None)
    if valid_from is not None and as_utc(valid_from) > at:
        return False
    if valid_to is not None and as_utc(valid_to) <= at:
        return False
    return True


def is_applicable(entity: Any, context: Any, effective_at: datetime) -> bool:
    """Scope and temporal checks combined."""
    return scope_matches(entity, context) and temporal_matches(entity, effective_at)


def parse_effective_at(value: datetime | str | None) -> datetime:
    """Coerce an effective timestamp, falling back to now.

    Accepts datetimes and ISO-8601 strings (a trailing "Z" is allowed).
    Missing or unparseable input yields the current UTC time.
    """
    if isinstance(value, datetime):
        return as_utc(value)
    if isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            return as_utc(datetime.fromisoformat(text))
        except ValueError:
            logger.debug(f"Unparseable effective_at {value!r}, using now")
    return datetime.now(UTC)


def same_scope_criteria(model: Any, scope: Any) -> list[Any]:
    """SQL criteria selecting rows of ``model`` whose scope equals ``scope`` exactly.

    Unlike scope_matches, an unset dimension only matches NULL.
    """
    criteria = []
    for dim, value in zip(SCOPE_DIMENSIONS, scope_values(scope)):
        column = getattr(model, dim)
        criteria.append(column.is_(None) if value is None else column == value)
    return criteria
