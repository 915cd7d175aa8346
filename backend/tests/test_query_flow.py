"""Tests for the query flow pipeline."""

from collections.abc import Callable
from datetime import UTC, datetime
from unittest.mock import MagicMock

from sqlalchemy.orm import Session

from app.models import Concept, ConceptRelationship
from app.schemas.base import AmbiguityPolicy, ConceptCriticality, RelationshipStatus
from app.schemas.concept import ContextScope
from app.services.graph_expander import GRAPH_SECTION_MARKER
from app.services.query_flow import (
    INTERNAL_MEANING_MARKER,
    QueryFlowService,
    build_internal_rewrite,
)

NOW = datetime(2026, 3, 1, tzinfo=UTC)


class TestQueryFlowService:
    """Test QueryFlowService.run end to end on SQLite."""

    def test_query_unchanged_when_graph_disabled(
        self, db_session: Session, make_concept: Callable[..., Concept]
    ) -> None:
        """Test the expanded query equals the input with graph off."""
        make_concept("GREEN_STATUS", aliases=["GREEN"], definition="Release ready.")

        result = QueryFlowService(db_session).run("Je to GREEN?", effective_at=NOW)

        assert result.expanded_query == "Je to GREEN?"
        assert result.interpretation.detected_terms == ["green"]
        assert result.interpretation.rewritten_query == "Je to GREEN?"
        assert result.strict_failure_message is None

    def test_rewrite_with_graph_enabled(
        self, db_session: Session, make_concept: Callable[..., Concept]
    ) -> None:
        """Test the internal meaning block and graph section are appended."""
        green = make_concept("GREEN_STATUS", aliases=["GREEN"], definition="Release ready.")
        gate = make_concept("RELEASE_GATE", aliases=["release gate"], definition="Checklist.")
        db_session.add(
            ConceptRelationship(
                from_concept_id=green.id,
                to_concept_id=gate.id,
                relation_type="dependsOn",
                status=RelationshipStatus.APPROVED,
                valid_from=datetime(2020, 1, 1, tzinfo=UTC),
            )
        )
        db_session.flush()

        result = QueryFlowService(db_session).run(
            "Je to GREEN?", effective_at=NOW, graph_enabled=True
        )

        lines = result.expanded_query.split("\n")
        assert lines[0] == "Je to GREEN?"
        assert INTERNAL_MEANING_MARKER in lines
        assert "EffectiveAt: 2026-03-01T00:00:00+00:00" in lines
        assert "- GREEN_STATUS: Release ready." in lines
        assert GRAPH_SECTION_MARKER in lines
        assert "- GREEN_STATUS dependsOn RELEASE_GATE" in lines
        assert result.interpretation.rewritten_query == result.expanded_query
        assert len(result.interpretation.definition_version_ids) == 1

    def test_no_graph_section_without_relationships(
        self, db_session: Session, make_concept: Callable[..., Concept]
    ) -> None:
        """Test the graph marker is absent when no relationship applies."""
        make_concept("GREEN_STATUS", aliases=["GREEN"], definition="Release ready.")

        result = QueryFlowService(db_session).run("Je to GREEN?", effective_at=NOW, graph_enabled=True)

        assert INTERNAL_MEANING_MARKER in result.expanded_query
        assert GRAPH_SECTION_MARKER not in result.expanded_query

    def test_unresolved_query_passes_through(self, db_session: Session) -> None:
        """Test that a query with no matches is returned unchanged."""
        result = QueryFlowService(db_session).run("hello world", effective_at=NOW, graph_enabled=True)

        assert result.expanded_query == "hello world"
        assert result.interpretation.resolved_concepts == []
        assert "hello world" in result.unresolved_terms

    def test_fallback_invoked_once_when_nothing_resolves(
        self, db_session: Session, make_concept: Callable[..., Concept]
    ) -> None:
        """Test fallback terms are re-resolved after a miss."""
        make_concept("HOTFIX_WINDOW", aliases=["hotfix okno"], definition="Patch slot.")
        classifier = MagicMock()
        classifier.classify.return_value = ["hotfix okno"]

        result = QueryFlowService(db_session, classifier=classifier).run(
            "Kdy je hotfixove okno?", effective_at=NOW, rewrite_enabled=True
        )

        classifier.classify.assert_called_once_with("Kdy je hotfixove okno?")
        assert [c.concept_key for c in result.interpretation.resolved_concepts] == ["HOTFIX_WINDOW"]

    def test_fallback_skipped_when_rewrite_disabled(self, db_session: Session) -> None:
        """Test the classifier is not called unless rewrite is enabled."""
        classifier = MagicMock()

        QueryFlowService(db_session, classifier=classifier).run("unknown slang", effective_at=NOW)

        classifier.classify.assert_not_called()

    def test_fallback_skipped_when_something_resolved(
        self, db_session: Session, make_concept: Callable[..., Concept]
    ) -> None:
        """Test the classifier is only a fallback."""
        make_concept("GREEN_STATUS", aliases=["GREEN"])
        classifier = MagicMock()

        QueryFlowService(db_session, classifier=classifier).run(
            "Je to GREEN?", effective_at=NOW, rewrite_enabled=True
        )

        classifier.classify.assert_not_called()

    def test_strict_policy_on_ambiguity(
        self, db_session: Session, make_concept: Callable[..., Concept]
    ) -> None:
        """Test strict policy blocks an ambiguous term."""
        make_concept("GREEN_STATUS", aliases=["GREEN"], definition="Release ready.")
        make_concept("GREEN_ACCOUNT", aliases=["GREEN"], definition="Healthy account.")
        service = QueryFlowService(db_session)

        strict = service.run("Je to GREEN?", effective_at=NOW, ambiguity_policy=AmbiguityPolicy.STRICT)
        show_both = service.run("Je to GREEN?", effective_at=NOW)

        assert len(strict.ambiguities) == 1
        assert strict.ambiguities[0].candidate_concepts == ["GREEN_ACCOUNT", "GREEN_STATUS"]
        assert strict.strict_failure_message is not None
        assert len(show_both.ambiguities) == 1
        assert show_both.strict_failure_message is None

    def test_strict_grounding_on_critical_concept(
        self, db_session: Session, make_concept: Callable[..., Concept]
    ) -> None:
        """Test critical concepts without definitions block under strict grounding."""
        make_concept("HOTFIX_WINDOW", aliases=["hotfix window"], criticality=ConceptCriticality.CRITICAL)
        service = QueryFlowService(db_session)

        blocked = service.run("Open the hotfix window", effective_at=NOW, strict_grounding=True)
        allowed = service.run("Open the hotfix window", effective_at=NOW)

        assert blocked.strict_failure_message is not None
        assert "HOTFIX_WINDOW" in blocked.strict_failure_message
        assert allowed.strict_failure_message is None

    def test_context_scope_disambiguates(
        self, db_session: Session, make_concept: Callable[..., Concept]
    ) -> None:
        """Test scope removes the out-of-team meaning."""
        make_concept("GREEN_STATUS", aliases=["GREEN"], alias_scope={"team": "delivery"})
        make_concept("GREEN_ACCOUNT", aliases=["GREEN"], alias_scope={"team": "sales"})

        result = QueryFlowService(db_session).run(
            "Je to GREEN?", context_scope=ContextScope(team="sales"), effective_at=NOW
        )

        assert result.ambiguities == []
        assert [c.concept_key for c in result.interpretation.resolved_concepts] == ["GREEN_ACCOUNT"]

    def test_stats_recorded(self, db_session: Session) -> None:
        """Test timings are non-negative."""
        result = QueryFlowService(db_session).run("anything", effective_at=NOW)

        assert result.stats.interpretation_time_ms >= 0
        assert result.stats.graph_expansion_time_ms >= 0


class TestBuildInternalRewrite:
    """Test internal rewrite rendering."""

    def test_no_resolved_concepts(self) -> None:
        """Test the query is returned unchanged."""
        assert build_internal_rewrite("query", [], None, NOW) == "query"

    def test_scope_line_and_missing_definition(self) -> None:
        """Test the scope line and the missing definition placeholder."""
        resolved = MagicMock(concept_key="HOTFIX_WINDOW", definition=None)

        text = build_internal_rewrite("query", [resolved], ContextScope(team="sales"), NOW)

        assert 'Scope: {"team":"sales"}' in text
        assert "- HOTFIX_WINDOW: (definition missing)" in text

    def test_empty_scope_omitted(self) -> None:
        """Test an empty scope does not produce a Scope line."""
        resolved = MagicMock(concept_key="A", definition="d")

        text = build_internal_rewrite("query", [resolved], ContextScope(), NOW)

        assert "Scope:" not in text
