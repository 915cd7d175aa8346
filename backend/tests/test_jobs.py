"""Tests for background job functions."""

from unittest.mock import MagicMock, patch

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.jobs import mine_document_terms
from app.models import TermCandidate


class TestMineDocumentTerms:
    """Test mine_document_terms job behavior."""

    @patch("app.jobs.term_mining.get_sync_engine")
    @patch("app.jobs.term_mining.Session")
    def test_commits_and_reports_inserted(
        self, mock_session_class: MagicMock, mock_get_sync_engine: MagicMock
    ) -> None:
        """Test the job commits and returns the inserted count."""
        mock_session = MagicMock()
        mock_session_class.return_value.__enter__ = MagicMock(return_value=mock_session)
        mock_session_class.return_value.__exit__ = MagicMock(return_value=None)

        with patch("app.jobs.term_mining.TermMiningService") as mock_service:
            mock_service.return_value.ingest_slang_candidates.return_value = 3
            result = mine_document_terms("text", {"document_id": "doc-1"})

        assert result == {"success": True, "document_id": "doc-1", "inserted": 3}
        mock_session.commit.assert_called_once()
        metadata = mock_service.return_value.ingest_slang_candidates.call_args[0][1]
        assert metadata.document_id == "doc-1"

    @patch("app.jobs.term_mining.get_sync_engine")
    @patch("app.jobs.term_mining.Session")
    def test_failure_returns_error(
        self, mock_session_class: MagicMock, mock_get_sync_engine: MagicMock
    ) -> None:
        """Test that a store error is reported instead of raised."""
        mock_session = MagicMock()
        mock_session.commit.side_effect = RuntimeError("database unavailable")
        mock_session_class.return_value.__enter__ = MagicMock(return_value=mock_session)
        mock_session_class.return_value.__exit__ = MagicMock(return_value=None)

        with patch("app.jobs.term_mining.TermMiningService"):
            result = mine_document_terms("text", {"document_id": "doc-1"})

        assert result["success"] is False
        assert result["document_id"] == "doc-1"
        assert "database unavailable" in result["error"]

    def test_mines_into_database(self, db_session: Session) -> None:
        """Test the job writes candidates through its own session."""
        engine = db_session.get_bind()

        with patch("app.jobs.term_mining.get_sync_engine", return_value=engine):
            result = mine_document_terms("Internally we call this Green Light", None)

        assert result["success"] is True
        assert result["inserted"] == 1
        stored = db_session.execute(select(TermCandidate)).scalar_one()
        assert stored.term_normalized == "green light"
        assert stored.document_id is None
