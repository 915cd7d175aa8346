"""Tests for slang term mining and candidate upserts."""

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models import TermCandidate
from app.schemas.base import CandidateStatus
from app.schemas.review import SlangSourceMetadata
from app.services.term_mining import (
    MAX_CONTEXT_CHARS,
    MAX_CONTEXTS,
    MIN_UPDATE_CONFIDENCE,
    NGRAM_LIMIT,
    PATTERN_CONFIDENCE,
    TermCandidateInput,
    TermMiningService,
    dedupe_candidates,
    extract_ngram_terms,
    extract_pattern_terms,
)


def _candidates(session: Session) -> list[TermCandidate]:
    return list(session.execute(select(TermCandidate).order_by(TermCandidate.term_normalized)).scalars())


def _stored(
    session: Session,
    term: str,
    confidence: float = 0.5,
    contexts: list[str] | None = None,
) -> TermCandidate:
    candidate = TermCandidate(
        term_original=term,
        term_normalized=term,
        contexts=contexts or [],
        frequency=1,
        document_id="doc-1",
        confidence=confidence,
        status=CandidateStatus.PENDING,
    )
    session.add(candidate)
    session.flush()
    return candidate


class TestExtractPatternTerms:
    """Test explicit naming phrase extraction."""

    def test_we_call_it(self) -> None:
        """Test the English naming phrase."""
        terms = extract_pattern_terms("Internally we call this Green Light")

        assert len(terms) == 1
        assert terms[0].term_original == "Green Light"
        assert terms[0].term_normalized == "green light"
        assert terms[0].confidence == PATTERN_CONFIDENCE
        assert terms[0].context == "Internally we call this Green Light"

    def test_quoted_czech_phrase(self) -> None:
        """Test the Czech naming phrase with quotes."""
        terms = extract_pattern_terms('Tomu procesu říkáme tomu "hotfix okno"')

        assert [t.term_normalized for t in terms] == ["hotfix okno"]

    def test_aka(self) -> None:
        """Test the aka shorthand."""
        terms = extract_pattern_terms("Release readiness aka GREEN")

        assert [t.term_normalized for t in terms] == ["green"]

    def test_one_match_per_pattern_per_line(self) -> None:
        """Test that each line is scanned independently."""
        text = "we call it RG\nnothing here\nsomething aka HW"

        terms = extract_pattern_terms(text)

        assert [t.term_normalized for t in terms] == ["rg", "hw"]

    def test_long_line_context_truncated(self) -> None:
        """Test the stored context is cut to the first 500 characters of the line."""
        line = "status update " * 60 + "and internally we call it RG"

        terms = extract_pattern_terms(line)

        assert terms[0].term_original == "RG"
        assert len(terms[0].context) == MAX_CONTEXT_CHARS
        assert terms[0].context == line[:MAX_CONTEXT_CHARS]

    def test_no_patterns(self) -> None:
        """Test plain text yields nothing."""
        assert extract_pattern_terms("Just a normal sentence.") == []


class TestExtractNgramTerms:
    """Test frequent n-gram extraction."""

    def test_frequent_words_and_bigrams(self) -> None:
        """Test terms seen three times are kept with scaled confidence."""
        text = "deploy train leaves. deploy train again. deploy train today."

        terms = {t.term_normalized: t for t in extract_ngram_terms(text)}

        assert set(terms) == {"deploy", "train", "deploy train"}
        assert terms["deploy"].confidence == 0.2 + 0.05 * 3
        assert terms["deploy train"].context == ""

    def test_rare_and_short_words_dropped(self) -> None:
        """Test words under three characters and rare words are ignored."""
        assert extract_ngram_terms("an an an ok ok ok once") == []

    def test_confidence_capped(self) -> None:
        """Test ngram confidence never exceeds 0.6."""
        terms = extract_ngram_terms(" ".join(["rollout"] * 20))

        assert {t.term_normalized: t.confidence for t in terms}["rollout"] == 0.6


    def test_cutoff_follows_first_seen_order(self) -> None:
        """Test only the first 100 frequent terms are kept, even if a later one is more frequent."""
        words = [f"alpha{chr(97 + i // 26)}{chr(97 + i % 26)}" for i in range(120)]
        text = " ".join(word for i, word in enumerate(words) for _ in range(6 if i == 110 else 3))

        terms = extract_ngram_terms(text)

        assert len(terms) == NGRAM_LIMIT
        assert [t.term_normalized for t in terms] == words[:NGRAM_LIMIT]
        assert words[110] not in {t.term_normalized for t in terms}


class TestDedupeCandidates:
    """Test candidate merging."""

    def test_keeps_max_confidence(self) -> None:
        """Test duplicates 0.2 and 0.8 merge to 0.8."""
        merged = dedupe_candidates(
            [
                TermCandidateInput("green", "green", "", 0.2),
                TermCandidateInput("GREEN", "green", "GREEN means ready", 0.8),
            ]
        )

        assert len(merged) == 1
        assert merged[0].confidence == 0.8
        assert merged[0].context == "GREEN means ready"


class TestTermMiningService:
    """Test TermMiningService.ingest_slang_candidates."""

    def test_inserts_candidates(self, db_session: Session) -> None:
        """Test new candidates are stored pending with provenance."""
        metadata = SlangSourceMetadata(document_id="doc-1", author="jana", team="sales")

        inserted = TermMiningService(db_session).ingest_slang_candidates(
            "Internally we call this Green Light", metadata
        )

        assert inserted == 1
        stored = _candidates(db_session)
        assert len(stored) == 1
        assert stored[0].term_normalized == "green light"
        assert stored[0].status == CandidateStatus.PENDING
        assert stored[0].document_id == "doc-1"
        assert stored[0].team == "sales"
        assert stored[0].contexts == ["Internally we call this Green Light"]

    def test_reingest_bumps_frequency(self, db_session: Session) -> None:
        """Test the same term from the same document is updated, not duplicated."""
        service = TermMiningService(db_session)
        metadata = SlangSourceMetadata(document_id="doc-1")

        assert service.ingest_slang_candidates("we call it RG", metadata) == 1
        assert service.ingest_slang_candidates("Ops: we call it RG", metadata) == 0

        stored = _candidates(db_session)
        assert len(stored) == 1
        assert stored[0].frequency == 2
        assert stored[0].contexts == ["we call it RG", "Ops: we call it RG"]

    def test_update_keeps_highest_confidence(self, db_session: Session) -> None:
        """Test an update never lowers confidence and lifts weak rows to the new value."""
        strong = _stored(db_session, "rg", confidence=0.9)
        weak = _stored(db_session, "green light", confidence=0.1)
        text = "we call it RG\nwe call it Green Light"

        TermMiningService(db_session).ingest_slang_candidates(text, SlangSourceMetadata(document_id="doc-1"))

        assert strong.confidence == 0.9
        assert weak.confidence == PATTERN_CONFIDENCE

    def test_update_confidence_floor(self, db_session: Session) -> None:
        """Test an updated candidate is never below the minimum update confidence."""
        existing = _stored(db_session, "rg", confidence=0.05)
        weak_hit = TermCandidateInput(term_original="RG", term_normalized="rg", context="", confidence=0.1)

        TermMiningService(db_session)._bump(existing, weak_hit)

        assert existing.confidence == MIN_UPDATE_CONFIDENCE

    def test_contexts_capped(self, db_session: Session) -> None:
        """Test a candidate already holding five contexts gets no sixth."""
        contexts = [f"example {i}" for i in range(MAX_CONTEXTS)]
        existing = _stored(db_session, "rg", contexts=contexts)

        TermMiningService(db_session).ingest_slang_candidates(
            "we call it RG", SlangSourceMetadata(document_id="doc-1")
        )

        assert existing.frequency == 2
        assert existing.contexts == contexts

    def test_documents_scope_candidates(self, db_session: Session) -> None:
        """Test the same term in two documents gives two candidates."""
        service = TermMiningService(db_session)

        service.ingest_slang_candidates("we call it RG", SlangSourceMetadata(document_id="doc-1"))
        service.ingest_slang_candidates("we call it RG", SlangSourceMetadata(document_id="doc-2"))
        service.ingest_slang_candidates("we call it RG", SlangSourceMetadata())
        service.ingest_slang_candidates("we call it RG", SlangSourceMetadata())

        stored = _candidates(db_session)
        assert sorted(c.document_id or "" for c in stored) == ["", "doc-1", "doc-2"]

    def test_empty_text(self, db_session: Session) -> None:
        """Test that text without candidates inserts nothing."""
        assert TermMiningService(db_session).ingest_slang_candidates("hello", SlangSourceMetadata()) == 0
