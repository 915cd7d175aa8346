"""Tests for query candidate extraction."""

from app.services.candidate_extraction import extract_candidates


class TestExtractCandidates:
    """Test n-gram and uppercase candidate generation."""

    def test_release_gate_query_coverage(self) -> None:
        """Test the canonical query yields the expected candidates."""
        candidates = extract_candidates("Je to GREEN status pro release gate?")

        assert "green" in candidates
        assert "green status" in candidates
        assert "release gate" in candidates

    def test_includes_three_word_windows(self) -> None:
        """Test that 3-word windows are generated."""
        candidates = extract_candidates("pro release gate")
        assert "pro release gate" in candidates

    def test_no_four_word_windows(self) -> None:
        """Test that windows stop at three words."""
        candidates = extract_candidates("one two three four")
        assert "one two three four" not in candidates
        assert "two three four" in candidates

    def test_adds_uppercase_tokens(self) -> None:
        """Test that acronym-like tokens are added in normalized form."""
        candidates = extract_candidates("Check KPI-2 and SLA:P1 now")
        assert "kpi-2" in candidates
        assert "sla:p1" in candidates

    def test_deduplicates(self) -> None:
        """Test that repeated terms appear once."""
        candidates = extract_candidates("GREEN green GREEN")
        assert candidates.count("green") == 1

    def test_drops_single_characters(self) -> None:
        """Test that one-character candidates are dropped."""
        candidates = extract_candidates("a b GREEN")
        assert "a" not in candidates
        assert "b" not in candidates
        assert "a b" in candidates

    def test_all_candidates_are_normalized(self) -> None:
        """Test that every candidate is lowercase without punctuation."""
        for candidate in extract_candidates("Is it GREEN? (Release-Gate!)"):
            assert candidate == candidate.lower()
            assert "?" not in candidate
            assert "(" not in candidate

    def test_empty_query(self) -> None:
        """Test that an empty query yields no candidates."""
        assert extract_candidates("") == []
        assert extract_candidates("   ") == []
