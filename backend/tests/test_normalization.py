"""Tests for term normalization."""

import pytest

from app.services.normalization import dedupe, normalize_term


class TestNormalizeTerm:
    """Test normalize_term canonicalization."""

    def test_lowercases_and_trims(self) -> None:
        """Test that text is lowercased and trimmed."""
        assert normalize_term("  GREEN Status  ") == "green status"

    def test_replaces_punctuation_with_space(self) -> None:
        """Test that punctuation becomes whitespace and is collapsed."""
        assert normalize_term("release-gate, (v2)!") == "release-gate v2"

    def test_keeps_underscore_colon_and_hyphen(self) -> None:
        """Test that _ : - survive normalization."""
        assert normalize_term("SLA:P1_hot-fix") == "sla:p1_hot-fix"

    def test_keeps_non_ascii_letters(self) -> None:
        """Test that Czech diacritics are kept."""
        assert normalize_term("Říkáme tomu ZELENÁ") == "říkáme tomu zelená"

    def test_applies_compatibility_composition(self) -> None:
        """Test that NFKC folds compatibility characters."""
        assert normalize_term("ＧＲＥＥＮ") == "green"
        assert normalize_term("ﬁx") == "fix"

    def test_collapses_whitespace(self) -> None:
        """Test that tabs and newlines collapse to single spaces."""
        assert normalize_term("green\t\n  status") == "green status"

    def test_empty_input(self) -> None:
        """Test that empty input yields empty string."""
        assert normalize_term("") == ""
        assert normalize_term("?!...") == ""

    @pytest.mark.parametrize(
        "text",
        [
            "Je to GREEN status pro release gate?",
            "  trailing punctuation!!  ",
            "a.k.a. \"Zelená\" -- done",
            "ＡＢＣ：１２３",
            "mixed\u00a0nbsp and\u2003em space",
        ],
    )
    def test_idempotent(self, text: str) -> None:
        """Test that normalizing twice equals normalizing once."""
        once = normalize_term(text)
        assert normalize_term(once) == once


class TestDedupe:
    """Test order-preserving dedupe."""

    def test_keeps_first_seen_order(self) -> None:
        """Test that duplicates are dropped and order kept."""
        assert dedupe(["b", "a", "b", "c", "a"]) == ["b", "a", "c"]

    def test_accepts_generators(self) -> None:
        """Test that any iterable is accepted."""
        assert dedupe(x % 2 for x in range(5)) == [0, 1]
