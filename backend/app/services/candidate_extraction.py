"""Candidate term extraction from free-text queries."""

import re

from app.services.normalization import dedupe, normalize_term

# Acronym-like tokens in the raw query, e.g. "GREEN", "KPI-2", "SLA:P1".
UPPERCASE_TOKEN = re.compile(r"\b[A-Z][A-Z0-9_:-]{2,}\b")

MAX_NGRAM = 3


def extract_candidates(query: str) -> list[str]:
    """Build normalized lookup candidates for a query.

    Produces every contiguous 1-, 2- and 3-word window of the normalized
    query plus the normalized form of each all-caps token in the raw
    query. Deduplicated in first-seen order; single-character terms are
    dropped.

    Example:
        >>> extract_candidates("Je to GREEN status?")
        ['je', 'je to', 'je to green', 'to', 'to green', ...]
    """
    words = normalize_term(query).split()
    candidates: list[str] = []

    for start in range(len(words)):
        for size in range(1, MAX_NGRAM + 1):
            if start + size > len(words):
                break
            candidates.append(" ".join(words[start : start + size]))

    for token in UPPERCASE_TOKEN.findall(query or ""):
        candidates.append(normalize_term(token))

    return [term for term in dedupe(candidates) if len(term) > 1]
