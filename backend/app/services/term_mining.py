"""Slang term mining for the review queue.

Scans ingested text for explicit naming phrases ("we call this X",
"aka Y") and frequent n-grams, then upserts TermCandidate rows keyed by
(term_normalized, document_id). The caller owns the transaction.
"""

import logging
import re
from collections import Counter
from dataclasses import dataclass, replace
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.term_candidate import TermCandidate
from app.schemas.base import CandidateStatus
from app.schemas.review import SlangSourceMetadata
from app.services.normalization import normalize_term

logger = logging.getLogger(__name__)

PATTERN_CONFIDENCE = 0.65
MIN_UPDATE_CONFIDENCE = 0.3
MAX_CONTEXT_CHARS = 500
MAX_CONTEXTS = 5

NGRAM_MIN_COUNT = 3
NGRAM_LIMIT = 100
NGRAM_MIN_WORD_LEN = 3
NGRAM_MAX_WORD_LEN = 30

SLANG_PATTERNS = (
    re.compile(
        r"(?:říkáme tomu|interně tomu říkáme|internally we call (?:this|it)|we call (?:this|it))"
        r"\s+[\"“]?([^\"\n”]{2,80})[\"”]?",
        re.IGNORECASE,
    ),
    re.compile(r"(?:\baka|\ba\.k\.a\.|=)\s+([A-Za-z0-9_\- :]{2,80})", re.IGNORECASE),
)


@dataclass(frozen=True)
class TermCandidateInput:
    """A mined term before it is stored."""

    term_original: str
    term_normalized: str
    context: str
    confidence: float


def extract_pattern_terms(text: str) -> list[TermCandidateInput]:
    """Find explicitly named terms, line by line."""
    candidates: list[TermCandidateInput] = []
    for line in text.replace("\r", "").split("\n"):
        for pattern in SLANG_PATTERNS:
            match = pattern.search(line)
            if match is None:
                continue
            term_original = match.group(1).strip()
            term_normalized = normalize_term(term_original)
            if not term_normalized:
                continue
            candidates.append(
                TermCandidateInput(
                    term_original=term_original,
                    term_normalized=term_normalized,
                    context=line.strip()[:MAX_CONTEXT_CHARS],
                    confidence=PATTERN_CONFIDENCE,
                )
            )
    return candidates


def extract_ngram_terms(text: str) -> list[TermCandidateInput]:
    """Frequent 1- and 2-word terms.

    Keeps terms seen at least three times; the cutoff at 100 follows
    first-seen order, not frequency.
    """
    words = [
        word
        for word in normalize_term(text).split(" ")
        if NGRAM_MIN_WORD_LEN <= len(word) <= NGRAM_MAX_WORD_LEN
    ]

    counts: Counter[str] = Counter()
    for i, word in enumerate(words):
        counts[word] += 1
        if i + 1 < len(words):
            counts[f"{word} {words[i + 1]}"] += 1

    frequent = [
        TermCandidateInput(
            term_original=term,
            term_normalized=term,
            context="",
            confidence=min(0.6, 0.2 + 0.05 * count),
        )
        for term, count in counts.items()
        if count >= NGRAM_MIN_COUNT
    ]
    return frequent[:NGRAM_LIMIT]


def dedupe_candidates(candidates: list[TermCandidateInput]) -> list[TermCandidateInput]:
    """Merge by normalized term: max confidence, first non-empty context."""
    merged: dict[str, TermCandidateInput] = {}
    for candidate in candidates:
        existing = merged.get(candidate.term_normalized)
        if existing is None:
            merged[candidate.term_normalized] = candidate
            continue
        merged[candidate.term_normalized] = replace(
            existing,
            confidence=max(existing.confidence, candidate.confidence),
            context=existing.context or candidate.context,
        )
    return list(merged.values())


class TermMiningService:
    """Upsert mined term candidates.

    Only flushes; committing is left to the job or endpoint.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def ingest_slang_candidates(self, text: str, metadata: SlangSourceMetadata) -> int:
        """Mine text and upsert candidates.

        Returns:
            Number of newly inserted candidates (updates are not counted).
        """
        candidates = dedupe_candidates([*extract_pattern_terms(text), *extract_ngram_terms(text)])
        if not candidates:
            return 0

        inserted = 0
        for candidate in candidates:
            existing = self._find_existing(candidate.term_normalized, metadata.document_id)
            if existing is not None:
                self._bump(existing, candidate)
                continue

            self._session.add(
                TermCandidate(
                    term_original=candidate.term_original,
                    term_normalized=candidate.term_normalized,
                    contexts=[candidate.context] if candidate.context else [],
                    frequency=1,
                    source_type=metadata.source_type,
                    document_id=metadata.document_id or None,
                    author=metadata.author,
                    team=metadata.team,
                    product=metadata.product,
                    region=metadata.region,
                    process=metadata.process,
                    role=metadata.role,
                    confidence=candidate.confidence,
                    status=CandidateStatus.PENDING,
                )
            )
            inserted += 1

        self._session.flush()
        logger.info(
            f"Mined {len(candidates)} term candidates "
            f"(document={metadata.document_id}, inserted={inserted})"
        )
        return inserted

    def _find_existing(self, term_normalized: str, document_id: str | None) -> TermCandidate | None:
        stmt = select(TermCandidate).where(TermCandidate.term_normalized == term_normalized)
        if document_id:
            stmt = stmt.where(TermCandidate.document_id == document_id)
        else:
            stmt = stmt.where(TermCandidate.document_id.is_(None))
        return self._session.execute(stmt.limit(1)).scalar_one_or_none()

    def _bump(self, existing: TermCandidate, candidate: TermCandidateInput) -> None:
        existing.frequency = (existing.frequency or 0) + 1
        existing.confidence = max(existing.confidence or 0.0, candidate.confidence, MIN_UPDATE_CONFIDENCE)
        contexts = list(existing.contexts or [])
        if candidate.context and candidate.context not in contexts and len(contexts) < MAX_CONTEXTS:
            existing.contexts = [*contexts, candidate.context]
        existing.updated_at = datetime.now(UTC)
