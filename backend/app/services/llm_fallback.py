"""LLM fallback classifier for slang terms the alias index missed.

Best effort: any failure is logged and degrades to "no terms", so the
query flow never aborts because of this step.
"""

import json
import logging
import re
from typing import Any

from anthropic import Anthropic
from pydantic import BaseModel, Field, ValidationError

from app.core.config import Settings
from app.services.normalization import dedupe, normalize_term

logger = logging.getLogger(__name__)

MAX_FALLBACK_TERMS = 5

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")

_LOG_EXTRA = {"stage": "classifier", "route": "concept-graph"}


class FallbackTerms(BaseModel):
    """Expected shape of the model's answer."""

    terms: list[str] = Field(default_factory=list)


def build_prompt(query: str) -> str:
    """Zero-shot extraction prompt."""
    return "\n".join(
        [
            f"Extract up to {MAX_FALLBACK_TERMS} short internal slang terms from the query.",
            'Return JSON only in format: {"terms":["..."]}.',
            f"Query: {query}",
        ]
    )


def parse_fallback_terms(text: str | None) -> list[str]:
    """Extract normalized terms from raw model output.

    Takes the first brace-delimited span, validates it against
    FallbackTerms and returns normalized, deduplicated, non-empty terms.
    Invalid output yields an empty list.
    """
    if not text:
        return []
    match = _JSON_OBJECT.search(text)
    if match is None:
        logger.warning("Fallback classifier returned no JSON object", extra=_LOG_EXTRA)
        return []
    try:
        parsed = FallbackTerms.model_validate(json.loads(match.group(0)))
    except (json.JSONDecodeError, ValidationError) as e:
        logger.warning(f"Fallback classifier returned invalid JSON: {e}", extra=_LOG_EXTRA)
        return []

    terms = [normalize_term(term) for term in parsed.terms[:MAX_FALLBACK_TERMS]]
    return dedupe(term for term in terms if term)


class FallbackTermClassifier:
    """Ask an LLM for candidate slang terms in a query.

    A single call, temperature 0, no retries. The HTTP timeout comes from
    configuration.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "claude-3-5-haiku-latest",
        max_tokens: int = 256,
        timeout: float = 10.0,
        client: Any | None = None,
    ) -> None:
        self.model = model
        self.max_tokens = max_tokens
        self._client = client or Anthropic(api_key=api_key, timeout=timeout, max_retries=0)

    @classmethod
    def from_settings(cls, settings: Settings) -> "FallbackTermClassifier | None":
        """Build a classifier, or None when no API key is configured."""
        if not settings.anthropic_api_key:
            return None
        return cls(
            api_key=settings.anthropic_api_key,
            model=settings.fallback_model,
            max_tokens=settings.fallback_max_tokens,
            timeout=settings.fallback_timeout_seconds,
        )

    def classify(self, query: str) -> list[str]:
        """Return normalized fallback terms; never raises."""
        try:
            response = self._client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=0,
                messages=[{"role": "user", "content": build_prompt(query)}],
            )
            text = response.content[0].text if response.content else ""
        except Exception as e:
            logger.warning(f"Fallback classifier call failed: {e}", extra=_LOG_EXTRA)
            return []
        return parse_fallback_terms(text)
