"""Term normalization shared by ingestion and query time.

Aliases are stored in normalized form and query candidates are looked up
in normalized form, so both sides must go through normalize_term.
"""

import re
import unicodedata
from collections.abc import Iterable
from typing import TypeVar

T = TypeVar("T")

_WHITESPACE = re.compile(r"\s+")


def _is_allowed(char: str) -> bool:
    if char in "_:-" or char.isspace():
        return True
    category = unicodedata.category(char)
    return category[0] in ("L", "N")


def normalize_term(text: str) -> str:
    """Canonicalize text into a comparable token form.

    NFKC-normalizes, lowercases, trims, replaces every character outside
    {letter, number, whitespace, "_", ":", "-"} with a space and collapses
    whitespace runs. Idempotent.
    """
    if not text:
        return ""
    folded = unicodedata.normalize("NFKC", text).lower().strip()
    replaced = "".join(char if _is_allowed(char) else " " for char in folded)
    return _WHITESPACE.sub(" ", replaced).strip()


def dedupe(items: Iterable[T]) -> list[T]:
    """Drop duplicates while keeping first-seen order."""
    return list(dict.fromkeys(items))
