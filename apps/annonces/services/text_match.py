"""
Text normalization and fuzzy matching for annonce search.

A query matches a field when the normalized field contains the normalized
query, or, failing that, when both are long enough and within a small
Levenshtein distance of each other.
"""

import re
import logging
import unicodedata
from typing import Iterable, Optional

from rapidfuzz.distance import Levenshtein

from apps.core.config import settings

logger = logging.getLogger(__name__)

_SEPARATORS_RE = re.compile(r"[-_]+")
_PUNCTUATION_RE = re.compile(r"[^\w\s]+")
_WHITESPACE_RE = re.compile(r"\s+")


def normalize(text: Optional[str]) -> str:
    """Lower-case, strip accents and punctuation, collapse whitespace.

    ``None`` and empty strings normalize to ``""``. Idempotent.
    """
    if not text:
        return ""
    # Case-fold after decomposition: NFKD maps forms like "ℌ" to upper-case ASCII
    value = unicodedata.normalize("NFKD", str(text)).casefold()
    value = unicodedata.normalize("NFKD", value)
    value = "".join(ch for ch in value if not unicodedata.combining(ch))
    value = _SEPARATORS_RE.sub(" ", value)
    value = _PUNCTUATION_RE.sub("", value)
    return _WHITESPACE_RE.sub(" ", value).strip()


def levenshtein(a: str, b: str, score_cutoff: Optional[int] = None) -> int:
    """Edit distance with unit costs; above ``score_cutoff`` returns ``score_cutoff + 1``."""
    return Levenshtein.distance(a, b, score_cutoff=score_cutoff)


def matches(
    field_value: Optional[str],
    normalized_query: str,
    *,
    max_distance: Optional[int] = None,
    min_length: Optional[int] = None,
) -> bool:
    """Return True if ``field_value`` matches an already normalized query."""
    max_distance = settings.search_fuzzy_max_distance if max_distance is None else max_distance
    min_length = settings.search_fuzzy_min_length if min_length is None else min_length

    value = normalize(field_value)
    if not value or not normalized_query:
        return False

    if normalized_query in value:
        return True

    if len(value) < min_length or len(normalized_query) < min_length:
        return False
    # Distance is at least the length gap
    if abs(len(value) - len(normalized_query)) > max_distance:
        return False
    return levenshtein(value, normalized_query, score_cutoff=max_distance) <= max_distance


def any_field_matches(fields: Iterable[Optional[str]], normalized_query: str) -> bool:
    return any(matches(value, normalized_query) for value in fields)
