import re

from rapidfuzz.distance import Levenshtein


def similarity(a: str, b: str) -> float:
    """
    Normalized, case-insensitive edit-distance similarity in [0, 1].

    ``1 - levenshtein(a, b) / max(len(a), len(b))``; two empty strings are
    identical and score 1.0.
    """
    a = (a or "").lower()
    b = (b or "").lower()
    if not a and not b:
        return 1.0
    distance = Levenshtein.distance(a, b)
    return 1.0 - distance / max(len(a), len(b))


def slugify(text: str) -> str:
    """Lowercase and join whitespace-separated words with hyphens."""
    return re.sub(r"\s+", "-", (text or "").strip().lower())
