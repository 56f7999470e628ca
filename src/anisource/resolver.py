"""
Title matching between an external catalog title and a provider's search hits.

Provider catalogs use inconsistent, sometimes abbreviated titles, so the best
fuzzy score is only trusted above a minimum confidence. Below it the provider
id slug is checked, since catalog ids often encode the canonical name even
when the displayed title diverges.
"""

import logging
from typing import Optional, Sequence

from . import config
from .errors import NoCandidatesError
from .models import SearchResult
from .similarity import similarity, slugify


class TitleResolver:
    """Pick the provider-native id whose indexed title best matches a query."""

    def __init__(self, threshold: Optional[float] = None) -> None:
        self.threshold = config.TITLE_MATCH_THRESHOLD if threshold is None else threshold

    def resolve(self, query: str, candidates: Sequence[SearchResult]) -> str:
        if not candidates:
            raise NoCandidatesError(f'No search results to match "{query}" against')

        best = candidates[0]
        best_score = -1.0
        for candidate in candidates:
            score = similarity(query, candidate.title)
            if score > best_score:
                best, best_score = candidate, score

        if best_score >= self.threshold:
            logging.debug("Matched %r to %s (%.2f)", query, best.id, best_score)
            return best.id

        slug = slugify(query)
        for candidate in candidates:
            if candidate.id == slug:
                logging.debug("Matched %r to %s by exact slug", query, candidate.id)
                return candidate.id

        if slug:
            for candidate in candidates:
                if slug in candidate.id:
                    logging.debug("Matched %r to %s by slug substring", query, candidate.id)
                    return candidate.id

        logging.warning(
            "Low confidence match for %r: %s (%.2f < %.2f)",
            query,
            best.id,
            best_score,
            self.threshold,
        )
        return best.id


def resolve_title(query: str, candidates: Sequence[SearchResult]) -> str:
    """Resolve with the configured default threshold."""
    return TitleResolver().resolve(query, candidates)
