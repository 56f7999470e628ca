"""
Dispatch from a server label (or its embed host) to an extraction strategy.

Strategies are tried in an explicit order and the first one whose patterns
appear in the label wins; when no label matches, the embed URL's hostname is
matched the same way. A terminal passthrough strategy claims everything else,
so an unknown server type never fails a resolution, it just hands back the
embed URL.

A strategy that raises, or returns no sources, is degraded here rather than
propagated: the caller still gets the embed URL and a ``degraded`` status.
"""

import logging
from dataclasses import replace
from typing import Iterable, List, Optional, Sequence
from urllib.parse import urlparse

from ..models import DEGRADED, PASSTHROUGH, ExtractedSource, ExtractionResult


class ExtractionStrategy:
    """Base class: a named family of remote hosts and how to resolve them."""

    name = ""
    patterns: Sequence[str] = ()

    def claims(self, text: str) -> bool:
        text = (text or "").lower()
        return any(pattern in text for pattern in self.patterns)

    def extract(self, embed_url: str) -> ExtractionResult:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class PassthroughStrategy(ExtractionStrategy):
    """No further resolution: the embed URL itself is the source."""

    def __init__(self, name: str = "Generic", patterns: Sequence[str] = ()) -> None:
        self.name = name
        self.patterns = tuple(patterns)

    def extract(self, embed_url: str) -> ExtractionResult:
        return ExtractionResult(
            sources=[ExtractedSource(url=embed_url, quality="auto")],
            status=PASSTHROUGH,
            strategy=self.name,
        )


def degraded_result(embed_url: str, strategy: str, reason: str, quality: str = "unknown") -> ExtractionResult:
    """The fallback handed out when a strategy could not reach a direct link."""
    return ExtractionResult(
        sources=[ExtractedSource(url=embed_url, quality=quality)],
        status=DEGRADED,
        strategy=strategy,
        reason=reason,
    )


class SourceExtractorRegistry:
    """
    Ordered, first-match-wins table of extraction strategies.

    Example:
        registry = SourceExtractorRegistry([FilemoonStrategy()])
        registry.extract("FileMoon", "https://filemoon.sx/e/abc")
    """

    def __init__(
        self,
        strategies: Optional[Iterable[ExtractionStrategy]] = None,
        fallback: Optional[ExtractionStrategy] = None,
    ) -> None:
        self._strategies: List[ExtractionStrategy] = list(strategies or [])
        self.fallback = fallback if fallback is not None else PassthroughStrategy()

    @property
    def strategies(self) -> List[ExtractionStrategy]:
        return list(self._strategies)

    def register(self, strategy: ExtractionStrategy, before: Optional[str] = None) -> None:
        """Append a strategy, or insert it ahead of the strategy named ``before``."""
        if before is None:
            self._strategies.append(strategy)
            return
        for position, existing in enumerate(self._strategies):
            if existing.name == before:
                self._strategies.insert(position, strategy)
                return
        raise ValueError(f"Unknown strategy: {before}")

    def get(self, name: str) -> ExtractionStrategy:
        for strategy in self._strategies + [self.fallback]:
            if strategy.name.lower() == name.lower():
                return strategy
        raise ValueError(f"Unknown strategy: {name}")

    def select(self, server_label: str, embed_url: str = "") -> ExtractionStrategy:
        for strategy in self._strategies:
            if strategy.claims(server_label):
                return strategy

        hostname = urlparse(embed_url).hostname or ""
        if hostname:
            for strategy in self._strategies:
                if strategy.claims(hostname):
                    return strategy

        return self.fallback

    def extract(self, server_label: str, embed_url: str) -> ExtractionResult:
        strategy = self.select(server_label, embed_url)
        if strategy is self.fallback:
            logging.info(
                "No specific extractor found for %s, using %s handler",
                server_label,
                strategy.name,
            )
        else:
            logging.info("Using %s extractor for %s", strategy.name, embed_url)
        return self.run(strategy, embed_url)

    def run(self, strategy: ExtractionStrategy, embed_url: str) -> ExtractionResult:
        """Run one strategy, converting any failure into a degraded result."""
        try:
            result = strategy.extract(embed_url)
        except Exception as err:
            logging.warning("%s extraction error for %s: %s", strategy.name, embed_url, err)
            return degraded_result(embed_url, strategy.name, str(err))

        if not result.sources:
            logging.warning("%s returned no sources for %s", strategy.name, embed_url)
            return degraded_result(embed_url, strategy.name, "no sources", quality="auto")

        if not result.strategy:
            result = replace(result, strategy=strategy.name)
        return result
