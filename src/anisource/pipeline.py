"""
End-to-end resolution of a native id and server name to playable sources.

    resolve_source("naruto-1x1", "FileMoon")
      -> cache lookup (source_naruto-1x1_FileMoon)
      -> ContentTypeProbe          episode or movie
      -> PlayerPageExtractor       server list
      -> server selection          label, then 1-based index
      -> SourceExtractorRegistry   direct links, passthrough or degraded
      -> cache store (long TTL)

Identifier failures (content not found, server not found, markup changes)
propagate and nothing is cached for them. Extraction failures never do: the
registry turns them into a degraded result that still carries the embed URL.
"""

import logging
from typing import List, Optional

from . import config
from .cache import ProviderCache, get_default_cache
from .errors import ServerNotFoundError
from .extractors import SourceExtractorRegistry, build_default_registry
from .models import ExtractedSource, ServerOption, SourceResolutionResult
from .player import PlayerPageExtractor
from .probe import ContentTypeProbe


def select_server(sources: List[ServerOption], server_name: str) -> ServerOption:
    """Pick a server by case-insensitive label, falling back to its 1-based index."""
    wanted = (server_name or "").strip().lower()
    for source in sources:
        if source.label and source.label.lower() == wanted:
            return source

    try:
        number = int(wanted)
    except ValueError:
        number = None
    if number is not None:
        for source in sources:
            if source.index == number:
                return source

    available = ", ".join(source.label for source in sources)
    raise ServerNotFoundError(
        f'Server "{server_name}" not found for this content (available: {available})'
    )


class SourceResolutionPipeline:
    def __init__(
        self,
        probe: Optional[ContentTypeProbe] = None,
        player: Optional[PlayerPageExtractor] = None,
        registry: Optional[SourceExtractorRegistry] = None,
        cache: Optional[ProviderCache] = None,
    ) -> None:
        self.cache = cache if cache is not None else get_default_cache()
        self.probe = probe if probe is not None else ContentTypeProbe(cache=self.cache)
        self.player = player if player is not None else PlayerPageExtractor(cache=self.cache)
        self.registry = registry if registry is not None else build_default_registry()

    def resolve_source(
        self, content_id: str, server_name: str = config.DEFAULT_SERVER
    ) -> SourceResolutionResult:
        return self.cache.get_or_compute(
            f"source_{content_id}_{server_name}",
            lambda: self._resolve_upstream(content_id, server_name),
            config.LONG_TTL,
        )

    def _resolve_upstream(self, content_id: str, server_name: str) -> SourceResolutionResult:
        kind = self.probe.probe(content_id)
        page = self.player.extract(content_id, kind)
        if not page.sources:
            raise ServerNotFoundError(f"No sources found for {content_id}")

        server = select_server(page.sources, server_name)
        display_name = server.label or f"Server {server.index}"
        logging.info("Resolving %s on %s (%s)", content_id, display_name, server.embed_url)

        extraction = self.registry.extract(display_name, server.embed_url)
        sources = list(extraction.sources) or [
            ExtractedSource(url=server.embed_url, quality="auto")
        ]

        return SourceResolutionResult(
            server=server.index,
            name=display_name,
            url=server.embed_url,
            sources=sources,
            success=True,
            status=extraction.status,
            headers=extraction.headers,
            thumbnail=extraction.thumbnail,
        )
