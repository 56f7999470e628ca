"""
Inbound operations, one method per lookup a caller can make.

Every method either returns domain objects or raises a typed ResolverError.
``as_payload`` is the boundary helper that turns both outcomes into the
JSON-ready dictionaries printed by the command line.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

import requests

from . import config
from .cache import ProviderCache, get_default_cache
from .errors import ResolverError
from .mappers import AniListMapper, TmdbClient
from .models import ContentIdentifier, PlayerPage, SearchResult, SourceResolutionResult
from .pipeline import SourceResolutionPipeline
from .player import PlayerPageExtractor
from .probe import ContentTypeProbe
from .resolver import TitleResolver
from .sites import AnimeDekho, AnimeWorldIndia, Satoru

CATALOG_KINDS = ["tmdb", "anilist"]


class SourceService:
    def __init__(
        self,
        cache: Optional[ProviderCache] = None,
        site: Optional[AnimeWorldIndia] = None,
        pipeline: Optional[SourceResolutionPipeline] = None,
        resolver: Optional[TitleResolver] = None,
        tmdb: Optional[TmdbClient] = None,
        anilist: Optional[AniListMapper] = None,
        animedekho: Optional[AnimeDekho] = None,
        satoru: Optional[Satoru] = None,
    ) -> None:
        self.cache = cache if cache is not None else get_default_cache()
        self.site = site if site is not None else AnimeWorldIndia(cache=self.cache)
        self.player = PlayerPageExtractor(base_url=self.site.base_url, cache=self.cache)
        self.pipeline = pipeline if pipeline is not None else SourceResolutionPipeline(
            probe=ContentTypeProbe(base_url=self.site.base_url, cache=self.cache),
            player=self.player,
            cache=self.cache,
        )
        self.resolver = resolver if resolver is not None else TitleResolver()
        self.tmdb = tmdb if tmdb is not None else TmdbClient()
        self.anilist = anilist if anilist is not None else AniListMapper(tmdb=self.tmdb)
        self.animedekho = animedekho if animedekho is not None else AnimeDekho()
        self.satoru = satoru if satoru is not None else Satoru()

    # Native lookups

    def search(self, query: str) -> List[SearchResult]:
        return self.site.search(query)

    def get_series_metadata(self, content_id: str) -> Dict[str, Any]:
        return self.site.get_series(content_id)

    def get_season_metadata(self, content_id: str, season_number: int) -> Dict[str, Any]:
        return self.site.get_season(content_id, season_number)

    def get_player(self, content_id: str) -> PlayerPage:
        return self.player.extract(content_id)

    def resolve_by_native_id(
        self,
        content_id: str,
        server_name: str = config.DEFAULT_SERVER,
        provider: str = config.DEFAULT_PROVIDER,
    ) -> SourceResolutionResult:
        if provider == "animedekho":
            return self.animedekho.get_source(content_id, server_name)

        if provider == "satoru":
            identifier = ContentIdentifier.parse(content_id)
            episode = identifier.episode if identifier.episode is not None else 1
            extraction = self.satoru.get_source(identifier.provider_id, server_name, episode)
            return SourceResolutionResult(
                server=1,
                name=server_name,
                url=f"{self.satoru.base_url}/ajax/episode/list/{identifier.provider_id}",
                sources=extraction.sources,
                success=bool(extraction.sources),
                status=extraction.status,
            )

        if provider != "animeworld-india":
            raise ValueError(f"Unknown provider: {provider}")
        return self.pipeline.resolve_source(content_id, server_name)

    # External catalog lookups

    def _provider_id_for(self, title: str) -> str:
        return self.resolver.resolve(title, self.site.search(title))

    def _resolve_tv(self, tmdb_id, season: int, episode: int, server_name: str) -> Dict[str, Any]:
        show_name = self.tmdb.tv_name(tmdb_id)
        provider_id = self._provider_id_for(show_name)
        identifier = ContentIdentifier.episode_of(provider_id, season, episode)
        result = self.pipeline.resolve_source(identifier.key, server_name)
        payload = {
            "tmdbId": tmdb_id,
            "showName": show_name,
            "season": int(season),
            "episode": int(episode),
            "providerId": provider_id,
        }
        payload.update(result.to_dict())
        return payload

    def _resolve_movie(self, tmdb_id, server_name: str) -> Dict[str, Any]:
        movie_title = self.tmdb.movie_title(tmdb_id)
        provider_id = self._provider_id_for(movie_title)
        result = self.pipeline.resolve_source(provider_id, server_name)
        payload = {"tmdbId": tmdb_id, "movieTitle": movie_title, "providerId": provider_id}
        payload.update(result.to_dict())
        return payload

    def resolve_by_external_id(
        self,
        catalog_kind: str,
        external_id,
        season: Optional[int] = None,
        episode: Optional[int] = None,
        server_name: str = config.DEFAULT_SERVER,
    ) -> Dict[str, Any]:
        """
        Map a TMDB or AniList id to the provider and resolve its sources.

        TMDB ids are treated as tv shows when season and episode are given and
        as movies otherwise. AniList ids need only an episode; without one the
        entry must be a movie.
        """
        catalog_kind = (catalog_kind or "").lower()
        logging.info("Resolving %s id %s (season=%s, episode=%s)", catalog_kind, external_id, season, episode)
        if catalog_kind not in CATALOG_KINDS:
            raise ValueError(f"Unknown catalog kind: {catalog_kind} (choose from {', '.join(CATALOG_KINDS)})")

        # Both catalogs end in a TMDB lookup
        self.tmdb.require_key()

        if catalog_kind == "tmdb":
            if (season is None) != (episode is None):
                raise ValueError("Season and episode must be given together for tv shows")
            if episode is not None:
                return self._resolve_tv(external_id, season, episode, server_name)
            return self._resolve_movie(external_id, server_name)

        payload = {"source": "anilist", "anilistId": external_id}
        if episode is not None:
            tmdb_id, mapped_season = self.anilist.episode_mapping(external_id)
            payload.update(self._resolve_tv(tmdb_id, mapped_season, episode, server_name))
            return payload
        tmdb_id = self.anilist.movie_tmdb_id(external_id)
        payload.update(self._resolve_movie(tmdb_id, server_name))
        return payload


def _to_json(value: Any) -> Any:
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, list):
        return [_to_json(item) for item in value]
    return value


def as_payload(operation: Callable[..., Any], *args: Any, **kwargs: Any) -> Dict[str, Any]:
    """
    Run an operation and render its outcome as a response dictionary.

    Typed failures become ``{"success": False, "error": kind, "message": ...}``;
    transport failures that were never classified report ``UpstreamError``.
    """
    try:
        result = operation(*args, **kwargs)
    except ResolverError as err:
        logging.error("%s: %s", err.kind, err)
        return {"success": False, "error": err.kind, "message": str(err)}
    except requests.RequestException as err:
        logging.error("Upstream request failed: %s", err)
        return {"success": False, "error": "UpstreamError", "message": str(err)}

    data = _to_json(result)
    if isinstance(data, dict):
        data.setdefault("success", True)
        return data
    return {"success": True, "results": data}
