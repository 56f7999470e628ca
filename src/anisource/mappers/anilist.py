"""
AniList id mapping.

Episodes go through ani.zip, which maps an AniList id to its TMDB tv id and
the TMDB season its first episode belongs to. Movies are looked up on AniList
itself and then searched on TMDB by title.
"""

import logging
from typing import Any, Dict, Optional, Tuple

from .. import config
from ..common.common import make_request, read_json
from ..errors import MappingNotFoundError
from .tmdb import TmdbClient

MEDIA_QUERY = """
query ($id: Int) {
  Media(id: $id, type: ANIME) {
    title {
      romaji
      english
      native
    }
    format
    isAdult
  }
}
"""


class AniListMapper:
    def __init__(
        self,
        tmdb: Optional[TmdbClient] = None,
        graphql_url: str = config.ANILIST_GRAPHQL_URL,
        mappings_url: str = config.ANI_ZIP_MAPPINGS_URL,
    ) -> None:
        self.tmdb = tmdb if tmdb is not None else TmdbClient()
        self.graphql_url = graphql_url
        self.mappings_url = mappings_url

    def episode_mapping(self, anilist_id) -> Tuple[int, int]:
        """Return ``(tmdb_id, season_number)`` for an AniList series."""
        response = make_request(
            self.mappings_url,
            headers={"Accept": "application/json"},
            params={"anilist_id": anilist_id},
        )
        data = read_json(response, "ani.zip") or {}
        mappings = data.get("mappings") or {}
        if not mappings:
            raise MappingNotFoundError(f"No mapping found for AniList id {anilist_id}")

        tmdb_id = mappings.get("themoviedb_id")
        if not tmdb_id:
            raise MappingNotFoundError(f"TMDB id not found for AniList id {anilist_id}")

        episodes = data.get("episodes") or {}
        first_episode = next(iter(episodes.values()), None) if episodes else None
        season = (first_episode or {}).get("seasonNumber") or 1
        logging.debug("AniList %s maps to TMDB %s season %s", anilist_id, tmdb_id, season)
        return tmdb_id, int(season)

    def media(self, anilist_id) -> Dict[str, Any]:
        response = make_request(
            self.graphql_url,
            method="POST",
            headers={"Accept": "application/json", "Content-Type": "application/json"},
            json={"query": MEDIA_QUERY, "variables": {"id": int(anilist_id)}},
        )
        media = ((read_json(response, "AniList") or {}).get("data") or {}).get("Media")
        if not media:
            raise MappingNotFoundError(f"Anime {anilist_id} not found on AniList")
        return media

    def movie_tmdb_id(self, anilist_id) -> int:
        media = self.media(anilist_id)
        if media.get("format") != "MOVIE":
            raise MappingNotFoundError(
                f"AniList id {anilist_id} is not a movie, an episode number is required"
            )
        titles = media.get("title") or {}
        title = titles.get("english") or titles.get("romaji") or titles.get("native")
        if not title:
            raise MappingNotFoundError(f"AniList id {anilist_id} has no title")
        return self.tmdb.search_movie(title)
