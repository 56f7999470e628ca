import logging
from typing import Any, Dict, Optional

import requests

from .. import config
from ..common.common import is_not_found, make_request, read_json
from ..errors import MappingNotFoundError


class TmdbClient:
    """
    Minimal TMDB lookups: the display title behind a tv or movie id.

    The API key is read when a lookup starts, so a missing key fails with
    MissingCredentialError before any request leaves the process.
    """

    def __init__(self, api_key: Optional[str] = None, base_url: str = config.TMDB_API_URL) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")

    def require_key(self) -> str:
        """The configured API key; raises MissingCredentialError when there is none."""
        return self.api_key or config.get_tmdb_api_key()

    def _get(self, path: str, **params: Any) -> Dict[str, Any]:
        params["api_key"] = self.require_key()
        try:
            response = make_request(
                f"{self.base_url}{path}",
                headers={"Accept": "application/json"},
                params=params,
            )
        except requests.RequestException as err:
            if is_not_found(err):
                raise MappingNotFoundError(f"TMDB has no entry at {path}") from err
            raise
        return read_json(response, "TMDB") or {}

    def tv_name(self, tmdb_id) -> str:
        data = self._get(f"/tv/{tmdb_id}")
        name = data.get("name")
        if not name:
            raise MappingNotFoundError(f"TV show {tmdb_id} not found on TMDB")
        return name

    def movie_title(self, tmdb_id) -> str:
        data = self._get(f"/movie/{tmdb_id}")
        title = data.get("title")
        if not title:
            raise MappingNotFoundError(f"Movie {tmdb_id} not found on TMDB")
        return title

    def search_movie(self, title: str) -> int:
        """TMDB id of the first movie result for ``title``."""
        data = self._get("/search/movie", query=title, include_adult="false")
        results = data.get("results") or []
        if not results or not results[0].get("id"):
            raise MappingNotFoundError(f'Could not find "{title}" on TMDB')
        logging.debug("TMDB search for %r matched %s", title, results[0]["id"])
        return results[0]["id"]
