import logging
from typing import Optional

from . import config
from .cache import ProviderCache, get_default_cache
from .common.common import url_exists
from .errors import ContentNotFoundError
from .models import EPISODE, MOVIE

# Episodes are the majority case, so their URL shape is checked first
PROBE_ORDER = ((EPISODE, config.EPISODE_PATH), (MOVIE, config.MOVIE_PATH))


class ContentTypeProbe:
    """
    Decide whether a native id is an episode or a movie on the catalog.

    Example:
        probe = ContentTypeProbe()
        probe.probe("naruto-1x1")   # "episode"
        probe.probe("your-name")    # "movie"
    """

    def __init__(
        self,
        base_url: str = config.ANIMEWORLD_INDIA,
        cache: Optional[ProviderCache] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.cache = cache if cache is not None else get_default_cache()

    def page_url(self, content_id: str, kind: str) -> str:
        path = config.MOVIE_PATH if kind == MOVIE else config.EPISODE_PATH
        return f"{self.base_url}/{path}/{content_id}"

    def probe(self, content_id: str) -> str:
        return self.cache.get_or_compute(
            f"content_type_{content_id}",
            lambda: self._probe_upstream(content_id),
            config.SHORT_TTL,
        )

    def _probe_upstream(self, content_id: str) -> str:
        for kind, path in PROBE_ORDER:
            url = f"{self.base_url}/{path}/{content_id}"
            if url_exists(url):
                logging.debug("Content %s is a %s", content_id, kind)
                return kind
            logging.debug("No %s found at %s", kind, url)

        logging.error("Failed to determine content type for ID: %s", content_id)
        raise ContentNotFoundError(
            f"Content {content_id!r} not found at episode or movie URL"
        )
