import logging
import re
from typing import Optional, Tuple

from .. import config
from ..errors import ContentNotFoundError
from ..extractors.provider.zephyrflick import ZephyrflickStrategy
from ..extractors.registry import SourceExtractorRegistry
from ..models import SourceResolutionResult

_ID_RE = re.compile(r"^(?P<tmdb>\d+)-(?P<season>\d+)x(?P<episode>\d+)$")


def parse_episode_id(content_id: str) -> Tuple[str, int, int]:
    """Split ``{tmdbId}-{season}x{episode}`` into its parts."""
    match = _ID_RE.match(content_id or "")
    if not match:
        raise ContentNotFoundError(
            f"Invalid AnimeDekho id {content_id!r}, expected {{tmdbId}}-{{season}}x{{episode}}"
        )
    return match.group("tmdb"), int(match.group("season")), int(match.group("episode"))


class AnimeDekho:
    """
    animedekho.co keyed by TMDB id. Every episode embeds the same iframe-chained
    player, so there is no server list to choose from.
    """

    def __init__(
        self,
        base_url: str = config.ANIMEDEKHO,
        proxy_url: Optional[str] = None,
        registry: Optional[SourceExtractorRegistry] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.proxy_url = config.PROXY_URL if proxy_url is None else proxy_url
        self.strategy = ZephyrflickStrategy()
        self.registry = registry if registry is not None else SourceExtractorRegistry([self.strategy])

    def embed_url(self, content_id: str) -> str:
        tmdb_id, season, episode = parse_episode_id(content_id)
        url = f"{self.base_url}/embed/{tmdb_id}/{season}-{episode}"
        return f"{self.proxy_url}{url}" if self.proxy_url else url

    def get_source(self, content_id: str, server_name: str = "default") -> SourceResolutionResult:
        url = self.embed_url(content_id)
        logging.info("Resolving AnimeDekho %s via %s", content_id, url)
        extraction = self.registry.run(self.strategy, url)
        return SourceResolutionResult(
            server=1,
            name=server_name,
            url=url,
            sources=extraction.sources,
            status=extraction.status,
            headers=extraction.headers,
            thumbnail=extraction.thumbnail,
        )
