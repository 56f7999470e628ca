"""
Watch page parsing for animeworld-india.

A watch page carries a video player with one pane per server and, normally, a
server selector list pointing at those panes. The selector list is the
preferred source of server labels; when it is missing the panes themselves are
scanned in document order and named positionally, so a markup change in the
selector does not take the whole page down.
"""

import logging
import re
from dataclasses import replace
from typing import List, Optional

import requests
from bs4 import BeautifulSoup

from . import config
from .cache import ProviderCache, get_default_cache
from .common.common import absolute_url, make_request
from .errors import ContentNotFoundError, UpstreamFormatChanged
from .models import MOVIE, PlayerPage, ServerOption

_PANE_HREF_RE = re.compile(r"#options-(\d+)$")
_SERVER_PREFIX_RE = re.compile(r"^server\s*\d+\s*[:\-]?\s*", re.I)
_BARE_NUMBER_RE = re.compile(r"^(server\s*)?\d+$", re.I)


def _iframe_src(iframe) -> Optional[str]:
    if iframe is None:
        return None
    # Lazy-loaded panes keep the real URL in data-src
    return iframe.get("src") or iframe.get("data-src") or None


def _is_active(*elements) -> bool:
    return any("on" in (element.get("class") or []) for element in elements if element)


def _server_label(text: str, index: int) -> str:
    """Strip the ``SERVER N`` prefix from a selector entry's text."""
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    for line in lines:
        if _BARE_NUMBER_RE.match(line):
            continue
        label = _SERVER_PREFIX_RE.sub("", line).strip()
        if label:
            return label
    return f"Server {index}"


def _single_active(options: List[ServerOption]) -> List[ServerOption]:
    seen_active = False
    normalized = []
    for option in options:
        if option.active and seen_active:
            option = replace(option, active=False)
        seen_active = seen_active or option.active
        normalized.append(option)
    return normalized


def parse_server_list(soup: BeautifulSoup, page_url: str = "") -> List[ServerOption]:
    """Structured tier: the ``.aa-tbs-video`` selector and its ``#options-N`` panes."""
    options = []
    for position, item in enumerate(soup.select(".aa-tbs-video li")):
        index = position + 1
        pane = position
        anchor = item.find("a", href=True)
        if anchor:
            match = _PANE_HREF_RE.search(anchor["href"])
            if match:
                pane = int(match.group(1))

        src = _iframe_src(soup.select_one(f"#options-{pane} iframe"))
        if not src:
            logging.debug("Server entry %d has no embed frame", index)
            continue

        options.append(
            ServerOption(
                index=index,
                label=_server_label(item.get_text("\n"), index),
                embed_url=absolute_url(src, page_url),
                active=_is_active(item, anchor),
            )
        )
    return _single_active(options)


def parse_video_containers(soup: BeautifulSoup, page_url: str = "") -> List[ServerOption]:
    """Positional tier: every player pane in document order, named ``Server N``."""
    options = []
    for position, container in enumerate(soup.select(".video-player .video")):
        index = position + 1
        src = _iframe_src(container.find("iframe"))
        if not src:
            continue
        options.append(
            ServerOption(
                index=index,
                label=f"Server {index}",
                embed_url=absolute_url(src, page_url),
                active=_is_active(container),
            )
        )
    return _single_active(options)


def parse_player_page(html: str, page_url: str = "") -> PlayerPage:
    soup = BeautifulSoup(html, "html.parser")

    if not soup.select(".video-player .video iframe"):
        raise UpstreamFormatChanged(f"No video player iframe found on {page_url or 'page'}")

    sources = parse_server_list(soup, page_url)
    if not sources:
        logging.info("No server selector on %s, scanning player panes", page_url)
        sources = parse_video_containers(soup, page_url)
    if not sources:
        raise UpstreamFormatChanged(f"No iframe source found on {page_url or 'page'}")

    main_src = _iframe_src(soup.select_one(".video-player .video.on iframe"))
    if main_src:
        iframe = absolute_url(main_src, page_url)
    else:
        active = next((source for source in sources if source.active), sources[0])
        iframe = active.embed_url

    return PlayerPage(iframe=iframe, sources=sources)


class PlayerPageExtractor:
    """
    Fetch a watch page by native id and return its normalized server list.

    The episode URL shape is tried first, then the movie shape (or the other
    way round when the content kind is already known). Results are cached for
    ``config.LONG_TTL`` under ``player_{id}``.
    """

    def __init__(
        self,
        base_url: str = config.ANIMEWORLD_INDIA,
        cache: Optional[ProviderCache] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.cache = cache if cache is not None else get_default_cache()

    def extract(self, content_id: str, kind: Optional[str] = None) -> PlayerPage:
        return self.cache.get_or_compute(
            f"player_{content_id}",
            lambda: self._extract_upstream(content_id, kind),
            config.LONG_TTL,
        )

    def _candidate_urls(self, content_id: str, kind: Optional[str]) -> List[str]:
        episode_url = f"{self.base_url}/{config.EPISODE_PATH}/{content_id}"
        movie_url = f"{self.base_url}/{config.MOVIE_PATH}/{content_id}"
        if kind == MOVIE:
            return [movie_url, episode_url]
        return [episode_url, movie_url]

    def _extract_upstream(self, content_id: str, kind: Optional[str]) -> PlayerPage:
        format_error: Optional[UpstreamFormatChanged] = None

        for url in self._candidate_urls(content_id, kind):
            try:
                response = make_request(url)
            except requests.RequestException as err:
                logging.info("Player page %s unavailable: %s", url, err)
                continue

            try:
                return parse_player_page(response.text, url)
            except UpstreamFormatChanged as err:
                logging.warning("Unexpected player markup at %s: %s", url, err)
                format_error = err

        if format_error is not None:
            raise format_error

        logging.error("Both episode and movie URLs failed for ID: %s", content_id)
        raise ContentNotFoundError(
            f"Content {content_id!r} not found at episode or movie URL"
        )


__all__ = [
    "PlayerPageExtractor",
    "parse_player_page",
    "parse_server_list",
    "parse_video_containers",
]
