"""
Iframe-chained player API used by the "My Server" / deadtoons option.

The embed page frames a player on play.zephyrflick.top whose path carries a
video token. Posting that token back to the player's own endpoint, with the
frame as Referer, returns the stream URLs as JSON.
"""

import logging
from typing import Dict, List, Optional

from bs4 import BeautifulSoup

from ... import config
from ...common.common import absolute_url, make_request
from ...errors import ExtractionDegraded
from ...models import ExtractedSource, ExtractionResult
from ..registry import ExtractionStrategy

PLAYER_HOST = "play.zephyrflick.top"
VIDEO_PATH = "/video/"


def _page_headers() -> Dict[str, str]:
    return {
        "User-Agent": config.MOBILE_USER_AGENT,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.9",
    }


def _api_headers(iframe_url: str) -> Dict[str, str]:
    return {
        "User-Agent": config.MOBILE_USER_AGENT,
        "Accept": "*/*",
        "Content-Type": "application/x-www-form-urlencoded; charset=UTF-8",
        "Origin": config.ZEPHYRFLICK,
        "Referer": iframe_url,
        "X-Requested-With": "XMLHttpRequest",
    }


def video_token(iframe_url: str) -> str:
    """The path segment following ``/video/`` in a player frame URL."""
    token = iframe_url.split(VIDEO_PATH, 1)[1]
    return token.split("?", 1)[0].split("#", 1)[0].strip("/")


def _player_iframe(html: str, embed_url: str) -> str:
    soup = BeautifulSoup(html, "html.parser")
    iframe = soup.find("iframe")
    src: Optional[str] = None
    if iframe:
        src = iframe.get("src") or iframe.get("data-src")
    if not src or f"{PLAYER_HOST}{VIDEO_PATH}" not in src:
        raise ExtractionDegraded("Player iframe source not found or invalid")
    return absolute_url(src, embed_url)


def get_sources_from_zephyrflick(embed_url: str) -> ExtractionResult:
    if not embed_url:
        raise ValueError("Embed URL cannot be empty")

    logging.info("Extracting sources from player API behind: %s", embed_url)
    html = make_request(embed_url, headers=_page_headers()).text
    iframe_url = _player_iframe(html, embed_url)

    token = video_token(iframe_url)
    if not token:
        raise ExtractionDegraded(f"No video token in {iframe_url}")

    api_url = f"{config.ZEPHYRFLICK}/player/index.php?data={token}&do=getVideo"
    response = make_request(api_url, headers=_api_headers(iframe_url), method="POST")
    try:
        data = response.json()
    except ValueError as err:
        raise ExtractionDegraded(f"Player API returned invalid JSON: {err}") from err

    if not isinstance(data, dict) or not data.get("videoSource"):
        raise ExtractionDegraded("No video source in player API response")

    sources: List[ExtractedSource] = []
    if data.get("securedLink"):
        sources.append(ExtractedSource(url=data["securedLink"], quality="secured", is_hls=True))
    sources.append(ExtractedSource(url=data["videoSource"], quality="default", is_hls=True))

    return ExtractionResult(
        sources=sources,
        strategy=ZephyrflickStrategy.name,
        headers={"Referer": f"{config.ZEPHYRFLICK}/"},
        thumbnail=data.get("videoImage") or None,
    )


class ZephyrflickStrategy(ExtractionStrategy):
    name = "VidxDub"
    patterns = ("deadtoons", "my server")

    def extract(self, embed_url: str) -> ExtractionResult:
        return get_sources_from_zephyrflick(embed_url)
