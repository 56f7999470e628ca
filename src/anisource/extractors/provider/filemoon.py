import logging
import re
from typing import Dict, Optional
from urllib.parse import urlparse

from bs4 import BeautifulSoup

from ... import config
from ...common.common import absolute_url, make_request
from ...errors import ExtractionDegraded
from ...models import ExtractedSource, ExtractionResult
from .. import unpacker
from ..registry import ExtractionStrategy

# Ordered from the most specific to the loosest match
SOURCE_PATTERNS = [
    r'sources\s*[:=]\s*\[\s*\{\s*file\s*:\s*["\']([^"\']+)["\']',
    r'file\s*:\s*["\'](https?://[^"\']+)["\']',
    r'(https?://[^\s"\'<>]+\.m3u8[^\s"\'<>]*)',
]


def _origin(url: str) -> str:
    parsed = urlparse(url)
    return f"{parsed.scheme}://{parsed.netloc}"


def _filemoon_headers(referer: str) -> Dict[str, str]:
    return {
        "User-Agent": config.get_random_user_agent(),
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Referer": referer,
        "Origin": _origin(referer),
        "Sec-Fetch-Dest": "iframe",
    }


def _extract_iframe_src(html: str, source_url: str) -> str:
    """Locate the player frame on a Filemoon landing page."""
    soup = BeautifulSoup(html, "html.parser")
    iframe = soup.find("iframe", src=True)
    if iframe:
        return absolute_url(iframe["src"], source_url)

    # Some pages create the iframe from a script instead
    match = re.search(r"\.src\s*=\s*['\"]([^'\"]+)['\"]", html)
    if match:
        return absolute_url(match.group(1), source_url)

    match = re.search(r"(https?://[^\s\"'<>]+/e/[^\s\"'<>]+)", html)
    if match:
        return match.group(1)

    raise ExtractionDegraded("No iframe found on the Filemoon page")


def _find_source(text: str) -> Optional[str]:
    for pattern in SOURCE_PATTERNS:
        match = re.search(pattern, text, re.I)
        if match:
            return match.group(1).replace("\\/", "/")
    return None


def _player_script(text: str) -> str:
    if unpacker.detect(text):
        return unpacker.unpack(text)
    return text


def get_sources_from_filemoon(embed_url: str) -> ExtractionResult:
    """
    Resolve a Filemoon embed to its HLS manifest.

    The embed page either carries the packed player script itself or frames a
    player page that does. The script is decoded, never executed.
    """
    if not embed_url:
        raise ValueError("Filemoon URL cannot be empty")

    logging.info("Extracting sources from Filemoon: %s", embed_url)
    page = make_request(embed_url, headers=_filemoon_headers(embed_url)).text

    if unpacker.detect(page):
        script = unpacker.unpack(page)
    else:
        iframe_src = _extract_iframe_src(page, embed_url)
        logging.debug("Filemoon player frame: %s", iframe_src)
        iframe_page = make_request(iframe_src, headers=_filemoon_headers(embed_url)).text
        script = _player_script(iframe_page)

    source = _find_source(script)
    if not source:
        raise ExtractionDegraded("No video source found in the Filemoon player script")

    logging.info("Filemoon source found: %s", source)
    return ExtractionResult(
        sources=[ExtractedSource(url=source, quality="auto", is_hls=".m3u8" in source)],
        strategy=FilemoonStrategy.name,
    )


class FilemoonStrategy(ExtractionStrategy):
    name = "Filemoon"
    patterns = ("filemoon", "moon")

    def extract(self, embed_url: str) -> ExtractionResult:
        return get_sources_from_filemoon(embed_url)
