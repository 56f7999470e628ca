import logging
import re
from typing import Optional

from ... import config
from ...common.common import make_request
from ...errors import ExtractionDegraded
from ...models import ExtractedSource, ExtractionResult
from .. import unpacker
from ..registry import ExtractionStrategy

# Hosts that serve the StreamWish player under another name
STREAMWISH_HOSTS = ("streamwish", "cybervynx", "earnvids", "smoothpre", "wish")

_FILE_RE = re.compile(r'file\s*:\s*["\']([^"\']+\.m3u8[^"\']*)["\']', re.I)
_HLS_RE = re.compile(r'["\']hls\d*["\']\s*:\s*["\']([^"\']+\.m3u8[^"\']*)["\']', re.I)


def _find_manifest(text: str) -> Optional[str]:
    match = _FILE_RE.search(text) or _HLS_RE.search(text)
    if not match:
        return None
    return match.group(1).replace("\\/", "/")


def get_sources_from_streamwish(embed_url: str) -> ExtractionResult:
    """Decode the packed player script of a StreamWish-family embed."""
    if not embed_url:
        raise ValueError("StreamWish URL cannot be empty")

    logging.info("Extracting sources from StreamWish: %s", embed_url)
    page = make_request(embed_url, headers=config.get_default_headers(embed_url)).text

    manifest = None
    if unpacker.detect(page):
        manifest = _find_manifest(unpacker.unpack(page))
    if not manifest:
        # Older pages still inline the player config
        manifest = _find_manifest(page)
    if not manifest:
        raise ExtractionDegraded("No HLS manifest found in the StreamWish player")

    return ExtractionResult(
        sources=[ExtractedSource(url=manifest, quality="auto", is_hls=True)],
        strategy=StreamWishStrategy.name,
    )


class StreamWishStrategy(ExtractionStrategy):
    name = "StreamWish"
    patterns = STREAMWISH_HOSTS

    def extract(self, embed_url: str) -> ExtractionResult:
        return get_sources_from_streamwish(embed_url)
