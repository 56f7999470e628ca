import base64
import binascii
import logging
import re
from typing import Optional

from ... import config
from ...common.common import make_request
from ...errors import ExtractionDegraded
from ...models import ExtractedSource, ExtractionResult
from ..registry import ExtractionStrategy

HLS_PATTERNS = [
    r"'hls'\s*:\s*'([^']+)'",
    r'"hls"\s*:\s*"([^"]+)"',
    r'<source[^>]+src="(https?://[^"]+\.m3u8[^"]*)"',
]

# VOE landing pages bounce to a mirror domain before the player
REDIRECT_RE = re.compile(r"window\.location\.href\s*=\s*['\"](https?://[^'\"]+)['\"]")


def _decode_manifest(value: str) -> Optional[str]:
    """Manifest URLs are either plain or base64-encoded."""
    value = value.replace("\\/", "/")
    if value.startswith("http"):
        return value
    try:
        decoded = base64.b64decode(value).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return None
    return decoded if decoded.startswith("http") else None


def _extract_manifest_from_html(html: str) -> Optional[str]:
    if re.search(r"video not found|video was deleted|file was deleted", html, re.I):
        raise ExtractionDegraded("VOE video not found or removed")

    for pattern in HLS_PATTERNS:
        for match in re.finditer(pattern, html, re.I):
            manifest = _decode_manifest(match.group(1))
            if manifest:
                return manifest
    return None


def get_sources_from_voe(embed_url: str) -> ExtractionResult:
    if not embed_url:
        raise ValueError("VOE URL cannot be empty")

    logging.info("Extracting sources from VOE: %s", embed_url)
    html = make_request(embed_url, headers=config.get_default_headers(embed_url)).text

    manifest = _extract_manifest_from_html(html)
    if not manifest:
        redirect = REDIRECT_RE.search(html)
        if redirect:
            logging.debug("Following VOE redirect to %s", redirect.group(1))
            html = make_request(
                redirect.group(1), headers=config.get_default_headers(embed_url)
            ).text
            manifest = _extract_manifest_from_html(html)

    if not manifest:
        raise ExtractionDegraded("No HLS manifest found on the VOE page")

    return ExtractionResult(
        sources=[ExtractedSource(url=manifest, quality="auto", is_hls=True)],
        strategy=VoeStrategy.name,
    )


class VoeStrategy(ExtractionStrategy):
    name = "VOE"
    patterns = ("voe",)

    def extract(self, embed_url: str) -> ExtractionResult:
        return get_sources_from_voe(embed_url)
