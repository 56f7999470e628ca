"""
satoru.one site module.

satoru exposes its episode and server lists as HTML fragments wrapped in JSON
(``{"html": "..."}``). Each server then yields a source payload; only links
hosted on the trusted CDN are kept, and iframe links are followed to the HLS
manifest their player declares.
"""

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional, Tuple
from urllib.parse import quote

import requests
from bs4 import BeautifulSoup

from .. import config
from ..common.common import make_request, read_json
from ..errors import ContentNotFoundError
from ..models import ExtractedSource, ExtractionResult, SearchResult

_MASTER_URL_RE = re.compile(r"const\s+mastreUrl\s*=\s*['\"]([^'\"]+\.m3u8)['\"]")


def _satoru_headers() -> Dict[str, str]:
    headers = config.get_default_headers(config.SATORU + "/")
    headers["Accept-Language"] = "en-US,en;q=0.5"
    return headers


def parse_search_results(html: str, base_url: str = config.SATORU) -> List[SearchResult]:
    soup = BeautifulSoup(html, "html.parser")
    results = []
    for item in soup.select("div.flw-item"):
        poster_link = item.select_one("a.film-poster-ahref")
        title_link = item.select_one("h3.film-name a")
        content_id = poster_link.get("data-id") if poster_link else None
        title = title_link.get("title") if title_link else None
        if not (content_id and title):
            continue
        href = title_link.get("href", "")
        results.append(SearchResult(id=content_id, title=title, url=base_url + href if href.startswith("/") else href))
    return results


def extract_master_url(html: str) -> Optional[str]:
    match = _MASTER_URL_RE.search(html)
    return match.group(1) if match else None


class Satoru:
    def __init__(self, base_url: str = config.SATORU, max_workers: int = config.DEFAULT_MAX_WORKERS) -> None:
        self.base_url = base_url.rstrip("/")
        self.max_workers = max_workers

    def search(self, title: str) -> List[SearchResult]:
        response = make_request(
            f"{self.base_url}/filter?keyword={quote(title)}", headers=_satoru_headers()
        )
        return parse_search_results(response.text, self.base_url)

    def _fragment(self, url: str) -> BeautifulSoup:
        data = read_json(make_request(url, headers=_satoru_headers()), "Satoru") or {}
        return BeautifulSoup(data.get("html", ""), "html.parser")

    def episode_id(self, content_id: str, episode: int) -> str:
        soup = self._fragment(f"{self.base_url}/ajax/episode/list/{content_id}")
        link = soup.select_one(f"a.ssl-item[data-number='{episode}']")
        if link is None or not link.get("data-id"):
            raise ContentNotFoundError(f"Episode {episode} not found for {content_id}")
        return link["data-id"]

    def servers(self, episode_id: str) -> List[Tuple[str, str]]:
        """``(server_id, label)`` pairs for an episode."""
        soup = self._fragment(f"{self.base_url}/ajax/episode/servers?episodeId={episode_id}")
        servers = []
        for item in soup.select("div.server-item"):
            if item.get("data-id"):
                servers.append((item["data-id"], item.get_text(strip=True)))
        return servers

    def _server_source(self, server: Tuple[str, str]) -> Optional[ExtractedSource]:
        server_id, label = server
        try:
            payload = make_request(
                f"{self.base_url}/ajax/episode/sources?id={server_id}", headers=_satoru_headers()
            ).json() or {}
        except (requests.RequestException, ValueError) as err:
            logging.error("Failed to fetch source from server %s: %s", label, err)
            return None

        link = payload.get("link") or ""
        if config.SATORU_TRUSTED_CDN not in link:
            logging.debug("Skipping untrusted link from %s: %s", label, link)
            return None

        if payload.get("type") == "iframe":
            try:
                master = extract_master_url(make_request(link, headers=_satoru_headers()).text)
            except requests.RequestException as err:
                logging.error("Error extracting m3u8 from %s: %s", link, err)
                master = None
            if master:
                link = master

        return ExtractedSource(url=link, quality=label, is_hls=".m3u8" in link)

    def get_source(self, content_id: str, server_name: str, episode: int) -> ExtractionResult:
        servers = self.servers(self.episode_id(content_id, episode))

        wanted = (server_name or "").strip().lower()
        matching = [server for server in servers if server[1].lower() == wanted]
        if matching:
            servers = matching

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            candidates = list(executor.map(self._server_source, servers))

        sources = [source for source in candidates if source is not None and source.is_hls]
        logging.info("Satoru returned %d HLS sources for %s episode %s", len(sources), content_id, episode)
        return ExtractionResult(sources=sources, strategy="Satoru")
