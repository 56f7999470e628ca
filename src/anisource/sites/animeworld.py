"""
animeworld-india site module.

Search, series and season metadata scraped from the catalog's HTML pages.
Watch page parsing and source resolution live in ``player.py`` and
``pipeline.py``; this module only describes what exists.
"""

import copy
import json
import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests
from bs4 import BeautifulSoup

from .. import config
from ..cache import ProviderCache, get_default_cache
from ..common.common import make_request
from ..errors import ContentNotFoundError, UpstreamFormatChanged
from ..models import SearchResult


def _text(soup, selector: str) -> str:
    element = soup.select_one(selector)
    return element.get_text(strip=True) if element else ""


def _rating(soup) -> str:
    return _text(soup, ".vote").replace("TMDB", "").strip()


def _last_segment(href: str) -> str:
    return href.rstrip("/").split("/")[-1] if href else ""


def parse_search_results(html: str) -> List[SearchResult]:
    """Result cards of a search page. A page without the result list has changed layout."""
    soup = BeautifulSoup(html, "html.parser")
    listing = soup.select_one(".post-lst")
    if listing is None:
        raise UpstreamFormatChanged("Search page has no result list (.post-lst)")

    results = []
    for item in listing.select("li"):
        title = _text(item, ".entry-title")
        link = item.find("a", href=True)
        href = link["href"] if link else ""
        content_id = _last_segment(href)
        if not (content_id and title):
            continue
        image = item.find("img")
        results.append(
            SearchResult(
                id=content_id,
                title=title,
                url=href,
                rating=_rating(item) or None,
                poster=(image.get("src") or image.get("data-src")) if image else None,
            )
        )
    return results


def _parse_metadata(soup) -> Dict[str, str]:
    metadata = {}
    for item in soup.select(".aa-cn .aa-tb.hdd.on .entry-metadata li"):
        label = item.find("b")
        label_text = label.get_text(strip=True) if label else ""
        key = label_text.lower().replace(":", "").strip()
        value = item.get_text(" ", strip=True).replace(label_text, "", 1).strip()
        if key and value:
            metadata[key] = value
    return metadata


def _parse_details(soup, content_id: str) -> Dict[str, Any]:
    if soup.select_one(".entry-title") is None:
        raise UpstreamFormatChanged(f"Details page for {content_id!r} has no title (.entry-title)")
    poster = soup.select_one(".post-thumbnail img")
    return {
        "id": content_id,
        "title": _text(soup, ".entry-title"),
        "poster": poster.get("src") if poster else None,
        "rating": _rating(soup),
        "description": _text(soup, ".entry-content"),
        "metadata": _parse_metadata(soup),
    }


def parse_seasons(soup) -> List[Dict[str, Any]]:
    """Season selector entries, or a single default season when there is none."""
    seasons = []
    for link in soup.select(".choose-season li.sel-temp a[data-season][data-post]"):
        try:
            number = int(link["data-season"])
        except ValueError:
            logging.debug("Skipping season entry %r", link["data-season"])
            continue
        seasons.append({"id": link["data-post"], "number": number, "name": link.get_text(strip=True)})

    if not seasons:
        seasons.append({"id": "1", "number": 1, "name": "Season 1"})
    return seasons


def parse_episodes(html: str, season_number: int) -> List[Dict[str, Any]]:
    """Episode list of a watch page. ``.num-epi`` reads ``SxE``."""
    soup = BeautifulSoup(html, "html.parser")
    episodes = []
    for position, item in enumerate(soup.select("#episode_by_temp li")):
        link = item.find("a", href=True)
        href = link["href"] if link else ""
        episode_id = _last_segment(href)
        if not episode_id:
            continue

        number_text = _text(item, ".num-epi")
        season, episode = season_number, position + 1
        parts = number_text.split("x")
        if len(parts) == 2 and parts[0].strip().isdigit() and parts[1].strip().isdigit():
            season, episode = int(parts[0]), int(parts[1])

        image = item.find("img")
        episodes.append(
            {
                "id": episode_id,
                "title": _text(item, ".entry-title"),
                "image": image.get("src") if image else None,
                "seasonNumber": season,
                "episodeNumber": episode,
                "number": number_text or f"{season}x{episode}",
                "url": href,
            }
        )
    return episodes


class AnimeWorldIndia:
    """
    Catalog access for animeworld-india.

    Example:
        site = AnimeWorldIndia()
        site.search("naruto")[0].id        # "naruto-shippuden"
        site.get_season("naruto-shippuden", 1)["episodes"]
    """

    def __init__(
        self,
        base_url: str = config.ANIMEWORLD_INDIA,
        cache: Optional[ProviderCache] = None,
        overrides_dir: Optional[Path] = None,
        max_workers: int = config.DEFAULT_MAX_WORKERS,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.cache = cache if cache is not None else get_default_cache()
        self.overrides_dir = Path(overrides_dir) if overrides_dir is not None else config.OVERRIDES_DIR
        self.max_workers = max_workers

    # Search

    def search(self, query: str) -> List[SearchResult]:
        if not query:
            raise ValueError("Search query is required")
        return self.cache.get_or_compute(
            f"search_{query}", lambda: self._search_upstream(query), config.SHORT_TTL
        )

    def _search_upstream(self, query: str) -> List[SearchResult]:
        response = make_request(f"{self.base_url}/?s={quote(query)}")
        results = parse_search_results(response.text)
        logging.debug("Search for %r returned %d results", query, len(results))
        return results

    # Series

    def load_override(self, content_id: str) -> Optional[Dict[str, Any]]:
        path = self.overrides_dir / f"{content_id}.json"
        if not path.is_file():
            return None
        try:
            with open(path, "r", encoding="utf-8") as override_file:
                return json.load(override_file)
        except (OSError, ValueError) as err:
            logging.error("Error loading override data for %s: %s", content_id, err)
            return None

    def get_series(self, content_id: str) -> Dict[str, Any]:
        """Series metadata. Callers get their own copy of the cached entry."""
        series = self.cache.get_or_compute(
            f"series_{content_id}", lambda: self._series_upstream(content_id), config.SHORT_TTL
        )
        return copy.deepcopy(series)

    def _series_upstream(self, content_id: str) -> Dict[str, Any]:
        override = self.load_override(content_id)
        if override is not None:
            logging.info("Using override data for %s", content_id)
            return override

        movie = self._fetch_movie(content_id)
        if movie is not None:
            return movie

        url = f"{self.base_url}/{config.SERIES_PATH}/{content_id}"
        try:
            response = make_request(url)
        except requests.RequestException as err:
            raise ContentNotFoundError(f"Series {content_id!r} not found: {err}") from err

        soup = BeautifulSoup(response.text, "html.parser")
        series = _parse_details(soup, content_id)
        seasons = parse_seasons(soup)
        logging.info("Found %d seasons for %s", len(seasons), content_id)

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            episode_lists = list(
                executor.map(lambda season: self._fetch_season_episodes(content_id, season["number"]), seasons)
            )

        for season, episodes in zip(seasons, episode_lists):
            season["episodes"] = episodes

        series.update(
            {
                "isMovie": False,
                "seasons": seasons,
                "totalEpisodes": sum(len(episodes) for episodes in episode_lists),
                "totalSeasons": len(seasons),
            }
        )
        return series

    def _fetch_movie(self, content_id: str) -> Optional[Dict[str, Any]]:
        url = f"{self.base_url}/{config.MOVIE_PATH}/{content_id}"
        try:
            response = make_request(url)
        except requests.RequestException as err:
            logging.debug("Not a movie (%s), trying as series", err)
            return None

        movie = _parse_details(BeautifulSoup(response.text, "html.parser"), content_id)
        movie.update(
            {
                "isMovie": True,
                "totalEpisodes": 1,
                "totalSeasons": 1,
                "seasons": [
                    {
                        "id": "1",
                        "number": 1,
                        "name": "Movie",
                        "episodes": [
                            {
                                "id": f"{content_id}-1x1",
                                "title": movie["title"],
                                "image": movie["poster"],
                                "seasonNumber": 1,
                                "episodeNumber": 1,
                                "number": "1x1",
                                "url": url,
                            }
                        ],
                    }
                ],
            }
        )
        return movie

    def _fetch_season_episodes(self, content_id: str, season_number: int) -> List[Dict[str, Any]]:
        url = f"{self.base_url}/{config.EPISODE_PATH}/{content_id}-{season_number}x1"
        try:
            response = make_request(url)
        except requests.RequestException as err:
            logging.error("Error fetching episodes for season %s: %s", season_number, err)
            return []
        episodes = parse_episodes(response.text, season_number)
        logging.debug("Found %d episodes for season %s", len(episodes), season_number)
        return episodes

    def get_season(self, content_id: str, season_number: int) -> Dict[str, Any]:
        season = self.cache.get_or_compute(
            f"series_{content_id}_season_{season_number}",
            lambda: self._find_season(content_id, int(season_number)),
            config.SHORT_TTL,
        )
        return copy.deepcopy(season)

    def _find_season(self, content_id: str, season_number: int) -> Dict[str, Any]:
        series = self.get_series(content_id)
        if series.get("isMovie"):
            return series["seasons"][0]

        for season in series.get("seasons", []):
            if int(season.get("number", 0)) == season_number:
                return season
        raise ContentNotFoundError(f"Season {season_number} not found for series {content_id}")
