import json
from types import SimpleNamespace

import pytest
import requests

from anisource.cache import ProviderCache
from anisource.errors import ContentNotFoundError, UpstreamFormatChanged
from anisource.sites import animeworld as aw

SEARCH_PAGE = """
<ul class="post-lst">
  <li><article>
    <img src="https://img.test/naruto.jpg">
    <h2 class="entry-title">Naruto Shippuden</h2>
    <span class="vote"><span>TMDB</span> 8.5</span>
    <a href="https://provider.test/series/naruto-shippuden/" class="lnk-blk"></a>
  </article></li>
  <li><article><h2 class="entry-title">No link</h2></article></li>
</ul>
"""

SERIES_PAGE = """
<h1 class="entry-title">Demo Show</h1>
<div class="post-thumbnail"><img src="https://img.test/demo.jpg"></div>
<div class="entry-content"><p>Two seasons of demo.</p></div>
<div class="aa-cn"><div class="aa-tb hdd on"><ul class="entry-metadata">
  <li><b>Genres:</b> Action</li>
</ul></div></div>
<div class="choose-season"><ul class="aa-cnt">
  <li class="sel-temp"><a data-season="1" data-post="101">Season 1</a></li>
  <li class="sel-temp"><a data-season="2" data-post="102">Season 2</a></li>
</ul></div>
"""


def _episode_page(season, count):
    items = "".join(
        f'<li><article><h2 class="entry-title">Episode {n}</h2>'
        f'<span class="num-epi">{season}x{n}</span>'
        f'<a href="https://provider.test/episode/demo-show-{season}x{n}/"></a></article></li>'
        for n in range(1, count + 1)
    )
    return f'<ul id="episode_by_temp">{items}</ul>'


def _site(tmp_path):
    return aw.AnimeWorldIndia(
        base_url="https://provider.test", cache=ProviderCache(), overrides_dir=tmp_path
    )


def test_parse_search_results():
    results = aw.parse_search_results(SEARCH_PAGE)
    assert len(results) == 1
    assert results[0].id == "naruto-shippuden"
    assert results[0].title == "Naruto Shippuden"
    assert results[0].rating == "8.5"
    assert results[0].poster == "https://img.test/naruto.jpg"


def test_search_is_cached(monkeypatch, tmp_path):
    requested = []

    def fake_make_request(url, headers=None, **kwargs):
        requested.append(url)
        return SimpleNamespace(text=SEARCH_PAGE)

    monkeypatch.setattr(aw, "make_request", fake_make_request)
    site = _site(tmp_path)
    site.search("naruto shippuden")
    site.search("naruto shippuden")
    assert requested == ["https://provider.test/?s=naruto%20shippuden"]


def test_override_file_skips_network(monkeypatch, tmp_path):
    (tmp_path / "special-show.json").write_text(
        json.dumps({"id": "special-show", "seasons": [{"number": 1, "episodes": []}]}),
        encoding="utf-8",
    )

    def fail_request(url, headers=None, **kwargs):
        raise AssertionError(f"unexpected request to {url}")

    monkeypatch.setattr(aw, "make_request", fail_request)
    series = _site(tmp_path).get_series("special-show")
    assert series["id"] == "special-show"


def test_movie_page_becomes_single_season(monkeypatch, tmp_path):
    page = '<h1 class="entry-title">Your Name</h1><div class="post-thumbnail"><img src="p.jpg"></div>'
    monkeypatch.setattr(aw, "make_request", lambda url, headers=None, **kwargs: SimpleNamespace(text=page))

    site = _site(tmp_path)
    movie = site.get_series("your-name")
    assert movie["isMovie"] is True
    assert movie["seasons"][0]["episodes"][0]["id"] == "your-name-1x1"
    assert site.get_season("your-name", 5)["name"] == "Movie"


def test_series_episodes_fetched_per_season(monkeypatch, tmp_path):
    requested = []

    def fake_make_request(url, headers=None, **kwargs):
        requested.append(url)
        if "/movies/" in url:
            raise requests.HTTPError("404 Not Found")
        if "/series/" in url:
            return SimpleNamespace(text=SERIES_PAGE)
        if url.endswith("-1x1"):
            return SimpleNamespace(text=_episode_page(1, 3))
        return SimpleNamespace(text=_episode_page(2, 2))

    monkeypatch.setattr(aw, "make_request", fake_make_request)
    site = _site(tmp_path)
    series = site.get_series("demo-show")

    assert series["title"] == "Demo Show"
    assert series["metadata"] == {"genres": "Action"}
    assert series["totalSeasons"] == 2
    assert series["totalEpisodes"] == 5
    assert [s["number"] for s in series["seasons"]] == [1, 2]
    assert series["seasons"][1]["episodes"][0]["id"] == "demo-show-2x1"
    assert "https://provider.test/episode/demo-show-2x1" in requested

    season = site.get_season("demo-show", 2)
    assert [e["episodeNumber"] for e in season["episodes"]] == [1, 2]
    with pytest.raises(ContentNotFoundError):
        site.get_season("demo-show", 3)


def test_series_without_pages_raises(monkeypatch, tmp_path):
    def fake_make_request(url, headers=None, **kwargs):
        raise requests.HTTPError("404 Not Found")

    monkeypatch.setattr(aw, "make_request", fake_make_request)
    with pytest.raises(ContentNotFoundError):
        _site(tmp_path).get_series("nothing")


def test_empty_result_list_is_not_an_error():
    assert aw.parse_search_results('<ul class="post-lst"></ul>') == []


def test_search_page_without_result_list_raises():
    with pytest.raises(UpstreamFormatChanged):
        aw.parse_search_results("<main>redesigned</main>")


def test_series_page_without_title_raises_and_is_not_cached(monkeypatch, tmp_path):
    pages = {"series": "<div class='redesign'>new layout</div>"}

    def fake_make_request(url, headers=None, **kwargs):
        if "/movies/" in url:
            raise requests.HTTPError("404 Not Found")
        if "/series/" in url:
            return SimpleNamespace(text=pages["series"])
        return SimpleNamespace(text=_episode_page(1, 1))

    monkeypatch.setattr(aw, "make_request", fake_make_request)
    site = _site(tmp_path)
    with pytest.raises(UpstreamFormatChanged):
        site.get_series("demo-show")

    pages["series"] = SERIES_PAGE
    assert site.get_series("demo-show")["title"] == "Demo Show"


def test_movie_page_without_title_raises(monkeypatch, tmp_path):
    monkeypatch.setattr(
        aw, "make_request", lambda url, headers=None, **kwargs: SimpleNamespace(text="<main>new</main>")
    )
    with pytest.raises(UpstreamFormatChanged):
        _site(tmp_path).get_series("your-name")


def test_callers_cannot_mutate_cached_metadata(monkeypatch, tmp_path):
    def fake_make_request(url, headers=None, **kwargs):
        if "/movies/" in url:
            raise requests.HTTPError("404 Not Found")
        if "/series/" in url:
            return SimpleNamespace(text=SERIES_PAGE)
        return SimpleNamespace(text=_episode_page(1, 2))

    monkeypatch.setattr(aw, "make_request", fake_make_request)
    site = _site(tmp_path)

    site.get_season("demo-show", 1)["episodes"].clear()
    site.get_series("demo-show")["seasons"].pop()

    assert len(site.get_season("demo-show", 1)["episodes"]) == 2
    assert len(site.get_series("demo-show")["seasons"]) == 2
