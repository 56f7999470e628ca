from types import SimpleNamespace

import pytest
import requests

from anisource import player as player_mod
from anisource.cache import ProviderCache
from anisource.errors import ContentNotFoundError, UpstreamFormatChanged
from anisource.player import (
    PlayerPageExtractor,
    parse_player_page,
    parse_server_list,
    parse_video_containers,
)
from bs4 import BeautifulSoup

WATCH_PAGE = """
<html><body>
<div class="video-player">
  <div id="options-0" class="video on"><iframe src="https://filemoon.sx/e/abc123"></iframe></div>
  <div id="options-1" class="video"><iframe data-src="//mystery-host.example/embed/xyz"></iframe></div>
</div>
<ul class="aa-tbs aa-tbs-video">
  <li><a class="btr on" href="#options-0"><span>1</span> <span class="server">FileMoon</span></a></li>
  <li><a class="btr" href="#options-1"><span>2</span> <span class="server">SERVER 2: UnknownServer99</span></a></li>
</ul>
</body></html>
"""

CONTAINERS_ONLY_PAGE = """
<div class="video-player">
  <div class="video"><iframe src="https://voe.sx/e/first"></iframe></div>
  <div class="video on"><iframe src="https://filemoon.sx/e/second"></iframe></div>
</div>
"""

PAGE_URL = "https://provider.test/episode/demo-show-1x1"


def test_server_list_labels_and_embeds():
    sources = parse_server_list(BeautifulSoup(WATCH_PAGE, "html.parser"), PAGE_URL)
    assert [(s.index, s.label, s.active) for s in sources] == [
        (1, "FileMoon", True),
        (2, "UnknownServer99", False),
    ]
    assert sources[1].embed_url == "https://mystery-host.example/embed/xyz"


def test_both_tiers_agree_on_embeds():
    soup = BeautifulSoup(WATCH_PAGE, "html.parser")
    structured = parse_server_list(soup, PAGE_URL)
    positional = parse_video_containers(soup, PAGE_URL)
    assert len(structured) == len(positional)
    assert [s.embed_url for s in structured] == [s.embed_url for s in positional]


def test_player_page_uses_active_pane_as_iframe():
    page = parse_player_page(WATCH_PAGE, PAGE_URL)
    assert page.iframe == "https://filemoon.sx/e/abc123"
    assert page.to_dict()["sources"][0] == {
        "server": 1,
        "name": "FileMoon",
        "active": True,
        "src": "https://filemoon.sx/e/abc123",
    }


def test_positional_tier_used_without_selector():
    page = parse_player_page(CONTAINERS_ONLY_PAGE, PAGE_URL)
    assert [s.label for s in page.sources] == ["Server 1", "Server 2"]
    assert page.iframe == "https://filemoon.sx/e/second"


def test_page_without_player_is_a_format_change():
    with pytest.raises(UpstreamFormatChanged):
        parse_player_page("<html><body><p>Coming soon</p></body></html>", PAGE_URL)


def test_extractor_falls_back_to_movie_url(monkeypatch):
    requested = []

    def fake_make_request(url, headers=None, **kwargs):
        requested.append(url)
        if "/episode/" in url:
            raise requests.HTTPError("404 Not Found")
        return SimpleNamespace(text=CONTAINERS_ONLY_PAGE)

    monkeypatch.setattr(player_mod, "make_request", fake_make_request)
    extractor = PlayerPageExtractor(base_url="https://provider.test", cache=ProviderCache())

    page = extractor.extract("your-name")
    assert len(page.sources) == 2
    assert requested == [
        "https://provider.test/episode/your-name",
        "https://provider.test/movies/your-name",
    ]

    # Served from cache the second time
    extractor.extract("your-name")
    assert len(requested) == 2


def test_extractor_reports_missing_content(monkeypatch):
    def fake_make_request(url, headers=None, **kwargs):
        raise requests.ConnectionError("unreachable")

    monkeypatch.setattr(player_mod, "make_request", fake_make_request)
    extractor = PlayerPageExtractor(base_url="https://provider.test", cache=ProviderCache())

    with pytest.raises(ContentNotFoundError):
        extractor.extract("nothing")


def test_extractor_reports_changed_markup(monkeypatch):
    def fake_make_request(url, headers=None, **kwargs):
        if "/movies/" in url:
            raise requests.HTTPError("404 Not Found")
        return SimpleNamespace(text="<div class='entry-content'>redesigned</div>")

    monkeypatch.setattr(player_mod, "make_request", fake_make_request)
    extractor = PlayerPageExtractor(base_url="https://provider.test", cache=ProviderCache())

    with pytest.raises(UpstreamFormatChanged):
        extractor.extract("demo-show-1x1")
