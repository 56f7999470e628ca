import json
from types import SimpleNamespace

import pytest

from anisource.errors import ContentNotFoundError
from anisource.extractors.provider import zephyrflick as zf
from anisource.sites import animedekho as ad
from anisource.sites import satoru as st


def test_animedekho_id_parsing():
    assert ad.parse_episode_id("46260-1x3") == ("46260", 1, 3)
    with pytest.raises(ContentNotFoundError):
        ad.parse_episode_id("naruto")


def test_animedekho_embed_url_with_proxy():
    site = ad.AnimeDekho(base_url="https://animedekho.test", proxy_url="https://proxy.test/?url=")
    assert site.embed_url("46260-2x5") == "https://proxy.test/?url=https://animedekho.test/embed/46260/2-5"


def test_animedekho_source_uses_player_api(monkeypatch):
    requested = []

    def fake_make_request(url, headers=None, method="GET", **kwargs):
        requested.append(url)
        if method == "POST":
            return SimpleNamespace(json=lambda: {"videoSource": "https://cdn.zephyr.test/m.m3u8"})
        return SimpleNamespace(text='<iframe src="https://play.zephyrflick.top/video/tok"></iframe>')

    monkeypatch.setattr(zf, "make_request", fake_make_request)
    result = ad.AnimeDekho(base_url="https://animedekho.test", proxy_url="").get_source("46260-1x1")

    assert requested[0] == "https://animedekho.test/embed/46260/1-1"
    assert result.status == "resolved"
    assert result.sources[0].url == "https://cdn.zephyr.test/m.m3u8"
    assert result.headers == {"Referer": "https://play.zephyrflick.top/"}


SATORU_SEARCH = """
<div class="flw-item"><a class="film-poster-ahref" data-id="123" href="/watch/demo-123"></a>
<h3 class="film-name"><a href="/demo-123" title="Demo Show">Demo Show</a></h3></div>
"""


def _satoru_fake(requested):
    episodes = {"html": '<a class="ssl-item" data-number="1" data-id="ep-1"></a>'
                        '<a class="ssl-item" data-number="2" data-id="ep-2"></a>'}
    servers = {"html": '<div class="server-item" data-id="s1">HD-1</div>'
                       '<div class="server-item" data-id="s2">HD-2</div>'
                       '<div class="server-item" data-id="s3">Other</div>'}
    payloads = {
        "s1": {"type": "iframe", "link": "https://cdn.buycodeonline.com/player/1"},
        "s2": {"type": "direct", "link": "https://cdn.buycodeonline.com/hls/2/master.m3u8"},
        "s3": {"type": "direct", "link": "https://untrusted.test/3/master.m3u8"},
    }

    def fake_make_request(url, headers=None, **kwargs):
        requested.append(url)
        if "/ajax/episode/list/" in url:
            return SimpleNamespace(json=lambda: episodes)
        if "/ajax/episode/servers" in url:
            return SimpleNamespace(json=lambda: servers)
        if "/ajax/episode/sources" in url:
            server_id = url.rsplit("=", 1)[1]
            return SimpleNamespace(json=lambda: payloads[server_id])
        if "/filter" in url:
            return SimpleNamespace(text=SATORU_SEARCH)
        return SimpleNamespace(text="const mastreUrl = 'https://cdn.buycodeonline.com/hls/1/master.m3u8';")

    return fake_make_request


def test_satoru_search(monkeypatch):
    monkeypatch.setattr(st, "make_request", _satoru_fake([]))
    results = st.Satoru(base_url="https://satoru.test").search("Demo")
    assert [(r.id, r.title) for r in results] == [("123", "Demo Show")]


def test_satoru_keeps_trusted_hls_sources(monkeypatch):
    requested = []
    monkeypatch.setattr(st, "make_request", _satoru_fake(requested))

    result = st.Satoru(base_url="https://satoru.test").get_source("123", "any", 2)
    assert sorted((s.quality, s.url) for s in result.sources) == [
        ("HD-1", "https://cdn.buycodeonline.com/hls/1/master.m3u8"),
        ("HD-2", "https://cdn.buycodeonline.com/hls/2/master.m3u8"),
    ]
    assert "https://satoru.test/ajax/episode/servers?episodeId=ep-2" in requested


def test_satoru_filters_by_server_label(monkeypatch):
    monkeypatch.setattr(st, "make_request", _satoru_fake([]))
    result = st.Satoru(base_url="https://satoru.test").get_source("123", "hd-2", 1)
    assert [s.quality for s in result.sources] == ["HD-2"]


def test_satoru_missing_episode(monkeypatch):
    monkeypatch.setattr(st, "make_request", _satoru_fake([]))
    with pytest.raises(ContentNotFoundError):
        st.Satoru(base_url="https://satoru.test").get_source("123", "HD-1", 99)
