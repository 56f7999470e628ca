import base64
from types import SimpleNamespace

import pytest

from anisource.errors import ExtractionDegraded
from anisource.extractors.provider import voe as voe_mod


def test_voe_plain_manifest():
    html = "var sources = {'hls': 'https://cdn.voe.test/engine/hls/master.m3u8?t=1', 'video_height': 720};"
    assert voe_mod._extract_manifest_from_html(html) == "https://cdn.voe.test/engine/hls/master.m3u8?t=1"


def test_voe_base64_manifest():
    encoded = base64.b64encode(b"https://cdn.voe.test/b64/master.m3u8").decode()
    html = f"var sources = {{'hls': '{encoded}'}};"
    assert voe_mod._extract_manifest_from_html(html) == "https://cdn.voe.test/b64/master.m3u8"


def test_voe_removed_raises():
    with pytest.raises(ExtractionDegraded):
        voe_mod._extract_manifest_from_html("<h1>Video not found</h1>")


def test_voe_follows_redirect_page(monkeypatch):
    called = []

    def fake_make_request(url, headers=None, **kwargs):
        called.append(url)
        if url == "https://voe.sx/e/j8vfrcq55wrg":
            return SimpleNamespace(
                text="<script>window.location.href = 'https://mirror.voe.test/e/j8vfrcq55wrg';</script>"
            )
        return SimpleNamespace(text="{'hls': 'https://cdn.voe.test/j8/master.m3u8'}")

    monkeypatch.setattr(voe_mod, "make_request", fake_make_request)

    result = voe_mod.get_sources_from_voe("https://voe.sx/e/j8vfrcq55wrg")
    assert called == ["https://voe.sx/e/j8vfrcq55wrg", "https://mirror.voe.test/e/j8vfrcq55wrg"]
    assert result.sources[0].url == "https://cdn.voe.test/j8/master.m3u8"
    assert result.sources[0].is_hls


def test_voe_without_manifest_raises(monkeypatch):
    monkeypatch.setattr(
        voe_mod, "make_request", lambda url, headers=None, **kwargs: SimpleNamespace(text="<html></html>")
    )
    with pytest.raises(ExtractionDegraded):
        voe_mod.get_sources_from_voe("https://voe.sx/e/abc")
