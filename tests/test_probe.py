import pytest

from anisource import probe as probe_mod
from anisource.cache import ProviderCache
from anisource.errors import ContentNotFoundError
from anisource.probe import ContentTypeProbe


def _fake_exists(existing, calls):
    def fake_url_exists(url, headers=None):
        calls.append(url)
        return any(part in url for part in existing)

    return fake_url_exists


def test_episode_is_probed_once(monkeypatch):
    calls = []
    monkeypatch.setattr(probe_mod, "url_exists", _fake_exists(["/episode/"], calls))
    probe = ContentTypeProbe(base_url="https://provider.test", cache=ProviderCache())

    assert probe.probe("demo-show-1x1") == "episode"
    assert probe.probe("demo-show-1x1") == "episode"
    assert calls == ["https://provider.test/episode/demo-show-1x1"]


def test_movie_is_checked_after_episode(monkeypatch):
    calls = []
    monkeypatch.setattr(probe_mod, "url_exists", _fake_exists(["/movies/"], calls))
    probe = ContentTypeProbe(base_url="https://provider.test", cache=ProviderCache())

    assert probe.probe("your-name") == "movie"
    assert calls == [
        "https://provider.test/episode/your-name",
        "https://provider.test/movies/your-name",
    ]
    assert probe.page_url("your-name", "movie") == "https://provider.test/movies/your-name"


def test_missing_content_raises_and_is_not_cached(monkeypatch):
    calls = []
    monkeypatch.setattr(probe_mod, "url_exists", _fake_exists([], calls))
    probe = ContentTypeProbe(base_url="https://provider.test", cache=ProviderCache())

    with pytest.raises(ContentNotFoundError):
        probe.probe("nothing")
    with pytest.raises(ContentNotFoundError):
        probe.probe("nothing")
    assert len(calls) == 4
