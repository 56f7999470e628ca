"""
Data model shared by the resolution pipeline.

Every entity is ephemeral: it is recomputed on a cache miss and only ever held
in the in-process ProviderCache. ``to_dict`` renders the JSON-ready shape the
callers consume (camelCase keys, optional fields omitted when unset).
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

EPISODE = "episode"
MOVIE = "movie"

# Extraction status tags
RESOLVED = "resolved"
PASSTHROUGH = "passthrough"
DEGRADED = "degraded"

_EPISODE_KEY_RE = re.compile(r"^(?P<id>.+)-(?P<season>\d+)x(?P<episode>\d+)$")


@dataclass(frozen=True)
class ContentIdentifier:
    """
    A provider-native id plus the optional season/episode qualifier.

    Example:
        ContentIdentifier("naruto", EPISODE, 1, 3).key == "naruto-1x3"
        ContentIdentifier("your-name", MOVIE).key == "your-name"
    """

    provider_id: str
    kind: str = MOVIE
    season: Optional[int] = None
    episode: Optional[int] = None

    def __post_init__(self) -> None:
        if self.kind not in (EPISODE, MOVIE):
            raise ValueError(f"Unknown content kind: {self.kind}")
        has_numbers = self.season is not None and self.episode is not None
        if self.kind == EPISODE and not has_numbers:
            raise ValueError("Episodes need both season and episode numbers.")
        if self.kind == MOVIE and (self.season is not None or self.episode is not None):
            raise ValueError("Movies cannot carry season or episode numbers.")

    @property
    def key(self) -> str:
        if self.kind == MOVIE:
            return self.provider_id
        return f"{self.provider_id}-{self.season}x{self.episode}"

    @classmethod
    def episode_of(cls, provider_id: str, season: int, episode: int) -> "ContentIdentifier":
        return cls(provider_id, EPISODE, int(season), int(episode))

    @classmethod
    def parse(cls, key: str) -> "ContentIdentifier":
        match = _EPISODE_KEY_RE.match(key)
        if match:
            return cls.episode_of(
                match.group("id"), int(match.group("season")), int(match.group("episode"))
            )
        return cls(key, MOVIE)

    def __str__(self) -> str:
        return self.key


@dataclass(frozen=True)
class SearchResult:
    id: str
    title: str
    url: str
    rating: Optional[str] = None
    poster: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "rating": self.rating,
            "poster": self.poster,
            "url": self.url,
        }


@dataclass(frozen=True)
class ServerOption:
    """One embed option on a watch page; ``index`` is 1-based document order."""

    index: int
    label: str
    embed_url: str
    active: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "server": self.index,
            "name": self.label,
            "active": self.active,
            "src": self.embed_url,
        }


@dataclass(frozen=True)
class PlayerPage:
    iframe: str
    sources: List[ServerOption] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "iframe": self.iframe,
            "sources": [source.to_dict() for source in self.sources],
        }


@dataclass(frozen=True)
class ExtractedSource:
    """A playable URL. ``quality`` is a free-text label, not a sortable rank."""

    url: str
    quality: str = "auto"
    is_hls: bool = False
    is_dash: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "quality": self.quality,
            "isHLS": self.is_hls,
            "isDASH": self.is_dash,
        }


@dataclass(frozen=True)
class ExtractionResult:
    sources: List[ExtractedSource]
    status: str = RESOLVED
    strategy: str = ""
    headers: Optional[Dict[str, str]] = None
    thumbnail: Optional[str] = None
    reason: Optional[str] = None

    @property
    def degraded(self) -> bool:
        return self.status == DEGRADED


@dataclass(frozen=True)
class SourceResolutionResult:
    server: int
    name: str
    url: str
    sources: Tuple[ExtractedSource, ...]
    success: bool = True
    status: str = RESOLVED
    headers: Optional[Dict[str, str]] = None
    thumbnail: Optional[str] = None

    def __post_init__(self) -> None:
        # Results are cached and shared between callers
        object.__setattr__(self, "sources", tuple(self.sources))

    @property
    def degraded(self) -> bool:
        return self.status == DEGRADED

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "success": self.success,
            "server": self.server,
            "name": self.name,
            "url": self.url,
            "status": self.status,
            "sources": [source.to_dict() for source in self.sources],
        }
        if self.headers:
            data["headers"] = dict(self.headers)
        if self.thumbnail is not None:
            data["thumbnail"] = self.thumbnail
        return data
