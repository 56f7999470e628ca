import logging
import os
import pathlib
import tempfile
from functools import lru_cache
from importlib.metadata import PackageNotFoundError, version
from typing import Dict

from dotenv import load_dotenv
from fake_useragent import UserAgent

from .errors import MissingCredentialError

load_dotenv()


#########################################################################################
# Global Constants
#########################################################################################

ANIMEWORLD_INDIA = "https://animeworld-india.me"
ANIMEDEKHO = "https://animedekho.co"
SATORU = "https://www.satoru.one"
ZEPHYRFLICK = "https://play.zephyrflick.top"

TMDB_API_URL = "https://api.themoviedb.org/3"
ANILIST_GRAPHQL_URL = "https://graphql.anilist.co"
ANI_ZIP_MAPPINGS_URL = "https://api.ani.zip/mappings"

# URL shapes exposed by the animeworld-india catalog
EPISODE_PATH = "episode"
MOVIE_PATH = "movies"
SERIES_PATH = "series"

SUPPORTED_SITES = {
    "animeworld-india": {"base_url": ANIMEWORLD_INDIA},
    "animedekho": {"base_url": ANIMEDEKHO},
    "satoru": {"base_url": SATORU},
}

# Only links served from this CDN are trusted on satoru.one
SATORU_TRUSTED_CDN = "cdn.buycodeonline.com"

#########################################################################################
# Logging Configuration
#########################################################################################

log_file_path = os.path.join(tempfile.gettempdir(), "anisource.log")

LOG_FORMAT = "%(levelname)s:%(name)s:%(funcName)s: %(message)s"

logging.basicConfig(
    level=logging.DEBUG,
    format=LOG_FORMAT,
    handlers=[logging.FileHandler(log_file_path, mode="w", encoding="utf-8")],
)

console_handler = logging.StreamHandler()
console_handler.setLevel(logging.WARNING)
console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
logging.getLogger().addHandler(console_handler)
logging.getLogger("urllib3.connectionpool").setLevel(logging.WARNING)
logging.getLogger("charset_normalizer").setLevel(logging.WARNING)
logging.getLogger().setLevel(logging.WARNING)
logging.getLogger("bs4.dammit").setLevel(logging.ERROR)

#########################################################################################
# Default Configuration Constants
#########################################################################################

DEFAULT_REQUEST_TIMEOUT = 30

try:
    VERSION = version("anisource")
except PackageNotFoundError:
    VERSION = ""

# Cache lifetimes in seconds. Search indices change often, embed tokens do not.
SHORT_TTL = 60 * 60 * 24
LONG_TTL = 60 * 60 * 24 * 7


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logging.warning("Ignoring invalid %s=%r, using %s", name, raw, default)
        return default


# Minimum similarity before the slug rescue heuristics kick in
TITLE_MATCH_THRESHOLD = _env_float("ANISOURCE_MATCH_THRESHOLD", 0.6)

# Worker threads used when fanning out season or server fetches
DEFAULT_MAX_WORKERS = 8

DEFAULT_PROVIDER = "animeworld-india"
DEFAULT_SERVER = "1"

# Read-only series metadata overrides, one <id>.json per series
OVERRIDES_DIR = pathlib.Path(os.getenv("ANISOURCE_OVERRIDES_DIR", "json"))

# Optional prefix prepended to animedekho embed URLs
PROXY_URL = os.getenv("PROXY_URL", "")


def get_tmdb_api_key() -> str:
    """Return the TMDB credential or fail before any catalog request is made."""
    api_key = os.getenv("TMDB_API_KEY", "").strip()
    if not api_key:
        raise MissingCredentialError("TMDB_API_KEY is not set in the environment")
    return api_key


#########################################################################################


@lru_cache(maxsize=1)
def get_random_user_agent() -> str:
    """Get random user agent with caching to avoid repeated UserAgent() calls"""
    ua = UserAgent(os=["Windows", "Mac OS X"])
    return ua.random


MOBILE_USER_AGENT = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 16_6 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/16.6 Mobile/15E148 Safari/604.1"
)


def get_default_headers(referer: str = ANIMEWORLD_INDIA + "/") -> Dict[str, str]:
    """Browser-like headers sent with every catalog page request."""
    return {
        "User-Agent": get_random_user_agent(),
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,"
        "image/avif,image/webp,image/apng,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.9",
        "Referer": referer,
        "Upgrade-Insecure-Requests": "1",
    }


#########################################################################################

if __name__ == "__main__":
    pass
