from .filemoon import FilemoonStrategy, get_sources_from_filemoon
from .streamwish import StreamWishStrategy, get_sources_from_streamwish
from .voe import VoeStrategy, get_sources_from_voe
from .zephyrflick import ZephyrflickStrategy, get_sources_from_zephyrflick

__all__ = [
    "FilemoonStrategy",
    "StreamWishStrategy",
    "VoeStrategy",
    "ZephyrflickStrategy",
    "get_sources_from_filemoon",
    "get_sources_from_streamwish",
    "get_sources_from_voe",
    "get_sources_from_zephyrflick",
]
