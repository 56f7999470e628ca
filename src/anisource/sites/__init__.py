from .animedekho import AnimeDekho
from .animeworld import AnimeWorldIndia
from .satoru import Satoru

__all__ = ["AnimeDekho", "AnimeWorldIndia", "Satoru"]
