from .anilist import AniListMapper
from .tmdb import TmdbClient

__all__ = ["AniListMapper", "TmdbClient"]
