"""
anisource: resolve anime episodes and movies to playable stream sources.
"""

from .cache import ProviderCache
from .errors import (
    ContentNotFoundError,
    ExtractionDegraded,
    MappingNotFoundError,
    MissingCredentialError,
    NoCandidatesError,
    ResolverError,
    ServerNotFoundError,
    UpstreamFormatChanged,
)
from .pipeline import SourceResolutionPipeline
from .resolver import TitleResolver
from .service import SourceService, as_payload
from .similarity import similarity

__all__ = [
    "ContentNotFoundError",
    "ExtractionDegraded",
    "MappingNotFoundError",
    "MissingCredentialError",
    "NoCandidatesError",
    "ProviderCache",
    "ResolverError",
    "ServerNotFoundError",
    "SourceResolutionPipeline",
    "SourceService",
    "TitleResolver",
    "UpstreamFormatChanged",
    "as_payload",
    "similarity",
]
