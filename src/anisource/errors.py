"""
Error kinds raised while resolving content to a playable source.

Identifier-resolution failures propagate to the caller and are never cached.
ExtractionDegraded is the exception: strategies raise it to give up, and the
extractor registry always converts it into a degraded but successful result.
"""


class ResolverError(Exception):
    """Base class for every typed failure of the resolution pipeline."""

    kind = "ResolverError"


class ContentNotFoundError(ResolverError):
    """Neither the episode nor the movie URL shape exists upstream."""

    kind = "ContentNotFoundError"


class NoCandidatesError(ResolverError):
    """A catalog search returned nothing to match a title against."""

    kind = "NoCandidatesError"


class ServerNotFoundError(ResolverError):
    """The requested server label or index is absent from the page."""

    kind = "ServerNotFoundError"


class UpstreamFormatChanged(ResolverError):
    """A page was fetched but the expected markup or payload is missing."""

    kind = "UpstreamFormatChanged"


class MissingCredentialError(ResolverError):
    """An external catalog needs a credential that is not configured."""

    kind = "MissingCredentialError"


class MappingNotFoundError(ResolverError):
    """An external catalog id could not be mapped to a title."""

    kind = "MappingNotFoundError"


class ExtractionDegraded(ResolverError):
    """A strategy could not resolve a direct link and hands back the embed URL."""

    kind = "ExtractionDegraded"
