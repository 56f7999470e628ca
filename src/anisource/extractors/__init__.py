from .registry import (
    ExtractionStrategy,
    PassthroughStrategy,
    SourceExtractorRegistry,
    degraded_result,
)
from .provider import (
    FilemoonStrategy,
    StreamWishStrategy,
    VoeStrategy,
    ZephyrflickStrategy,
)


def build_default_registry() -> SourceExtractorRegistry:
    """The strategy table in dispatch order, ending with the Generic passthrough."""
    return SourceExtractorRegistry(
        [
            ZephyrflickStrategy(),
            FilemoonStrategy(),
            StreamWishStrategy(),
            VoeStrategy(),
            PassthroughStrategy("Abyss", ("abyss", "short.icu")),
        ],
        fallback=PassthroughStrategy("Generic"),
    )


__all__ = [
    "ExtractionStrategy",
    "PassthroughStrategy",
    "SourceExtractorRegistry",
    "build_default_registry",
    "degraded_result",
]
