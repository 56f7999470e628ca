import argparse
import logging
import sys
from typing import List, Optional

from . import config


class CaseInsensitiveChoices:
    """Case-insensitive argument choice validator for argparse."""

    def __init__(self, choices: List[str]) -> None:
        self.choices = choices
        self.normalized = {c.lower(): c for c in choices}

    def __call__(self, value: str) -> str:
        key = value.lower()
        if key in self.normalized:
            return self.normalized[key]
        raise argparse.ArgumentTypeError(
            f"invalid choice: {value} (choose from {', '.join(self.choices)})"
        )


def _add_general_arguments(parser: argparse.ArgumentParser) -> None:
    """Add general command-line arguments to the parser."""
    general_opts = parser.add_argument_group("General Options")
    general_opts.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Enable debug mode for detailed logs.",
    )
    general_opts.add_argument(
        "-v", "--version", action="store_true", help="Display version information."
    )


def _add_lookup_arguments(parser: argparse.ArgumentParser) -> None:
    """Add provider lookup arguments to the parser."""
    lookup_opts = parser.add_argument_group("Lookup Options")
    lookup_opts.add_argument(
        "-s", "--search", type=str, help="Search the provider catalog for a title."
    )
    lookup_opts.add_argument(
        "-i",
        "--id",
        type=str,
        help="Provider-native id (e.g., naruto-shippuden-1x1 or your-name).",
    )
    lookup_opts.add_argument(
        "-P",
        "--provider",
        type=CaseInsensitiveChoices(list(config.SUPPORTED_SITES)),
        default=config.DEFAULT_PROVIDER,
        help="Provider to resolve native ids against.",
    )
    lookup_opts.add_argument(
        "-S",
        "--server",
        type=str,
        default=config.DEFAULT_SERVER,
        help="Server label or 1-based index (default: 1).",
    )
    lookup_opts.add_argument(
        "--player",
        action="store_true",
        help="Print the server list of the watch page instead of resolving sources.",
    )
    lookup_opts.add_argument(
        "--series",
        action="store_true",
        help="Print series metadata for --id (a single season with --season).",
    )


def _add_external_arguments(parser: argparse.ArgumentParser) -> None:
    """Add external catalog arguments to the parser."""
    external_opts = parser.add_argument_group("External Catalog Options")
    external_opts.add_argument(
        "-c",
        "--catalog",
        type=CaseInsensitiveChoices(["tmdb", "anilist"]),
        help="External catalog the --external-id belongs to.",
    )
    external_opts.add_argument(
        "-x", "--external-id", type=str, help="TMDB or AniList id to resolve."
    )
    external_opts.add_argument(
        "--season", type=int, help="Season number (tv shows and --series)."
    )
    external_opts.add_argument("-e", "--episode", type=int, help="Episode number.")


def _handle_version() -> None:
    """Handle version information display."""
    print(f"anisource v.{config.VERSION}")
    sys.exit(0)


def _handle_debug_mode() -> None:
    """Handle debug mode setup."""
    logging.getLogger().setLevel(logging.DEBUG)
    logging.debug("=============================================")
    logging.debug("   anisource v.%s   ", config.VERSION)
    logging.debug("=============================================\n")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="anisource",
        description="anisource - resolve anime episodes and movies to playable "
        "stream sources from provider-native, TMDB or AniList ids.",
    )
    _add_general_arguments(parser)
    _add_lookup_arguments(parser)
    _add_external_arguments(parser)
    return parser


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments for anisource."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        _handle_version()

    if args.external_id and not args.catalog:
        parser.error("--external-id requires --catalog")
    if not (args.search or args.id or args.external_id):
        parser.error("one of --search, --id or --external-id is required")

    if args.debug:
        _handle_debug_mode()

    return args
