"""
anisource main entry point.
"""

import logging
import sys
from typing import NoReturn

from .entry import anisource


def main() -> NoReturn:
    """
    Main entry point for the anisource command.

    Handles graceful shutdown on keyboard interrupt.
    """
    try:
        sys.exit(anisource())
    except KeyboardInterrupt:
        print("\n\nOperation cancelled by user.", file=sys.stderr)
        sys.exit(130)  # Standard exit code for SIGINT
    except Exception as err:
        logging.error("Unexpected error: %s", err, exc_info=True)
        print(f"\nAn unexpected error occurred: {err}", file=sys.stderr)
        print("Please check the logs for more details.", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
