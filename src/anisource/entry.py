import argparse
import json
import logging
import traceback
from typing import Any, Dict, List, Optional

from .parser import parse_arguments
from .service import SourceService, as_payload


def _dispatch(service: SourceService, args: argparse.Namespace) -> Dict[str, Any]:
    if args.external_id:
        return as_payload(
            service.resolve_by_external_id,
            args.catalog,
            args.external_id,
            season=args.season,
            episode=args.episode,
            server_name=args.server,
        )

    if args.search:
        return as_payload(service.search, args.search)

    if args.series:
        if args.season is not None:
            return as_payload(service.get_season_metadata, args.id, args.season)
        return as_payload(service.get_series_metadata, args.id)

    if args.player:
        return as_payload(service.get_player, args.id)

    return as_payload(
        service.resolve_by_native_id, args.id, args.server, provider=args.provider
    )


def anisource(argv: Optional[List[str]] = None, service: Optional[SourceService] = None) -> int:
    """
    Main entry point for anisource.

    Prints the JSON payload of the requested lookup and returns the process
    exit code: 0 on success, 1 when the lookup failed.
    """
    args = parse_arguments(argv)
    service = service if service is not None else SourceService()

    try:
        payload = _dispatch(service, args)
    except ValueError as err:
        if args.debug:
            traceback.print_exc()
        logging.error("Invalid request: %s", err)
        payload = {"success": False, "error": "InvalidRequest", "message": str(err)}

    print(json.dumps(payload, indent=2, ensure_ascii=False))
    return 0 if payload.get("success") else 1


if __name__ == "__main__":
    raise SystemExit(anisource())
