"""Command line entry point.

Usage::

    python -m raspinfo                    # run the poller and the read API
    python -m raspinfo --lookup E2185     # resolve a stop code and exit
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from raspinfo.config import RaspInfoConfig
from raspinfo.exceptions import StopLookupError
from raspinfo.logging_capture import configure_logging
from raspinfo.runtime import lookup_stop_code, serve
from raspinfo.state.store import SnapshotStore

_logger = logging.getLogger("raspinfo")


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="raspinfo", description="Transit, weather and spot price info panel")
    parser.add_argument("--lookup", metavar="CODE", default="", help="Lookup HSL stop by short code (e.g. E2185)")
    parser.add_argument("--config", default="config.json", help="Path to config.json")
    parser.add_argument("--secrets", default="secrets.txt", help="Fallback file holding the HSL API key")
    parser.add_argument("--log-level", default="INFO", help="Root log level")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    store = SnapshotStore()
    configure_logging(store, args.log_level.upper())
    config = RaspInfoConfig.load(args.config, args.secrets)

    if args.lookup:
        if not config.hsl_api_key:
            _logger.critical("HSL API key is missing. Please configure it in config.json or secrets.txt")
            return 1
        try:
            stop_id = asyncio.run(lookup_stop_code(config, args.lookup))
        except StopLookupError as exc:
            _logger.critical("Error looking up stop: %s", exc)
            return 1
        print(f"Resolved code {args.lookup} to GTFS stop id: {stop_id}")
        return 0

    try:
        asyncio.run(serve(config, store))
    except KeyboardInterrupt:
        _logger.info("Interrupted, shutting down")
    return 0


if __name__ == "__main__":
    sys.exit(main())
