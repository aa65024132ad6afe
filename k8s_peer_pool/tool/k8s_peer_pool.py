"""Command line tool for watching the peer list of a workload group."""

import argparse
import asyncio
import logging
import sys
import traceback

from k8s_peer_pool.exceptions import PeerPoolException
from . import watch

_LOGGER = logging.getLogger(__name__)


def _make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Command line utility for inspecting a k8s peer pool.",
    )
    parser.add_argument(
        "--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    )

    subparsers = parser.add_subparsers(dest="command", help="Command", required=True)

    watch.WatchAction.register(subparsers)
    return parser


def main(argv: list[str] | None = None) -> None:
    """k8s-peer-pool command line tool main entry point."""
    parser = _make_parser()
    args = parser.parse_args(argv)

    if args.log_level:
        logging.basicConfig(level=args.log_level)

    action = args.cls()
    try:
        asyncio.run(action.run(**vars(args)))
    except PeerPoolException as err:
        if args.log_level == "DEBUG":
            traceback.print_exc(file=sys.stderr)
        print("k8s-peer-pool error: ", err, file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        _LOGGER.debug("Interrupted, exiting")


if __name__ == "__main__":
    main()
