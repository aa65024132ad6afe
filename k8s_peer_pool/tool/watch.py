"""k8s-peer-pool watch action."""

import asyncio
import logging
import os
from argparse import (
    ArgumentParser,
    BooleanOptionalAction,
    _SubParsersAction as SubParsersAction,
)
from typing import cast

from k8s_peer_pool.client import KubernetesControlPlane
from k8s_peer_pool.config import (
    DEFAULT_PEER_PORT,
    DEFAULT_PEER_SCHEME,
    DEFAULT_SYNC_TIMEOUT,
    PoolConfig,
    WatchMechanism,
)
from k8s_peer_pool.pool import new_pool

from .format import FORMATTERS

_LOGGER = logging.getLogger(__name__)


class WatchAction:
    """Watch a workload group and print its peer list."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "watch",
                help="Print the peer list of a workload group",
                description=(
                    "Watch the pods or endpoints matching a selector and print "
                    "the peer list every time it changes"
                ),
            ),
        )
        args.add_argument(
            "--namespace",
            "-n",
            default=os.environ.get("POD_NAMESPACE", ""),
            help="Namespace to watch, defaults to $POD_NAMESPACE or all namespaces",
        )
        args.add_argument(
            "--selector",
            "-l",
            default=os.environ.get("SELECTOR", ""),
            help="Label selector of the workload group, defaults to $SELECTOR",
        )
        args.add_argument(
            "--mechanism",
            choices=[str(mechanism) for mechanism in WatchMechanism],
            default=str(WatchMechanism.ENDPOINTS),
            help="Watch the published endpoints or the pods directly",
        )
        args.add_argument(
            "--peer-scheme",
            default=DEFAULT_PEER_SCHEME,
            help="Scheme of the peer addresses",
        )
        args.add_argument(
            "--peer-port",
            type=int,
            default=os.environ.get("PEER_PORT", DEFAULT_PEER_PORT),
            help="Port of the peer addresses, defaults to $PEER_PORT or 8080",
        )
        args.add_argument(
            "--sync-timeout",
            type=float,
            default=DEFAULT_SYNC_TIMEOUT,
            help="Seconds to wait for the initial sync",
        )
        args.add_argument(
            "--output",
            "-o",
            choices=list(FORMATTERS),
            default="text",
            help="Output format of the command",
        )
        args.add_argument(
            "--once",
            default=False,
            action=BooleanOptionalAction,
            help="Print the peer list after the initial sync and exit",
        )
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        namespace: str,
        selector: str,
        mechanism: str,
        peer_scheme: str,
        peer_port: int,
        sync_timeout: float,
        output: str,
        once: bool,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        formatter = FORMATTERS[output]()
        updates: asyncio.Queue[list[str]] = asyncio.Queue()
        config = PoolConfig(
            on_update=updates.put_nowait,
            mechanism=mechanism,
            namespace=namespace,
            selector=selector,
            peer_scheme=peer_scheme,
            peer_port=peer_port,
            sync_timeout=sync_timeout,
        )
        _LOGGER.info(
            "Starting k8s peer pool watcher with selector '%s'...", selector
        )
        pool = await new_pool(config, KubernetesControlPlane.from_environment())
        try:
            # Updates published while syncing are folded into the first print
            while not updates.empty():
                updates.get_nowait()
            formatter.print(pool.peers())
            if once:
                return
            while True:
                formatter.print(await updates.get())
        finally:
            await pool.close()
