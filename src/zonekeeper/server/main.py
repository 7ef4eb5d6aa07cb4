"""Zonekeeper server - HTTP listener plus reconciliation loops."""

from __future__ import annotations

import asyncio
import contextlib

import structlog
from aiohttp import web

from zonekeeper.core.config import ZonekeeperConfig
from zonekeeper.domains.reconcile import start_reconciliation
from zonekeeper.domains.registry import DomainRegistry
from zonekeeper.domains.storage import ActiveDomainStore, NameListStore
from zonekeeper.domains.verification import NameserverVerifier
from zonekeeper.provisioning.cloudflare import CloudflareClient
from zonekeeper.provisioning.provisioner import ZoneProvisioner
from zonekeeper.server.app import create_app

logger = structlog.get_logger()


def parse_bind(bind: str) -> tuple[str, int]:
    """Parse bind address into host and port."""
    if ":" in bind:
        host, port = bind.rsplit(":", 1)
        return host, int(port)
    return "0.0.0.0", int(bind)


class DomainServer:
    """Runs the HTTP surface and both reconciliation loops in one process."""

    def __init__(self, config: ZonekeeperConfig) -> None:
        self.config = config
        self.registry: DomainRegistry | None = None
        self._client: CloudflareClient | None = None
        self._runner: web.AppRunner | None = None
        self._tasks: list[asyncio.Task[None]] = []

    async def start(self) -> None:
        """Load state, bind the listener and start the loops.

        Raises:
            OSError: If the listener cannot be bound.
        """
        config = self.config

        self.registry = await DomainRegistry.load(
            ActiveDomainStore(config.active_path),
            NameListStore(config.pending_path),
            NameListStore(config.removed_path),
        )

        if not config.cloudflare_api_token:
            logger.warning("No Cloudflare API token configured, onboarding will fail")

        self._client = CloudflareClient(
            config.cloudflare_api_token,
            account_id=config.cloudflare_account_id,
            base_url=config.cloudflare_api_url,
            timeout=config.provider_timeout,
        )
        verifier = NameserverVerifier(
            config.expected_nameservers,
            resolver_address=config.resolver_address,
            timeout=config.dns_timeout,
        )
        provisioner = ZoneProvisioner(self._client, config.record_set_path)

        app = create_app(self.registry, config.expected_nameservers)
        self._runner = web.AppRunner(app)
        await self._runner.setup()

        host, port = parse_bind(config.bind)
        site = web.TCPSite(self._runner, host, port)
        await site.start()
        logger.info("HTTP server started", host=host, port=port)

        self._tasks = start_reconciliation(
            self.registry,
            verifier,
            provisioner,
            active_interval=config.active_interval,
            pending_interval=config.pending_interval,
        )

    async def stop(self) -> None:
        """Cancel the loops and close the listener."""
        logger.info("Stopping server...")

        for task in self._tasks:
            task.cancel()
        for task in self._tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._tasks = []

        if self._runner:
            await self._runner.cleanup()
            self._runner = None
        if self._client:
            await self._client.close()
            self._client = None

        logger.info("Server stopped")


async def run_server(config: ZonekeeperConfig) -> None:
    """Run the server until cancelled."""
    server = DomainServer(config)

    try:
        await server.start()
        await asyncio.Event().wait()
    finally:
        await server.stop()
