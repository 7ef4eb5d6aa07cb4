"""HTTP handlers for domain submission and status."""

from __future__ import annotations

from collections.abc import Sequence

import structlog
from aiohttp import web

from zonekeeper.domains.gateway import InvalidSubmissionError, SubmissionGateway
from zonekeeper.domains.registry import DomainRegistry
from zonekeeper.server.pages import render_status_page, render_submit_page

logger = structlog.get_logger()


class DomainHandler:
    """Handles HTTP requests for the domain service.

    Routes:
        GET  /              - Status page (active and pending domains)
        GET  /submit        - Submission form
        POST /submit        - Queue a domain, redirect to /
        GET  /domains.json  - Active domains as JSON
        GET  /health        - Liveness check
    """

    def __init__(self, registry: DomainRegistry, nameservers: Sequence[str]) -> None:
        """Initialize the handler.

        Args:
            registry: Domain registry to read and submit to.
            nameservers: Nameservers shown on the submission form.
        """
        self.registry = registry
        self.gateway = SubmissionGateway(registry)
        self.nameservers = list(nameservers)

    def register_routes(self, app: web.Application) -> None:
        """Register routes on an aiohttp application."""
        app.router.add_get("/", self.handle_status)
        app.router.add_get("/submit", self.handle_submit_form)
        app.router.add_post("/submit", self.handle_submit)
        app.router.add_get("/domains.json", self.handle_domains_json)
        app.router.add_get("/health", self.handle_health)

    async def handle_status(self, request: web.Request) -> web.Response:
        active = await self.registry.snapshot_active()
        pending = await self.registry.snapshot_pending()
        return web.Response(
            text=render_status_page(active, pending),
            content_type="text/html",
        )

    async def handle_submit_form(self, request: web.Request) -> web.Response:
        return web.Response(
            text=render_submit_page(self.nameservers),
            content_type="text/html",
        )

    async def handle_submit(self, request: web.Request) -> web.Response:
        """Queue the submitted domain and redirect to the status page."""
        try:
            form = await request.post()
        except ValueError:
            return web.Response(text="Error parsing form", status=400)

        domain = form.get("domain")
        try:
            await self.gateway.submit(domain if isinstance(domain, str) else None)
        except InvalidSubmissionError as e:
            return web.Response(text=str(e), status=400)

        raise web.HTTPSeeOther(location="/")

    async def handle_domains_json(self, request: web.Request) -> web.Response:
        active = await self.registry.snapshot_active()
        return web.json_response([record.to_dict() for record in active])

    async def handle_health(self, request: web.Request) -> web.Response:
        return web.json_response({"status": "healthy"})


def create_app(registry: DomainRegistry, nameservers: Sequence[str]) -> web.Application:
    """Build the aiohttp application serving the domain routes."""
    app = web.Application()
    DomainHandler(registry, nameservers).register_routes(app)
    return app
