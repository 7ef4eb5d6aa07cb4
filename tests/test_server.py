"""Tests for the HTTP status and submission surface."""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

import pytest
from aiohttp import test_utils

from zonekeeper.domains import ActiveDomainStore, DomainRecord, DomainRegistry, NameListStore
from zonekeeper.server.app import create_app
from zonekeeper.server.main import parse_bind
from zonekeeper.server.pages import render_status_page, render_submit_page

EXPECTED = ["ian.ns.cloudflare.com", "vera.ns.cloudflare.com"]


async def make_registry(tmp_path: Path) -> DomainRegistry:
    return await DomainRegistry.load(
        ActiveDomainStore(tmp_path / "domains.json"),
        NameListStore(tmp_path / "pending_domains.txt"),
        NameListStore(tmp_path / "removed_domains.txt"),
    )


def client_for(registry: DomainRegistry) -> test_utils.TestClient:
    return test_utils.TestClient(test_utils.TestServer(create_app(registry, EXPECTED)))


class TestPages:
    """Tests for HTML rendering."""

    def test_status_page_lists_domains(self):
        checked = datetime(2024, 1, 15, 10, 30, 0, tzinfo=UTC)
        html = render_status_page(
            [DomainRecord("active.example", True, checked)],
            ["pending.example"],
        )

        assert "active.example - Nameservers Correct: true" in html
        assert "2024-01-15T10:30:00+00:00" in html
        assert "<li>pending.example</li>" in html
        assert 'href="/domains.json"' in html

    def test_status_page_escapes_names(self):
        html = render_status_page([], ["<script>alert(1)</script>"])

        assert "<script>" not in html
        assert "&lt;script&gt;" in html

    def test_submit_page_lists_nameservers(self):
        html = render_submit_page(["ian.ns.cloudflare.com.", "vera.ns.cloudflare.com"])

        assert "<li>ian.ns.cloudflare.com</li>" in html
        assert "<li>vera.ns.cloudflare.com</li>" in html
        assert 'name="domain"' in html


class TestParseBind:
    def test_host_and_port(self):
        assert parse_bind("127.0.0.1:9000") == ("127.0.0.1", 9000)

    def test_port_only(self):
        assert parse_bind("8080") == ("0.0.0.0", 8080)


class TestDomainHandler:
    """Tests for the aiohttp routes."""

    @pytest.mark.asyncio
    async def test_status_page(self, tmp_path: Path):
        registry = await make_registry(tmp_path)
        await registry.enqueue_pending("pending.example")

        async with client_for(registry) as client:
            resp = await client.get("/")
            text = await resp.text()

        assert resp.status == 200
        assert resp.content_type == "text/html"
        assert "pending.example" in text

    @pytest.mark.asyncio
    async def test_submit_form(self, tmp_path: Path):
        registry = await make_registry(tmp_path)

        async with client_for(registry) as client:
            resp = await client.get("/submit")
            text = await resp.text()

        assert resp.status == 200
        assert "ian.ns.cloudflare.com" in text
        assert '<form method="POST">' in text

    @pytest.mark.asyncio
    async def test_submit_queues_and_redirects(self, tmp_path: Path):
        registry = await make_registry(tmp_path)

        async with client_for(registry) as client:
            resp = await client.post(
                "/submit", data={"domain": "example.com"}, allow_redirects=False
            )

        assert resp.status == 303
        assert resp.headers["Location"] == "/"
        assert await registry.snapshot_pending() == ["example.com"]
        assert (tmp_path / "pending_domains.txt").read_text() == "example.com\n"

    @pytest.mark.asyncio
    async def test_submit_empty_rejected(self, tmp_path: Path):
        registry = await make_registry(tmp_path)

        async with client_for(registry) as client:
            resp = await client.post("/submit", data={"domain": ""}, allow_redirects=False)
            text = await resp.text()

        assert resp.status == 400
        assert "Domain is required" in text
        assert await registry.snapshot_pending() == []

    @pytest.mark.asyncio
    async def test_submit_embedded_newline_rejected(self, tmp_path: Path):
        registry = await make_registry(tmp_path)

        async with client_for(registry) as client:
            resp = await client.post(
                "/submit", data={"domain": "a.com\nb.com"}, allow_redirects=False
            )
            text = await resp.text()

        assert resp.status == 400
        assert "whitespace" in text
        assert await registry.snapshot_pending() == []
        assert not (tmp_path / "pending_domains.txt").exists()

    @pytest.mark.asyncio
    async def test_submit_missing_field_rejected(self, tmp_path: Path):
        registry = await make_registry(tmp_path)

        async with client_for(registry) as client:
            resp = await client.post("/submit", data={}, allow_redirects=False)

        assert resp.status == 400
        assert await registry.snapshot_pending() == []

    @pytest.mark.asyncio
    async def test_domains_json(self, tmp_path: Path):
        checked = datetime(2024, 1, 15, 10, 30, 0, tzinfo=UTC)
        await ActiveDomainStore(tmp_path / "domains.json").save(
            [DomainRecord("example.com", True, checked)]
        )
        registry = await make_registry(tmp_path)
        await registry.enqueue_pending("pending.example")

        async with client_for(registry) as client:
            resp = await client.get("/domains.json")
            data = await resp.json()

        assert resp.status == 200
        assert data == [
            {
                "name": "example.com",
                "nameservers_correct": True,
                "last_checked": "2024-01-15T10:30:00+00:00",
            }
        ]

    @pytest.mark.asyncio
    async def test_health(self, tmp_path: Path):
        registry = await make_registry(tmp_path)

        async with client_for(registry) as client:
            resp = await client.get("/health")
            data = await resp.json()

        assert data == {"status": "healthy"}
