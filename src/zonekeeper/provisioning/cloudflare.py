"""Minimal Cloudflare v4 API client.

Only the two calls needed to onboard a domain are implemented: zone creation
and DNS record creation. Every failure, whether transport, HTTP status, or an
unsuccessful API envelope, surfaces as ProviderError.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from zonekeeper.provisioning.records import RecordSpec

logger = structlog.get_logger()

DEFAULT_API_URL = "https://api.cloudflare.com/client/v4"


class ProviderError(Exception):
    """A Cloudflare API call failed."""


class CloudflareClient:
    """Async Cloudflare API client authenticated with an API token.

    Usage:
        async with CloudflareClient(token) as client:
            zone_id = await client.create_zone("example.com")
            await client.create_dns_record(zone_id, record)
    """

    def __init__(
        self,
        api_token: str | None,
        account_id: str | None = None,
        base_url: str = DEFAULT_API_URL,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            api_token: Cloudflare API token.
            account_id: Account that should own created zones.
            base_url: API base URL.
            timeout: Timeout in seconds for each API call.
            transport: Optional httpx transport (used by tests).
        """
        self.account_id = account_id
        headers = {"Content-Type": "application/json"}
        if api_token:
            headers["Authorization"] = f"Bearer {api_token}"
        self._http = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    async def __aenter__(self) -> CloudflareClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def close(self) -> None:
        await self._http.aclose()

    async def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            response = await self._http.post(path, json=payload)
        except httpx.HTTPError as e:
            raise ProviderError(f"POST {path} failed: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        if response.is_error or not body.get("success", False):
            errors = body.get("errors") or response.text
            raise ProviderError(f"POST {path} returned {response.status_code}: {errors}")

        result = body.get("result")
        return result if isinstance(result, dict) else {}

    async def create_zone(self, name: str) -> str:
        """Create a zone and return its ID.

        Raises:
            ProviderError: If the zone could not be created.
        """
        payload: dict[str, Any] = {"name": name, "jump_start": False}
        if self.account_id:
            payload["account"] = {"id": self.account_id}

        result = await self._post("/zones", payload)
        zone_id = result.get("id")
        if not zone_id:
            raise ProviderError(f"zone creation for {name} returned no zone id")

        logger.info("Zone created", zone=result.get("name", name), zone_id=zone_id)
        return zone_id

    async def create_dns_record(self, zone_id: str, record: RecordSpec) -> str | None:
        """Create a DNS record in a zone and return the record ID.

        Raises:
            ProviderError: If the record could not be created.
        """
        result = await self._post(f"/zones/{zone_id}/dns_records", record.to_payload())
        logger.info(
            "DNS record created",
            zone_id=zone_id,
            type=record.type,
            name=record.name,
            content=record.content,
        )
        return result.get("id")
