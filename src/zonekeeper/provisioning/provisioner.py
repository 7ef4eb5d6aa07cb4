"""Zone onboarding.

Onboarding a domain creates its Cloudflare zone and then applies the record
set to it. Zone creation and a readable record set are required; individual
records are best effort.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import structlog

from zonekeeper.provisioning.cloudflare import CloudflareClient, ProviderError
from zonekeeper.provisioning.records import (
    InvalidRecordError,
    RecordSetError,
    RecordSpec,
    read_record_table,
)

logger = structlog.get_logger()


class ZoneProvisioner:
    """Creates a zone for a domain and populates it from the record set file."""

    def __init__(self, client: CloudflareClient, record_set_path: str | Path = "master.zone") -> None:
        self.client = client
        self.record_set_path = Path(record_set_path)

    async def provision(self, domain: str) -> bool:
        """Onboard a domain.

        Args:
            domain: The domain to create a zone for.

        Returns:
            True once the zone exists and every record row has been attempted,
            False if zone creation failed or the record set is unreadable.
        """
        try:
            zone_id = await self.client.create_zone(domain)
        except ProviderError as e:
            logger.error("Zone creation failed", domain=domain, error=str(e))
            return False

        try:
            rows = await asyncio.to_thread(read_record_table, self.record_set_path)
        except RecordSetError as e:
            logger.error("Record set unavailable", domain=domain, error=str(e))
            return False

        created = 0
        for row in rows:
            try:
                record = RecordSpec.from_row(row)
            except InvalidRecordError as e:
                logger.warning("Skipping invalid record", domain=domain, error=str(e))
                continue

            try:
                await self.client.create_dns_record(zone_id, record)
            except ProviderError as e:
                logger.warning(
                    "DNS record creation failed",
                    domain=domain,
                    type=record.type,
                    name=record.name,
                    error=str(e),
                )
                continue
            created += 1

        logger.info("Domain onboarded", domain=domain, zone_id=zone_id, records=created)
        return True
