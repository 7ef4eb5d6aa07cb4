"""Cloudflare zone provisioning for newly delegated domains."""

from zonekeeper.provisioning.cloudflare import CloudflareClient, ProviderError
from zonekeeper.provisioning.provisioner import ZoneProvisioner
from zonekeeper.provisioning.records import (
    InvalidRecordError,
    RecordSetError,
    RecordSpec,
    read_record_table,
)

__all__ = [
    "CloudflareClient",
    "ProviderError",
    "ZoneProvisioner",
    "InvalidRecordError",
    "RecordSetError",
    "RecordSpec",
    "read_record_table",
]
