"""Domain lifecycle tracking.

Domains move through three collections:

- pending: submitted, waiting for the nameserver delegation to appear
- active: onboarded into Cloudflare and re-verified periodically
- removed: previously active domains whose delegation was lost

Usage:
    from zonekeeper.domains import DomainRegistry, NameserverVerifier

    registry = await DomainRegistry.load(active_store, pending_store, removed_store)
    verifier = NameserverVerifier(["ian.ns.cloudflare.com", "vera.ns.cloudflare.com"])

    await SubmissionGateway(registry).submit("example.com")
    await registry.reconcile_pending_once(verifier.verify, provisioner.provision)
"""

from zonekeeper.domains.gateway import InvalidSubmissionError, SubmissionGateway
from zonekeeper.domains.reconcile import run_active_loop, run_pending_loop, start_reconciliation
from zonekeeper.domains.registry import ActivePassResult, DomainRegistry, PendingPassResult
from zonekeeper.domains.storage import ActiveDomainStore, DomainRecord, NameListStore
from zonekeeper.domains.verification import NameserverVerifier, nameservers_match

__all__ = [
    "DomainRegistry",
    "ActivePassResult",
    "PendingPassResult",
    "DomainRecord",
    "ActiveDomainStore",
    "NameListStore",
    "NameserverVerifier",
    "nameservers_match",
    "SubmissionGateway",
    "InvalidSubmissionError",
    "run_active_loop",
    "run_pending_loop",
    "start_reconciliation",
]
