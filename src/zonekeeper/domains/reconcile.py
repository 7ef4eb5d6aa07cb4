"""Periodic reconciliation of the domain collections.

Two independent loops drive the registry:

- the pending loop onboards newly delegated domains (hourly by default)
- the active loop re-verifies onboarded domains (every three hours by default)

Each loop runs a pass immediately, then sleeps for its interval. A failed
pass is logged and retried on the next cycle.
"""

from __future__ import annotations

import asyncio

import structlog

from zonekeeper.domains.registry import DomainRegistry
from zonekeeper.domains.verification import NameserverVerifier
from zonekeeper.provisioning.provisioner import ZoneProvisioner

logger = structlog.get_logger()


async def run_active_loop(
    registry: DomainRegistry,
    verifier: NameserverVerifier,
    interval: float = 3 * 3600.0,
) -> None:
    """Re-verify active domains forever.

    Args:
        registry: The domain registry.
        verifier: Delegation verifier.
        interval: Seconds between passes.
    """
    logger.info("Starting active reconciliation loop", interval_seconds=interval)

    while True:
        try:
            result = await registry.reconcile_active_once(verifier.verify)
            logger.info(
                "Active pass completed",
                checked=result.checked,
                correct=result.correct,
                removed=len(result.removed),
            )
        except Exception as e:
            logger.error("Active pass error", error=str(e))

        await asyncio.sleep(interval)


async def run_pending_loop(
    registry: DomainRegistry,
    verifier: NameserverVerifier,
    provisioner: ZoneProvisioner,
    interval: float = 3600.0,
) -> None:
    """Onboard pending domains forever.

    Args:
        registry: The domain registry.
        verifier: Delegation verifier.
        provisioner: Zone provisioner used for verified domains.
        interval: Seconds between passes.
    """
    logger.info("Starting pending reconciliation loop", interval_seconds=interval)

    while True:
        try:
            result = await registry.reconcile_pending_once(verifier.verify, provisioner.provision)
            logger.info(
                "Pending pass completed",
                checked=result.checked,
                graduated=len(result.graduated),
                remaining=result.remaining,
            )
        except Exception as e:
            logger.error("Pending pass error", error=str(e))

        await asyncio.sleep(interval)


def start_reconciliation(
    registry: DomainRegistry,
    verifier: NameserverVerifier,
    provisioner: ZoneProvisioner,
    active_interval: float = 3 * 3600.0,
    pending_interval: float = 3600.0,
) -> list[asyncio.Task[None]]:
    """Start both reconciliation loops in the background.

    Returns:
        The two loop tasks (active, pending).
    """
    return [
        asyncio.create_task(
            run_active_loop(registry, verifier, active_interval),
            name="zonekeeper-active-loop",
        ),
        asyncio.create_task(
            run_pending_loop(registry, verifier, provisioner, pending_interval),
            name="zonekeeper-pending-loop",
        ),
    ]
