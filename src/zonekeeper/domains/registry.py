"""Domain registry and lifecycle transitions.

The registry owns three collections:

- pending: submitted names waiting for their delegation to appear
- active: onboarded domains, re-verified periodically
- removed: names that were active and lost their delegation

Each collection has its own lock and its own store. A reconciliation pass
holds the lock of the collection it scans for the whole pass, including the
DNS and provider calls made for each entry. When a pass needs a second
collection it takes locks in the order pending -> active -> removed.

Usage:
    registry = await DomainRegistry.load(active_store, pending_store, removed_store)
    await registry.enqueue_pending("example.com")
    await registry.reconcile_pending_once(verifier.verify, provisioner.provision)
    await registry.reconcile_active_once(verifier.verify)
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

import structlog

from zonekeeper.domains.storage import ActiveDomainStore, DomainRecord, NameListStore

logger = structlog.get_logger()

DomainCheck = Callable[[str], Awaitable[bool]]


@dataclass
class ActivePassResult:
    """Outcome of one active reconciliation pass."""

    checked: int = 0
    correct: int = 0
    removed: list[str] = field(default_factory=list)


@dataclass
class PendingPassResult:
    """Outcome of one pending reconciliation pass."""

    checked: int = 0
    graduated: list[str] = field(default_factory=list)
    remaining: int = 0


class DomainRegistry:
    """Owns the pending, active and removed domain collections.

    Callers only ever receive copies of the collections.
    """

    def __init__(
        self,
        active_store: ActiveDomainStore,
        pending_store: NameListStore,
        removed_store: NameListStore,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize an empty registry.

        Args:
            active_store: Storage for active domain records.
            pending_store: Storage for pending names.
            removed_store: Storage for removed names.
            clock: Source of the current time (defaults to UTC now).
        """
        self.active_store = active_store
        self.pending_store = pending_store
        self.removed_store = removed_store
        self._clock = clock or (lambda: datetime.now(UTC))

        self._active: list[DomainRecord] = []
        self._pending: list[str] = []
        self._removed: list[str] = []

        self._active_lock = asyncio.Lock()
        self._pending_lock = asyncio.Lock()
        self._removed_lock = asyncio.Lock()

    @classmethod
    async def load(
        cls,
        active_store: ActiveDomainStore,
        pending_store: NameListStore,
        removed_store: NameListStore,
        clock: Callable[[], datetime] | None = None,
    ) -> DomainRegistry:
        """Create a registry populated from its stores.

        Missing or unreadable files load as empty collections.
        """
        registry = cls(active_store, pending_store, removed_store, clock=clock)
        registry._active = await active_store.load()
        registry._pending = await pending_store.load()
        registry._removed = await removed_store.load()
        logger.info(
            "Domain registry loaded",
            active=len(registry._active),
            pending=len(registry._pending),
            removed=len(registry._removed),
        )
        return registry

    async def snapshot_active(self) -> list[DomainRecord]:
        """Copies of all active domain records, in collection order."""
        async with self._active_lock:
            return [record.copy() for record in self._active]

    async def snapshot_pending(self) -> list[str]:
        """All pending names, in submission order."""
        async with self._pending_lock:
            return list(self._pending)

    async def snapshot_removed(self) -> list[str]:
        """All removed names, oldest first."""
        async with self._removed_lock:
            return list(self._removed)

    async def enqueue_pending(self, name: str) -> None:
        """Append a name to the pending collection and persist it.

        No deduplication is done; a name submitted twice is checked twice.
        """
        async with self._pending_lock:
            self._pending.append(name)
            await self.pending_store.save(self._pending)
        logger.info("Domain queued", domain=name)

    async def reconcile_active_once(self, verify: DomainCheck) -> ActivePassResult:
        """Re-verify every active domain.

        A domain whose delegation was correct on the previous pass and now
        fails is moved to the removed collection. Every other domain gets its
        flag and check time refreshed; a domain already flagged incorrect is
        kept in the active collection. A check that raises leaves its record
        untouched.

        Args:
            verify: Delegation check for a single domain.

        Returns:
            Counts for the pass and the names that were removed.
        """
        result = ActivePassResult()

        async with self._active_lock:
            evicted: set[int] = set()
            for index, record in enumerate(self._active):
                result.checked += 1
                try:
                    correct = await verify(record.name)
                except Exception as e:
                    logger.error(
                        "Verification error, record unchanged", domain=record.name, error=str(e)
                    )
                    continue

                if not correct and record.nameservers_correct:
                    evicted.add(index)
                    result.removed.append(record.name)
                    logger.warning("Delegation lost", domain=record.name)
                    continue

                if correct:
                    result.correct += 1
                record.nameservers_correct = correct
                record.last_checked = max(record.last_checked, self._clock())

            if result.removed:
                async with self._removed_lock:
                    self._removed.extend(result.removed)
                    await self.removed_store.save(self._removed)

                self._active = [
                    record for index, record in enumerate(self._active) if index not in evicted
                ]

            await self.active_store.save(self._active)

        return result

    async def reconcile_pending_once(
        self,
        verify: DomainCheck,
        provision: DomainCheck,
    ) -> PendingPassResult:
        """Try to onboard every pending domain.

        A pending domain graduates to the active collection once its
        delegation verifies and provisioning succeeds. Domains that fail
        either step, or whose check raises, stay pending for the next pass.

        Args:
            verify: Delegation check for a single domain.
            provision: Onboarding action for a single verified domain.

        Returns:
            Counts for the pass and the names that graduated.
        """
        result = PendingPassResult()

        async with self._pending_lock:
            graduated: set[int] = set()
            for index, name in enumerate(self._pending):
                result.checked += 1
                try:
                    if not await verify(name):
                        continue
                    if not await provision(name):
                        logger.warning("Provisioning failed, will retry", domain=name)
                        continue
                except Exception as e:
                    logger.error("Onboarding error, will retry", domain=name, error=str(e))
                    continue
                graduated.add(index)
                result.graduated.append(name)

            if result.graduated:
                async with self._active_lock:
                    for name in result.graduated:
                        self._active.append(
                            DomainRecord(
                                name=name,
                                nameservers_correct=True,
                                last_checked=self._clock(),
                            )
                        )
                        logger.info("Domain activated", domain=name)
                    await self.active_store.save(self._active)

                self._pending = [
                    name for index, name in enumerate(self._pending) if index not in graduated
                ]

            result.remaining = len(self._pending)
            await self.pending_store.save(self._pending)

        return result
