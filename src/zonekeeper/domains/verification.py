"""DNS delegation verification.

A domain is considered correctly delegated when its NS record set, as seen
by the configured resolver, is exactly the expected list of nameservers in
the expected order:

    example.com  NS  ian.ns.cloudflare.com.
    example.com  NS  vera.ns.cloudflare.com.

Lookup failures (timeouts, NXDOMAIN, malformed answers) are reported as a
failed verification rather than raised.
"""

from __future__ import annotations

import asyncio
import sys
from collections.abc import Iterable, Sequence
from typing import Any

import aiodns
import structlog

from zonekeeper.core.config import DEFAULT_NAMESERVERS

logger = structlog.get_logger()


def normalize_host(host: str) -> str:
    """Normalize a host name for comparison (no trailing dot, lower case)."""
    return host.rstrip(".").lower()


def _nameserver_hosts(result: Any) -> list[str]:
    """Extract NS target host names from a resolver answer, in answer order."""
    records: Iterable[Any] = getattr(result, "answer", result) or []
    hosts = []
    for record in records:
        data = getattr(record, "data", record)
        host = getattr(data, "nsdname", None) or getattr(data, "host", None)
        if host:
            hosts.append(str(host))
    return hosts


def nameservers_match(actual: Sequence[str], expected: Sequence[str]) -> bool:
    """Ordered comparison of two nameserver lists."""
    if len(actual) != len(expected):
        return False
    return all(
        normalize_host(got) == normalize_host(want)
        for got, want in zip(actual, expected, strict=True)
    )


class NameserverVerifier:
    """Verifies that domains delegate to the expected nameservers.

    Safe to call concurrently and repeatedly; holds no state besides the
    lazily created resolver.
    """

    def __init__(
        self,
        expected_nameservers: Sequence[str] | None = None,
        resolver_address: str = "1.1.1.1",
        timeout: float = 5.0,
    ) -> None:
        """Initialize nameserver verifier.

        Args:
            expected_nameservers: Nameservers a domain must delegate to, in order.
            resolver_address: Resolver used for NS lookups.
            timeout: Per-query timeout in seconds.
        """
        self.expected_nameservers = list(expected_nameservers or DEFAULT_NAMESERVERS)
        self.resolver_address = resolver_address
        self.timeout = timeout
        self._resolver: aiodns.DNSResolver | None = None

    def _get_resolver(self) -> aiodns.DNSResolver:
        """Get or create DNS resolver with proper event loop handling."""
        if self._resolver is None:
            kwargs: dict[str, Any] = {
                "nameservers": [self.resolver_address],
                "timeout": self.timeout,
            }
            if sys.platform == "win32":
                try:
                    kwargs["loop"] = asyncio.get_running_loop()
                except RuntimeError:
                    kwargs["loop"] = asyncio.new_event_loop()
            self._resolver = aiodns.DNSResolver(**kwargs)
        return self._resolver

    async def lookup(self, domain: str) -> list[str] | None:
        """Look up the NS record set for a domain.

        Args:
            domain: The domain to query.

        Returns:
            The nameserver host names in answer order, or None if the lookup failed.
        """
        resolver = self._get_resolver()
        try:
            result = await resolver.query_dns(domain, "NS")
        except aiodns.error.DNSError as e:
            logger.debug("NS lookup failed", domain=domain, error=str(e))
            return None
        except Exception as e:
            logger.warning("NS lookup error", domain=domain, error=str(e))
            return None
        return _nameserver_hosts(result)

    async def verify(self, domain: str) -> bool:
        """Check whether a domain delegates to exactly the expected nameservers.

        Args:
            domain: The domain to verify.

        Returns:
            True if the NS set matches the expected list position by position.
        """
        actual = await self.lookup(domain)
        if actual is None:
            return False

        matched = nameservers_match(actual, self.expected_nameservers)
        if not matched:
            logger.debug(
                "Nameserver mismatch",
                domain=domain,
                actual=actual,
                expected=self.expected_nameservers,
            )
        return matched
