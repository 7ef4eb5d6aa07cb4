"""Entry point for new domain submissions."""

from __future__ import annotations

from zonekeeper.domains.registry import DomainRegistry


class InvalidSubmissionError(ValueError):
    """The submitted domain name was rejected."""


class SubmissionGateway:
    """Accepts domain names and queues them for onboarding.

    Submissions are neither verified nor deduplicated here; the pending
    reconciliation pass decides when a name graduates.
    """

    def __init__(self, registry: DomainRegistry) -> None:
        self.registry = registry

    async def submit(self, name: str | None) -> str:
        """Queue a domain name.

        Args:
            name: The submitted domain. Surrounding whitespace is ignored,
                case is kept as submitted.

        Returns:
            The name as queued.

        Raises:
            InvalidSubmissionError: If the name is empty or contains
                whitespace.
        """
        name = (name or "").strip()
        if not name:
            raise InvalidSubmissionError("Domain is required")
        if any(char.isspace() for char in name):
            raise InvalidSubmissionError("Domain must not contain whitespace")

        await self.registry.enqueue_pending(name)
        return name
