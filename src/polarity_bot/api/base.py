from typing import Any, Protocol

from polarity_bot.data import Entity, LookupResponse


class LookupClient(Protocol):
    """Interface for the remote entity-parsing and lookup API."""

    async def parse_entities(self, text: str) -> list[Entity]:
        """Extract entities from free text.

        Args:
            text: Arbitrary user text that may contain IPs, domains, hashes, ...

        Returns:
            Parsed entities in the order the server returned them.
        """
        ...

    async def lookup(self, entities: list[Entity], integration_id: str) -> LookupResponse:
        """Look up already-parsed entities against one integration.

        Args:
            entities: Entities to search. An empty list returns an empty response.
            integration_id: Integration to query.

        Returns:
            The entities the integration searched and its results.
        """
        ...

    async def lookup_text(self, text: str, integration_id: str) -> LookupResponse:
        """Parse ``text`` and look the resulting entities up on one integration."""
        ...

    async def get_running_integrations(self) -> list[dict[str, Any]]:
        """Fetch raw records for every integration in the running state."""
        ...
