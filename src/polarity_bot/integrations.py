"""In-memory registry of running Polarity integrations."""

import logging
from types import MappingProxyType

from polarity_bot.api.base import LookupClient
from polarity_bot.data import Integration

logger = logging.getLogger(__name__)


class IntegrationRegistry:
    """Snapshot of the integrations currently running on the Polarity server.

    ``load`` builds a brand-new mapping and swaps the reference, so a query
    that called ``list`` earlier keeps its own consistent view while a refresh
    is in flight. A refresh that returns nothing leaves the registry empty.

    Args:
        client: API client used to fetch running integrations.
    """

    def __init__(self, client: LookupClient) -> None:
        self._client = client
        self._integrations: MappingProxyType[str, Integration] = MappingProxyType({})

    async def load(self) -> None:
        """Populate or replace the registry from the Polarity API."""
        records = await self._client.get_running_integrations()
        snapshot: dict[str, Integration] = {}
        for record in records:
            integration = Integration.from_api(record)
            snapshot[integration.id] = integration
        self._integrations = MappingProxyType(snapshot)
        logger.info("Loaded %d running integrations", len(snapshot))

    def get(self, integration_id: str) -> Integration | None:
        return self._integrations.get(integration_id)

    def list(self) -> list[Integration]:
        """All integrations in registry order."""
        return list(self._integrations.values())
