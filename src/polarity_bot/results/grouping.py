"""Group lookup results from many integrations by the entity they describe."""

from collections.abc import Iterable

from polarity_bot.data import (
    EnrichedResult,
    Entity,
    EntityGroup,
    Integration,
    LookupResponse,
)
from polarity_bot.results.normalize import enrich_all


class EntityGrouper:
    """Accumulates enriched results keyed by entity identity.

    Results may arrive in any order. Group order is fixed by the order of
    ``entities`` (the parse order); entities not seeded that way follow in
    first-seen order. Inside a group results are ordered by the position of
    their integration in ``integrations``, so the final output does not
    depend on which lookup finished first.

    Args:
        entities: Entities in parse order, used to seed group order.
        integrations: Integrations in registry order, used to order results.
    """

    def __init__(
        self,
        entities: Iterable[Entity] = (),
        integrations: Iterable[Integration] = (),
    ) -> None:
        self._groups: dict[tuple[str, str], EntityGroup] = {}
        for entity in entities:
            self._groups.setdefault(entity.key, EntityGroup(entity=entity))
        self._rank = {integration.id: i for i, integration in enumerate(integrations)}

    def add(self, result: EnrichedResult) -> None:
        """Add one result to its entity's group.

        A placeholder (``data is None``) is ignored when the same integration
        already contributed to the group; a real result replaces an earlier
        placeholder from that integration.
        """
        group = self._groups.get(result.entity.key)
        if group is None:
            group = self._groups[result.entity.key] = EntityGroup(entity=result.entity)

        same_source = [
            i for i, r in enumerate(group.results) if r.integration.id == result.integration.id
        ]
        if result.data is None:
            if same_source:
                return
        else:
            for i in reversed(same_source):
                if group.results[i].data is None:
                    del group.results[i]
        group.results.append(result)

    def add_all(self, results: Iterable[EnrichedResult]) -> None:
        for result in results:
            self.add(result)

    def add_response(self, integration: Integration, response: LookupResponse) -> None:
        """Add an integration's results plus placeholders for what it missed.

        Every entity in ``response.searched_entities`` with no matching result
        gets a ``data=None`` placeholder attributed to ``integration``.
        """
        self.add_all(enrich_all(list(response.results), integration))

        found = {r.entity.value for r in response.results}
        for entity in response.searched_entities:
            if entity.value not in found:
                self.add(EnrichedResult(entity=entity, data=None, integration=integration))

    def groups(self) -> list[EntityGroup]:
        """Finalized groups, dropping any where no integration found data."""
        finalized: list[EntityGroup] = []
        for group in self._groups.values():
            if not group.has_data:
                continue
            ordered = sorted(
                group.results,
                key=lambda r: self._rank.get(r.integration.id, len(self._rank)),
            )
            finalized.append(EntityGroup(entity=group.entity, results=ordered))
        return finalized


def group_results(
    results: Iterable[EnrichedResult],
    integrations: Iterable[Integration] = (),
) -> list[EntityGroup]:
    """Group a flat list of results in one pass."""
    grouper = EntityGrouper(integrations=integrations)
    grouper.add_all(results)
    return grouper.groups()
