"""Fan a search out to every running integration and render what comes back."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from polarity_bot.api.base import LookupClient
from polarity_bot.data import Entity, Integration, LookupResponse
from polarity_bot.errors import LookupTimeoutError
from polarity_bot.integrations import IntegrationRegistry
from polarity_bot.payload_cache import PayloadCache
from polarity_bot.render.blocks import (
    Block,
    divider,
    error_blocks,
    limit_blocks,
    result_blocks,
    section,
)
from polarity_bot.render.chunking import DEFAULT_LIMITS, ChunkLimits, paginate, truncate
from polarity_bot.render.progress import ProgressBar
from polarity_bot.results import EntityGrouper, enrich_all, group_results
from polarity_bot.slack.messenger import SendFn

logger = logging.getLogger(__name__)

USAGE_NOTICE = "Please provide search text after the command, e.g., `/polarity 8.8.8.8`"
NO_INTEGRATIONS_NOTICE = "No integrations are currently configured for the Polarity Bot."
NO_ENTITIES_NOTICE = "No entities found in the provided text."
NO_RESULTS_NOTICE = "No integrations returned results for the searched entities."
COMPLETED_NOTICE = "All integration lookups completed – results above."

DEFAULT_LOOKUP_TIMEOUT = 120.0
DEFAULT_MAX_MESSAGE_BLOCKS = 50
DEFAULT_PROGRESS_WIDTH = 40


@dataclass(frozen=True)
class LookupOutcome:
    """How one integration's lookup settled: a response or an error."""

    integration: Integration
    response: LookupResponse | None = None
    error: Exception | None = None


class LookupCoordinator:
    """Runs one search against every integration in the registry.

    Flow:
    1. Parse the search text into entities once
    2. Start one lookup per integration, all concurrently
    3. Advance the progress bar as each lookup settles
    4. Render results: streamed per integration for a single entity value,
       or grouped into one consolidated message for several

    A failing or timed-out integration is reported as its own error message
    and never affects the others.

    Args:
        client: Polarity API client.
        registry: Running integrations; read once per search.
        cache: Store for payloads too large for a button value.
        limits: Fragment ceilings for rendered output.
        max_message_blocks: Blocks per Slack message before paginating.
        lookup_timeout: Per-integration deadline in seconds, None for no limit.
        progress_width: Cells in the progress bar.
    """

    def __init__(
        self,
        client: LookupClient,
        registry: IntegrationRegistry,
        cache: PayloadCache,
        *,
        limits: ChunkLimits = DEFAULT_LIMITS,
        max_message_blocks: int = DEFAULT_MAX_MESSAGE_BLOCKS,
        lookup_timeout: float | None = DEFAULT_LOOKUP_TIMEOUT,
        progress_width: int = DEFAULT_PROGRESS_WIDTH,
    ) -> None:
        self._client = client
        self._registry = registry
        self._cache = cache
        self._limits = limits
        self._max_message_blocks = max_message_blocks
        self._lookup_timeout = lookup_timeout
        self._progress_width = progress_width

    async def run(self, text: str, send: SendFn, *, user_id: str | None = None) -> None:
        """Handle one search request end to end.

        Args:
            text: Raw search text typed by the user.
            send: Channel-bound send helper.
            user_id: Requesting user, recipient of ephemeral notices.
        """
        search_text = (text or "").strip()
        if not search_text:
            await send(USAGE_NOTICE, ephemeral=True, user_id=user_id)
            return

        integrations = self._registry.list()
        if not integrations:
            await send(NO_INTEGRATIONS_NOTICE, ephemeral=True, user_id=user_id)
            return

        progress = ProgressBar(
            send, "Parsing search text", len(integrations), width=self._progress_width
        )
        await progress.update(0)

        try:
            entities = await self._client.parse_entities(search_text)
            logger.debug("Parsed entities: %s", entities)
            await progress.set_label(f"Searching {len(integrations)} integrations")

            if not entities:
                await send(NO_ENTITIES_NOTICE)
                return

            if len({e.value for e in entities}) > 1:
                logger.debug("Responding for multiple entities")
                await self.respond_grouped(send, entities, integrations, progress)
            else:
                logger.debug("Responding for single entity")
                await self.respond_single(send, entities, integrations, progress)
        except Exception as e:
            logger.exception("Polarity lookup failed")
            await send(truncate(f":warning: Error: {e}", self._limits.max_fragment_chars))
        finally:
            try:
                await progress.destroy()
            except Exception:
                logger.warning("Failed to remove progress bar", exc_info=True)

    async def respond_single(
        self,
        send: SendFn,
        entities: list[Entity],
        integrations: list[Integration],
        progress: ProgressBar,
    ) -> None:
        """Stream one message per integration that found something.

        Only the first message with data carries the entity header. Errors are
        posted as soon as they happen.
        """
        title_sent = False

        async def on_settled(outcome: LookupOutcome) -> None:
            nonlocal title_sent
            label = outcome.integration.label
            if outcome.error is not None:
                await self._send_blocks(
                    send,
                    truncate(
                        f":warning: {label} lookup failed – {outcome.error}",
                        self._limits.max_fragment_chars,
                    ),
                    error_blocks(label, outcome.error, self._cache, self._limits),
                )
                return

            response = outcome.response or LookupResponse()
            groups = group_results(enrich_all(list(response.results), outcome.integration))
            if not groups:
                return

            include_title = not title_sent
            blocks = result_blocks(
                groups, self._cache, include_title=include_title, limits=self._limits
            )
            await self._send_blocks(send, f"Polarity results – {label}", blocks)
            if include_title:
                title_sent = True

        await self.fan_out(entities, integrations, progress, self._isolated(send, on_settled))
        await send(COMPLETED_NOTICE)

    async def respond_grouped(
        self,
        send: SendFn,
        entities: list[Entity],
        integrations: list[Integration],
        progress: ProgressBar,
    ) -> None:
        """Collect every integration's results, then post them grouped by entity.

        Errors are gathered into a section after the results.
        """
        grouper = EntityGrouper(entities, integrations)
        failures: list[tuple[Integration, Exception]] = []

        async def on_settled(outcome: LookupOutcome) -> None:
            if outcome.error is not None:
                failures.append((outcome.integration, outcome.error))
                return
            grouper.add_response(outcome.integration, outcome.response or LookupResponse())

        await self.fan_out(entities, integrations, progress, self._isolated(send, on_settled))

        blocks = result_blocks(
            grouper.groups(), self._cache, include_title=True, limits=self._limits
        )
        if not blocks:
            blocks = [section(NO_RESULTS_NOTICE)]

        order = {integration.id: i for i, integration in enumerate(integrations)}
        failures.sort(key=lambda failure: order[failure[0].id])
        if failures:
            blocks.append(divider())
            for integration, error in failures:
                blocks.extend(error_blocks(integration.label, error, self._cache, self._limits))

        await self._send_blocks(send, "Polarity results", blocks)

    async def fan_out(
        self,
        entities: list[Entity],
        integrations: list[Integration],
        progress: ProgressBar,
        on_settled: Callable[[LookupOutcome], Awaitable[None]],
    ) -> list[LookupOutcome]:
        """Look ``entities`` up on every integration concurrently.

        ``on_settled`` runs once per integration as its lookup finishes, in
        completion order. Each settled lookup advances ``progress`` by one.

        Returns:
            One outcome per integration, in the order of ``integrations``.
        """
        completed = 0

        async def run_one(integration: Integration) -> LookupOutcome:
            nonlocal completed
            try:
                response = await self._lookup(entities, integration)
                outcome = LookupOutcome(integration, response=response)
            except Exception as e:
                logger.error("Lookup failed for integration %s: %s", integration.id, e)
                outcome = LookupOutcome(integration, error=e)

            try:
                await on_settled(outcome)
            except Exception:
                logger.exception("Failed to handle result of integration %s", integration.id)

            completed += 1
            try:
                await progress.update(completed)
            except Exception:
                logger.warning("Failed to update progress bar", exc_info=True)
            return outcome

        return list(await asyncio.gather(*(run_one(i) for i in integrations)))

    def _isolated(
        self,
        send: SendFn,
        on_settled: Callable[[LookupOutcome], Awaitable[None]],
    ) -> Callable[[LookupOutcome], Awaitable[None]]:
        """Wrap ``on_settled`` so a failure is reported as a plain warning.

        The warning names the integration and never reaches the other lookups.
        """

        async def guarded(outcome: LookupOutcome) -> None:
            try:
                await on_settled(outcome)
            except Exception as e:
                label = outcome.integration.label
                logger.exception(
                    "Failed to post results for integration %s", outcome.integration.id
                )
                await send(
                    truncate(
                        f":warning: {label} results could not be displayed – {e}",
                        self._limits.max_fragment_chars,
                    )
                )

        return guarded

    async def _lookup(self, entities: list[Entity], integration: Integration) -> LookupResponse:
        call = self._client.lookup(entities, integration.id)
        if self._lookup_timeout is None:
            return await call
        try:
            return await asyncio.wait_for(call, self._lookup_timeout)
        except TimeoutError:
            raise LookupTimeoutError(integration.id, self._lookup_timeout) from None

    async def _send_blocks(self, send: SendFn, text: str, blocks: list[Block]) -> None:
        """Cap ``blocks`` and post them, spread over as many messages as needed."""
        for page in paginate(limit_blocks(blocks, self._limits), self._max_message_blocks):
            await send(text, page)
