"""Slack command, event and action handlers."""

import logging
from typing import Any

from slack_bolt.context.ack.async_ack import AsyncAck
from slack_sdk.errors import SlackApiError
from slack_sdk.web.async_client import AsyncWebClient

from polarity_bot.api.base import LookupClient
from polarity_bot.integrations import IntegrationRegistry
from polarity_bot.payload_cache import EXPIRED_NOTICE, PayloadCache, decode_button_value
from polarity_bot.pipeline import LookupCoordinator
from polarity_bot.render.blocks import (
    MODAL_TITLE_DETAILS,
    MODAL_TITLE_ERROR,
    Block,
    app_home_blocks,
    detail_view_blocks,
    json_code_block,
    loading_blocks,
    section,
)
from polarity_bot.render.chunking import DEFAULT_LIMITS, EMPTY_TEXT, ChunkLimits, chunk_text
from polarity_bot.results import reduce_object
from polarity_bot.slack.messenger import DetailViews, Messenger

logger = logging.getLogger(__name__)

# Errors from conversations.join that are expected and harmless
IGNORED_JOIN_ERRORS = frozenset({"already_in_channel", "method_not_supported_for_dm"})

FETCH_FAILED_TEXT = ":warning: Failed to fetch details"


class BotHandlers:
    """Route handlers wired into the Bolt app.

    Args:
        client: Polarity API client, used to re-fetch details on demand.
        registry: Running integrations.
        cache: Store holding payloads deferred out of button values.
        coordinator: Runs searches.
        limits: Fragment ceilings for modal content.
    """

    def __init__(
        self,
        client: LookupClient,
        registry: IntegrationRegistry,
        cache: PayloadCache,
        coordinator: LookupCoordinator,
        *,
        limits: ChunkLimits = DEFAULT_LIMITS,
    ) -> None:
        self._client = client
        self._registry = registry
        self._cache = cache
        self._coordinator = coordinator
        self._limits = limits

    async def handle_command(
        self,
        ack: AsyncAck,
        command: dict[str, Any],
        client: AsyncWebClient,
    ) -> None:
        """Slash command: search every integration for the entities in the text.

        Responses to a slash command cannot be replaced later, so everything
        is posted as regular channel messages.
        """
        await ack()
        channel_id = command["channel_id"]
        await self._join_channel(client, channel_id)
        await self._coordinator.run(
            command.get("text") or "",
            Messenger(client, channel_id),
            user_id=command.get("user_id"),
        )

    async def handle_app_home_opened(self, event: dict[str, Any], client: AsyncWebClient) -> None:
        user_id = event["user"]
        info = await client.users_info(user=user_id)
        user = info.get("user") or {}
        is_admin = bool(
            user.get("is_admin") or user.get("is_owner") or user.get("is_primary_owner")
        )
        blocks = app_home_blocks(self._registry.list(), is_admin=is_admin)
        await self._publish_home(client, user_id, blocks)

    async def handle_refresh_integrations(
        self,
        ack: AsyncAck,
        body: dict[str, Any],
        client: AsyncWebClient,
    ) -> None:
        """Reload running integrations and republish the admin Home tab."""
        await ack()
        user_id = (body.get("user") or {}).get("id")
        if not user_id:
            logger.error("Unexpected body structure in refresh_integrations action")

        if user_id:
            await self._publish_home(
                client,
                user_id,
                app_home_blocks(
                    self._registry.list(),
                    is_admin=True,
                    refresh_disabled=True,
                    show_refreshing_notice=True,
                ),
            )

        try:
            await self._registry.load()
        except Exception:
            logger.exception("Failed to refresh integrations")

        if user_id:
            await self._publish_home(
                client, user_id, app_home_blocks(self._registry.list(), is_admin=True)
            )

    async def handle_show_details(
        self,
        ack: AsyncAck,
        body: dict[str, Any],
        action: dict[str, Any],
        client: AsyncWebClient,
    ) -> None:
        """Show a result's full details in a modal.

        The trigger id expires about three seconds after the click, so a
        placeholder modal is opened first and filled in after the lookup.
        """
        await ack()
        views = DetailViews(client)
        view = await views.open(body["trigger_id"], MODAL_TITLE_DETAILS, loading_blocks())

        payload = decode_button_value(action.get("value"), self._cache)
        if payload is None:
            heading, text = MODAL_TITLE_DETAILS, EXPIRED_NOTICE
        else:
            heading, text = await self._fetch_details(payload)

        if view is not None:
            await views.update(
                view, MODAL_TITLE_DETAILS, detail_view_blocks(heading, text, self._limits)
            )

    async def handle_show_error_details(
        self,
        ack: AsyncAck,
        body: dict[str, Any],
        action: dict[str, Any],
        client: AsyncWebClient,
    ) -> None:
        """Show the raw metadata of an API error in a modal."""
        await ack()
        payload = decode_button_value(action.get("value"), self._cache)
        if payload is None:
            blocks = [section(EXPIRED_NOTICE)]
        else:
            meta = payload.get("meta", payload)
            blocks = [section(chunk) for chunk in chunk_text(json_code_block(meta), self._limits)]
        await DetailViews(client).open(body["trigger_id"], MODAL_TITLE_ERROR, blocks)

    async def _fetch_details(self, payload: dict[str, Any]) -> tuple[str, str]:
        """Re-run the lookup for one entity on one integration.

        Returns:
            Tuple of (modal heading, details text).
        """
        integration_id = str(payload.get("integrationId", ""))
        entity = payload.get("entity") or {}

        integration = self._registry.get(integration_id)
        if integration and (integration.name or integration.acronym):
            acronym = f" ({integration.acronym})" if integration.acronym else ""
            heading = f"{integration.name}{acronym}"
        else:
            heading = MODAL_TITLE_DETAILS

        text = EMPTY_TEXT
        try:
            response = await self._client.lookup_text(str(entity.get("value", "")), integration_id)
            match = next(
                (
                    r
                    for r in response.results
                    if r.entity.value == entity.get("value") and r.entity.type == entity.get("type")
                ),
                None,
            )
            if match is not None and match.data is not None and match.data.has_details:
                details = reduce_object(match.data.details)
                if details:
                    text = json_code_block(details)
        except Exception:
            logger.exception("Failed to fetch fresh details for integration %s", integration_id)
            text = FETCH_FAILED_TEXT
        return heading, text

    async def _join_channel(self, client: AsyncWebClient, channel_id: str) -> None:
        """Make sure the bot can post in the channel."""
        try:
            await client.conversations_join(channel=channel_id)
        except SlackApiError as e:
            error_code = e.response.get("error") if e.response is not None else None
            if error_code not in IGNORED_JOIN_ERRORS:
                logger.warning("Failed to join channel %s: %s", channel_id, error_code)

    async def _publish_home(
        self,
        client: AsyncWebClient,
        user_id: str,
        blocks: list[Block],
    ) -> None:
        await client.views_publish(user_id=user_id, view={"type": "home", "blocks": blocks})
