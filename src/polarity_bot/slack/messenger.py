"""Channel-bound helpers for posting messages and opening modals."""

import logging
from dataclasses import dataclass
from typing import Any, Protocol

from slack_sdk.web.async_client import AsyncWebClient

from polarity_bot.render.blocks import Block, modal_view

logger = logging.getLogger(__name__)


class SendFn(Protocol):
    """Posts a message, or edits one in place when ``message_ts`` is given."""

    async def __call__(
        self,
        text: str,
        blocks: list[Block] | None = None,
        *,
        message_ts: str | None = None,
        ephemeral: bool = False,
        user_id: str | None = None,
    ) -> str: ...


class Messenger:
    """Sends messages to a single channel.

    Args:
        client: Slack web client.
        channel_id: Channel every message is posted to.
    """

    def __init__(self, client: AsyncWebClient, channel_id: str) -> None:
        self._client = client
        self._channel_id = channel_id

    @property
    def channel_id(self) -> str:
        return self._channel_id

    async def __call__(
        self,
        text: str,
        blocks: list[Block] | None = None,
        *,
        message_ts: str | None = None,
        ephemeral: bool = False,
        user_id: str | None = None,
    ) -> str:
        """Send or update a message and return its timestamp handle.

        Args:
            text: Fallback text shown in notifications.
            blocks: Optional Block Kit content.
            message_ts: When set, the existing message is edited in place.
            ephemeral: Post a message only ``user_id`` can see.
            user_id: Recipient of an ephemeral message.

        Raises:
            ValueError: If ``ephemeral`` is set without a ``user_id``.
        """
        if message_ts:
            response = await self._client.chat_update(
                channel=self._channel_id, ts=message_ts, text=text, blocks=blocks
            )
            return str(response["ts"])

        if ephemeral:
            if not user_id:
                raise ValueError("user_id is required when sending an ephemeral message")
            response = await self._client.chat_postEphemeral(
                channel=self._channel_id, user=user_id, text=text, blocks=blocks
            )
            return str(response["message_ts"])

        response = await self._client.chat_postMessage(
            channel=self._channel_id, text=text, blocks=blocks
        )
        return str(response["ts"])


@dataclass(frozen=True)
class ViewHandle:
    """Identifies an open modal for later updates."""

    id: str
    hash: str | None = None


class DetailViews:
    """Opens and updates modal views.

    Trigger ids expire roughly three seconds after Slack issues them, so
    callers should ``open`` a placeholder right away and ``update`` it once
    any slow work is done.
    """

    def __init__(self, client: AsyncWebClient) -> None:
        self._client = client

    async def open(self, trigger_id: str, title: str, blocks: list[Block]) -> ViewHandle | None:
        response = await self._client.views_open(
            trigger_id=trigger_id, view=modal_view(title, blocks)
        )
        view: dict[str, Any] | None = response.get("view")
        if not view or "id" not in view:
            logger.warning("views.open returned no view for trigger %s", trigger_id)
            return None
        return ViewHandle(id=view["id"], hash=view.get("hash"))

    async def update(self, handle: ViewHandle, title: str, blocks: list[Block]) -> None:
        await self._client.views_update(
            view_id=handle.id, hash=handle.hash, view=modal_view(title, blocks)
        )
