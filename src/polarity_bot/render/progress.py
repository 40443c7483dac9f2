"""Edit-in-place progress bar rendered as a Slack message."""

import asyncio
import logging

from polarity_bot.errors import ProgressBarDestroyedError
from polarity_bot.render.blocks import Block, progress_blocks
from polarity_bot.slack.messenger import SendFn

logger = logging.getLogger(__name__)

DEFAULT_WIDTH = 20


class ProgressBar:
    """Progress bar that posts one message and then edits it in place.

    The first ``update`` posts the bar; every later one edits that message.
    Renders run one at a time in the order they were requested: each render
    task waits for the one queued before it. Progress never goes backwards;
    an update at or below the last requested value is dropped, which lets
    callers report completions in whatever order they happen.

    After ``destroy`` the message is erased and every further call raises
    ``ProgressBarDestroyedError``.

    Args:
        send: Channel-bound send helper.
        label: Text shown above the bar.
        total: Units of work to complete. Must be > 0.
        width: Number of cells in the bar.
    """

    def __init__(self, send: SendFn, label: str, total: int, *, width: int = DEFAULT_WIDTH) -> None:
        if total <= 0:
            raise ValueError("`total` must be greater than 0")
        self._send = send
        self._label = label
        self._total = total
        self._width = width
        self._message_ts: str | None = None
        self._tail: asyncio.Task[None] | None = None
        self._last_done: int | None = None
        self._destroyed = False

    @property
    def label(self) -> str:
        return self._label

    @property
    def total(self) -> int:
        return self._total

    @property
    def completed(self) -> int:
        return self._last_done or 0

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    async def update(self, done: int) -> None:
        """Render progress ``done`` out of ``total``.

        Raises:
            ProgressBarDestroyedError: If the bar was destroyed.
            ValueError: If ``done`` is outside ``0..total``.
        """
        self._ensure_live()
        if done < 0 or done > self._total:
            raise ValueError("`done` must be between 0 and total inclusive")
        if self._last_done is not None and done <= self._last_done:
            return
        self._last_done = done
        await self._enqueue(self._label, done)

    async def set_label(self, label: str) -> None:
        """Change the label and repaint at the current progress.

        A bar that is already showing the current progress is not repainted;
        the new label appears with the next advancing update.
        """
        self._ensure_live()
        self._label = label
        await self.update(self.completed)

    async def destroy(self) -> None:
        """Wait for queued renders, then erase the message if one was posted."""
        self._ensure_live()
        self._destroyed = True
        if self._tail is not None:
            await asyncio.wait([self._tail])
        if self._message_ts is None:
            return
        await self._send(" ", [], message_ts=self._message_ts)

    def _ensure_live(self) -> None:
        if self._destroyed:
            raise ProgressBarDestroyedError(
                "ProgressBar instance has been destroyed, create a new one."
            )

    def _enqueue(self, label: str, done: int) -> asyncio.Task[None]:
        text = f"{label} {done}/{self._total}"
        blocks = progress_blocks(label, done, self._total, self._width)
        self._tail = asyncio.ensure_future(self._render(self._tail, text, blocks))
        return self._tail

    async def _render(
        self,
        previous: asyncio.Task[None] | None,
        text: str,
        blocks: list[Block],
    ) -> None:
        if previous is not None:
            # Failures of the previous render are reported to its own caller.
            await asyncio.wait([previous])
        if self._message_ts is None:
            self._message_ts = await self._send(text, blocks)
        else:
            await self._send(text, blocks, message_ts=self._message_ts)
