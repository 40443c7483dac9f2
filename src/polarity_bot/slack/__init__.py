"""Slack transport and event handlers."""

from polarity_bot.slack.messenger import DetailViews, Messenger, SendFn, ViewHandle

__all__ = [
    "DetailViews",
    "Messenger",
    "SendFn",
    "ViewHandle",
]
