"""Bolt app wiring and Socket Mode runner."""

import logging
import os
from dataclasses import dataclass

from slack_bolt.adapter.socket_mode.async_handler import AsyncSocketModeHandler
from slack_bolt.async_app import AsyncApp

from polarity_bot.integrations import IntegrationRegistry
from polarity_bot.render.blocks import (
    REFRESH_INTEGRATIONS_ACTION,
    SHOW_DETAILS_ACTION,
    SHOW_ERROR_DETAILS_ACTION,
)
from polarity_bot.slack.handlers import BotHandlers

logger = logging.getLogger(__name__)

BOT_TOKEN_ENV = "POLARITY_SLACK_BOT_TOKEN"
SIGNING_SECRET_ENV = "POLARITY_SLACK_BOT_SIGNING_SECRET"
APP_TOKEN_ENV = "POLARITY_SLACK_BOT_APP_TOKEN"


@dataclass(frozen=True)
class SlackCredentials:
    """Tokens for the Slack app."""

    bot_token: str
    signing_secret: str
    app_token: str

    @classmethod
    def from_env(cls) -> "SlackCredentials":
        """Read all three tokens from the environment.

        Raises:
            ValueError: If any variable is unset or empty.
        """
        values = {}
        for field, env_var in (
            ("bot_token", BOT_TOKEN_ENV),
            ("signing_secret", SIGNING_SECRET_ENV),
            ("app_token", APP_TOKEN_ENV),
        ):
            value = os.environ.get(env_var)
            if not value:
                raise ValueError(f"Slack credentials required. Set {env_var} env var.")
            values[field] = value
        return cls(**values)


def create_app(
    handlers: BotHandlers,
    credentials: SlackCredentials,
    *,
    command: str = "/polarity",
) -> AsyncApp:
    """Create the Bolt app and register every route.

    Args:
        handlers: Route implementations.
        credentials: Slack tokens.
        command: Slash command that starts a search.
    """
    app = AsyncApp(token=credentials.bot_token, signing_secret=credentials.signing_secret)
    app.command(command)(handlers.handle_command)
    app.event("app_home_opened")(handlers.handle_app_home_opened)
    app.action(REFRESH_INTEGRATIONS_ACTION)(handlers.handle_refresh_integrations)
    app.action(SHOW_DETAILS_ACTION)(handlers.handle_show_details)
    app.action(SHOW_ERROR_DETAILS_ACTION)(handlers.handle_show_error_details)
    return app


async def run_socket_mode(
    app: AsyncApp,
    registry: IntegrationRegistry,
    credentials: SlackCredentials,
) -> None:
    """Load integrations, then serve Slack events until cancelled."""
    await registry.load()
    handler = AsyncSocketModeHandler(app, credentials.app_token)
    logger.info("Polarity bot is running in Socket Mode")
    await handler.start_async()
