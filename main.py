#!/usr/bin/env python
"""CLI for the Polarity Slack bot."""

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

from polarity_bot.config import BotConfig, create_from_config, get_default_config_path, load_config
from polarity_bot.slack.app import SlackCredentials, create_app, run_socket_mode

logger = logging.getLogger(__name__)

NOISY_LOGGERS = ("httpx", "httpcore", "slack_bolt", "slack_sdk", "aiohttp")


class CLIArgs(BaseModel):
    """Validated CLI arguments."""

    config: Path
    log_level: str | None = None

    @field_validator("config")
    @classmethod
    def config_must_exist(cls, v: Path) -> Path:
        if not v.exists():
            raise ValueError(f"Config file not found: {v}")
        return v

    @field_validator("log_level")
    @classmethod
    def log_level_must_be_known(cls, v: str | None) -> str | None:
        if v is None:
            return v
        level = v.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {v}")
        return level


def configure_logging(level: str) -> None:
    """Configure the root logger once and quiet chatty libraries."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


async def run(config: BotConfig) -> None:
    """Build the bot from config and serve Slack events.

    Args:
        config: Validated root configuration.
    """
    credentials = SlackCredentials.from_env()
    handlers, registry = create_from_config(config)
    app = create_app(handlers, credentials, command=config.slack.command)
    await run_socket_mode(app, registry, credentials)


def main() -> None:
    """Entry point for the CLI."""
    parser = argparse.ArgumentParser(description="Run the Polarity Slack bot.")
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        help="Path to YAML config file (default: configs/default.yaml)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Log level, overrides the config and POLARITY_LOG_LEVEL",
    )

    ns = parser.parse_args()
    load_dotenv(override=True)
    config_path: Path = ns.config if ns.config else get_default_config_path()

    try:
        args = CLIArgs(
            config=config_path,
            log_level=ns.log_level or os.environ.get("POLARITY_LOG_LEVEL"),
        )
        config = load_config(args.config)
    except Exception as e:
        logging.basicConfig(level=logging.INFO, format="%(message)s")
        logger.error(str(e))
        sys.exit(1)

    configure_logging(args.log_level or config.logging.level)
    logger.info(f"Config: {args.config}")

    try:
        asyncio.run(run(config))
    except KeyboardInterrupt:
        sys.exit(130)
    except Exception:
        logger.exception("Failed to start the Polarity bot")
        sys.exit(1)


if __name__ == "__main__":
    main()
