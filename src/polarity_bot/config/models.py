"""Pydantic configuration models for the Polarity bot."""

import logging

from pydantic import BaseModel, Field, field_validator

from polarity_bot.payload_cache import DEFAULT_TTL_SECONDS
from polarity_bot.render.chunking import (
    MAX_FRAGMENT_CHARS,
    MAX_FRAGMENTS,
    MAX_TOTAL_CHARS,
    ChunkLimits,
)

# ============================================================
# Polarity API
# ============================================================


class PolaritySettings(BaseModel):
    """Connection to the Polarity server.

    ``hostname`` and ``ignore_tls_errors`` fall back to the
    ``POLARITY_HOSTNAME`` and ``POLARITY_IGNORE_TLS_ERRORS`` environment
    variables when left unset. The API key is only ever read from the
    environment.
    """

    hostname: str | None = None
    ignore_tls_errors: bool | None = None
    request_timeout_seconds: float = Field(default=30.0, gt=0)
    # None disables the per-integration deadline
    lookup_timeout_seconds: float | None = Field(default=120.0, gt=0)

    model_config = {"frozen": True}


# ============================================================
# Slack
# ============================================================


class SlackSettings(BaseModel):
    """Slack app behaviour."""

    command: str = "/polarity"
    progress_width: int = Field(default=40, gt=0)
    max_message_blocks: int = Field(default=50, gt=0, le=50)

    model_config = {"frozen": True}


# ============================================================
# Rendering and caching
# ============================================================


class RenderSettings(BaseModel):
    """Size ceilings for text rendered into Slack blocks."""

    max_fragment_chars: int = Field(default=MAX_FRAGMENT_CHARS, gt=6, le=3000)
    max_fragments: int = Field(default=MAX_FRAGMENTS, gt=0)
    max_total_chars: int = Field(default=MAX_TOTAL_CHARS, gt=0)

    model_config = {"frozen": True}

    def limits(self) -> ChunkLimits:
        return ChunkLimits(
            max_fragment_chars=self.max_fragment_chars,
            max_fragments=self.max_fragments,
            max_total_chars=self.max_total_chars,
        )


class CacheSettings(BaseModel):
    """Lifetime of payloads deferred out of button values."""

    ttl_seconds: float = Field(default=DEFAULT_TTL_SECONDS, gt=0)

    model_config = {"frozen": True}


class LoggingSettings(BaseModel):
    """Application log verbosity."""

    level: str = "INFO"

    model_config = {"frozen": True}

    @field_validator("level")
    @classmethod
    def level_must_be_known(cls, v: str) -> str:
        level = v.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {v}")
        return level


# ============================================================
# Root Config
# ============================================================


class BotConfig(BaseModel):
    """Root configuration model."""

    polarity: PolaritySettings = Field(default_factory=PolaritySettings)
    slack: SlackSettings = Field(default_factory=SlackSettings)
    render: RenderSettings = Field(default_factory=RenderSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = {"frozen": True}
