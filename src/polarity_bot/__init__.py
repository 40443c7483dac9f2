"""Polarity Slack bot: search every running Polarity integration from Slack."""

from polarity_bot.api import LookupClient, PolarityClient
from polarity_bot.config import BotConfig, create_from_config, load_config
from polarity_bot.data import (
    CachedPayload,
    EnrichedResult,
    Entity,
    EntityGroup,
    EntityType,
    Integration,
    LookupResponse,
    LookupResult,
    ResultData,
)
from polarity_bot.errors import (
    ApiError,
    LookupTimeoutError,
    PolarityBotError,
    ProgressBarDestroyedError,
)
from polarity_bot.integrations import IntegrationRegistry
from polarity_bot.payload_cache import PayloadCache, decode_button_value, encode_button_value
from polarity_bot.pipeline import LookupCoordinator, LookupOutcome
from polarity_bot.render.chunking import ChunkLimits, chunk_text
from polarity_bot.render.progress import ProgressBar
from polarity_bot.results import EntityGrouper, enrich, group_results, reduce_object

__all__ = [
    # Models
    "CachedPayload",
    "EnrichedResult",
    "Entity",
    "EntityGroup",
    "EntityType",
    "Integration",
    "LookupResponse",
    "LookupResult",
    "ResultData",
    # Errors
    "ApiError",
    "LookupTimeoutError",
    "PolarityBotError",
    "ProgressBarDestroyedError",
    # Clients
    "LookupClient",
    "PolarityClient",
    "IntegrationRegistry",
    # Results
    "EntityGrouper",
    "enrich",
    "group_results",
    "reduce_object",
    # Rendering
    "ChunkLimits",
    "ProgressBar",
    "chunk_text",
    # Payload store
    "PayloadCache",
    "decode_button_value",
    "encode_button_value",
    # Orchestration
    "LookupCoordinator",
    "LookupOutcome",
    # Config
    "BotConfig",
    "create_from_config",
    "load_config",
]
