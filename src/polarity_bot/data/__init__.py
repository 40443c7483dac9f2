"""Data models for the Polarity bot."""

from polarity_bot.data.models import (
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

__all__ = [
    "CachedPayload",
    "EnrichedResult",
    "Entity",
    "EntityGroup",
    "EntityType",
    "Integration",
    "LookupResponse",
    "LookupResult",
    "ResultData",
]
