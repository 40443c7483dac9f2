"""Rendering of results, errors and progress into Slack blocks."""

from polarity_bot.render.chunking import (
    DEFAULT_LIMITS,
    ChunkLimits,
    cap_fragments,
    chunk_text,
    paginate,
    split_text,
    truncate,
)

__all__ = [
    "DEFAULT_LIMITS",
    "ChunkLimits",
    "cap_fragments",
    "chunk_text",
    "paginate",
    "split_text",
    "truncate",
]
