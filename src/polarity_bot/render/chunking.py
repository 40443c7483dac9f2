"""Deterministic splitting and truncation of output into size-bounded fragments.

Slack rejects section text over 3,000 characters, so every fragment body is
kept at or below ``MAX_FRAGMENT_CHARS``. A fragment sequence is further capped
by count and by cumulative size; anything past either cap is replaced by a
single truncation notice.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TypeVar

T = TypeVar("T")

MAX_FRAGMENT_CHARS = 2900
MAX_FRAGMENTS = 100
MAX_TOTAL_CHARS = 100_000

CODE_FENCE = "```"
EMPTY_TEXT = "_No details found_"
TRUNCATION_NOTICE = ":scissors: _Output truncated, too much data to display in Slack._"
ELLIPSIS = "…"


@dataclass(frozen=True)
class ChunkLimits:
    """Ceilings applied to one fragment sequence."""

    max_fragment_chars: int = MAX_FRAGMENT_CHARS
    max_fragments: int = MAX_FRAGMENTS
    max_total_chars: int = MAX_TOTAL_CHARS

    def __post_init__(self) -> None:
        if self.max_fragment_chars <= 2 * len(CODE_FENCE):
            raise ValueError("max_fragment_chars must leave room for code fences")
        if self.max_fragments <= 0:
            raise ValueError("max_fragments must be greater than 0")
        if self.max_total_chars <= 0:
            raise ValueError("max_total_chars must be greater than 0")


DEFAULT_LIMITS = ChunkLimits()


def is_code_block(text: str) -> bool:
    return (
        len(text) >= 2 * len(CODE_FENCE)
        and text.startswith(CODE_FENCE)
        and text.endswith(CODE_FENCE)
    )


def split_text(
    text: str,
    limits: ChunkLimits = DEFAULT_LIMITS,
    *,
    empty: str = EMPTY_TEXT,
) -> list[str]:
    """Slice ``text`` into fragments of at most ``limits.max_fragment_chars``.

    A fenced code block is unwrapped first and every slice is fenced again,
    so each fragment renders on its own. Slices of a code block are shorter
    by the fence overhead. Empty input yields a single ``empty`` fragment.
    """
    if is_code_block(text):
        raw = text[len(CODE_FENCE) : -len(CODE_FENCE)]
        size = limits.max_fragment_chars - 2 * len(CODE_FENCE)
        slices = [raw[i : i + size] for i in range(0, len(raw), size)] or [""]
        return [f"{CODE_FENCE}{s}{CODE_FENCE}" for s in slices]

    if not text:
        return [empty]
    size = limits.max_fragment_chars
    return [text[i : i + size] for i in range(0, len(text), size)]


def cap_fragments(
    fragments: Sequence[T],
    size: Callable[[T], int],
    notice: T,
    limits: ChunkLimits = DEFAULT_LIMITS,
) -> list[T]:
    """Keep fragments while both sequence ceilings hold.

    The first fragment that would exceed ``max_fragments`` or push the running
    total past ``max_total_chars`` is replaced by ``notice`` and nothing after
    it is emitted. A sequence within both ceilings is returned unchanged.
    """
    kept: list[T] = []
    total = 0
    for fragment in fragments:
        length = size(fragment)
        if len(kept) >= limits.max_fragments or total + length > limits.max_total_chars:
            kept.append(notice)
            return kept
        kept.append(fragment)
        total += length
    return kept


def chunk_text(
    text: str,
    limits: ChunkLimits = DEFAULT_LIMITS,
    *,
    empty: str = EMPTY_TEXT,
    notice: str = TRUNCATION_NOTICE,
) -> list[str]:
    """Split ``text`` and apply the sequence ceilings."""
    return cap_fragments(split_text(text, limits, empty=empty), len, notice, limits)


def truncate(text: str, max_chars: int) -> str:
    """Shorten ``text`` to ``max_chars``, marking the cut with an ellipsis."""
    if len(text) <= max_chars:
        return text
    return text[: max_chars - len(ELLIPSIS)] + ELLIPSIS


def paginate(items: Sequence[T], page_size: int) -> list[list[T]]:
    """Split ``items`` into consecutive pages of at most ``page_size``."""
    if page_size <= 0:
        raise ValueError("page_size must be greater than 0")
    return [list(items[i : i + page_size]) for i in range(0, len(items), page_size)]
