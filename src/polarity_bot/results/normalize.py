"""Reduce raw lookup results to the lightweight view rendered in Slack."""

import re
from dataclasses import replace
from typing import Any

from polarity_bot.data import EnrichedResult, Integration, LookupResult

_BASE64_IMAGE = re.compile(r"^data:image/[a-zA-Z]*;base64,")
_HEX_COLOR = re.compile(r"^#(?:[0-9A-Fa-f]{3}|[0-9A-Fa-f]{6})$")


def enrich(result: LookupResult, integration: Integration) -> EnrichedResult:
    """Attribute a result to its integration and drop its heavy details.

    The details are fetched again on demand when the user asks for them, so
    only whether they exist is kept.
    """
    data = result.data
    has_details = data is not None and data.has_details
    slim = replace(data, details={}) if data is not None else None
    return EnrichedResult(
        entity=result.entity,
        data=slim,
        integration=integration,
        has_details=has_details,
    )


def enrich_all(results: list[LookupResult], integration: Integration) -> list[EnrichedResult]:
    return [enrich(r, integration) for r in results]


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (list, tuple, dict)) and len(value) == 0:
        return True
    return isinstance(value, str) and not value.strip()


def _is_noise(value: Any) -> bool:
    """Values that carry nothing readable in a text view."""
    if _is_empty(value):
        return True
    if isinstance(value, str):
        stripped = value.strip()
        return bool(_BASE64_IMAGE.match(stripped) or _HEX_COLOR.match(stripped))
    return False


def reduce_object(value: Any) -> Any:
    """Recursively strip empty values, inline images and colour codes.

    Removes ``None``, empty strings, empty lists and empty dicts, base64
    ``data:image`` strings and hex colour strings from dicts and lists at any
    depth. Containers that become empty are removed from their parent too.
    The input is never mutated.

    Args:
        value: Any JSON-like value.

    Returns:
        A cleaned copy; scalars are returned unchanged.
    """
    if isinstance(value, dict):
        cleaned: dict[str, Any] = {}
        for key, item in value.items():
            if _is_noise(item):
                continue
            reduced = reduce_object(item)
            if _is_noise(reduced):
                continue
            cleaned[key] = reduced
        return cleaned
    if isinstance(value, (list, tuple)):
        items = (reduce_object(item) for item in value)
        return [item for item in items if not _is_noise(item)]
    return value
