"""Slack Block Kit builders for lookup results, errors and the App Home tab."""

import json
import re
from collections.abc import Sequence
from typing import Any

from polarity_bot.data import EnrichedResult, EntityGroup, Integration
from polarity_bot.errors import ApiError
from polarity_bot.payload_cache import PayloadCache, encode_button_value
from polarity_bot.render.chunking import (
    DEFAULT_LIMITS,
    TRUNCATION_NOTICE,
    ChunkLimits,
    cap_fragments,
    chunk_text,
    truncate,
)

Block = dict[str, Any]

SHOW_DETAILS_ACTION = "show_details"
SHOW_ERROR_DETAILS_ACTION = "show_error_details"
REFRESH_INTEGRATIONS_ACTION = "refresh_integrations"

# Slack limits header text to 150 characters
MAX_HEADER_CHARS = 150
MODAL_TITLE_DETAILS = "Integration Details"
MODAL_TITLE_ERROR = "Error Details"

_INLINE_IMAGE = re.compile(r"<svg.+</svg>|<img.+</img>")


def section(text: str, *, markdown: bool = True) -> Block:
    return {
        "type": "section",
        "text": {"type": "mrkdwn" if markdown else "plain_text", "text": text},
    }


def header(text: str) -> Block:
    return {
        "type": "header",
        "text": {"type": "plain_text", "text": truncate(text, MAX_HEADER_CHARS)},
    }


def divider() -> Block:
    return {"type": "divider"}


def button(text: str, action_id: str, value: str | None = None) -> dict[str, Any]:
    element: dict[str, Any] = {
        "type": "button",
        "text": {"type": "plain_text", "text": text, "emoji": True},
        "action_id": action_id,
    }
    if value is not None:
        element["value"] = value
    return element


def block_text_length(block: Block) -> int:
    """Characters of visible text a block carries."""
    text = block.get("text")
    length = len(text.get("text", "")) if isinstance(text, dict) else 0
    for element in block.get("elements", []):
        if element.get("type") in ("mrkdwn", "plain_text"):
            length += len(element.get("text", ""))
    return length


def truncation_notice() -> Block:
    return {"type": "context", "elements": [{"type": "mrkdwn", "text": TRUNCATION_NOTICE}]}


def limit_blocks(blocks: Sequence[Block], limits: ChunkLimits = DEFAULT_LIMITS) -> list[Block]:
    """Apply the fragment-count and cumulative-size ceilings to a block list."""
    return cap_fragments(blocks, block_text_length, truncation_notice(), limits)


def summary_tag_text(tag: Any) -> str:
    """Extract display text from a summary tag (a string or ``{"text": ...}``)."""
    if isinstance(tag, str):
        return _INLINE_IMAGE.sub("", tag).strip()
    if isinstance(tag, dict) and isinstance(tag.get("text"), str):
        return _INLINE_IMAGE.sub("", tag["text"]).strip()
    return "Tag unavailable"


def integration_heading(integration: Integration) -> str:
    if not (integration.name or integration.acronym):
        return ""
    acronym = f" ({integration.acronym})" if integration.acronym else ""
    return f"*{integration.name}*{acronym}\n"


def result_section(
    result: EnrichedResult,
    cache: PayloadCache,
    limits: ChunkLimits = DEFAULT_LIMITS,
) -> Block:
    """One section per result: integration heading, summary tags, details button."""
    summary_tags = result.data.summary if result.data is not None else ()
    tags = [f"`{summary_tag_text(tag)}`" for tag in summary_tags]
    summary = " ".join(tags) if tags else "_No summary_"
    block = section(
        truncate(f"{integration_heading(result.integration)}{summary}", limits.max_fragment_chars)
    )

    if result.has_details:
        payload = {
            "integrationId": result.integration.id,
            "entity": {"value": result.entity.value, "type": result.entity.type},
        }
        block["accessory"] = button(
            "Show Details", SHOW_DETAILS_ACTION, encode_button_value(payload, cache)
        )
    return block


def result_blocks(
    groups: Sequence[EntityGroup],
    cache: PayloadCache,
    *,
    include_title: bool,
    limits: ChunkLimits = DEFAULT_LIMITS,
) -> list[Block]:
    """Render entity groups, skipping any group without data.

    When ``include_title`` is set each group starts with a ``value (type)``
    header. Groups are separated by dividers, with no trailing divider.
    """
    blocks: list[Block] = []
    for group in groups:
        with_data = [r for r in group.results if r.data is not None]
        if not with_data:
            continue
        if blocks:
            blocks.append(divider())
        if include_title:
            blocks.append(header(f"{group.entity.label} ({group.entity.type})"))
        blocks.extend(result_section(r, cache, limits) for r in with_data)
    return blocks


def error_blocks(
    label: str,
    err: Exception,
    cache: PayloadCache,
    limits: ChunkLimits = DEFAULT_LIMITS,
) -> list[Block]:
    """Concise error line, plus a drill-down button when metadata exists.

    The line is cut to one fragment; the full metadata stays reachable
    through the button.
    """
    message = str(err) or type(err).__name__
    blocks = [section(truncate(f":warning: *{label}* – {message}", limits.max_fragment_chars))]
    if isinstance(err, ApiError):
        value = encode_button_value({"meta": err.meta}, cache)
        blocks.append(
            {
                "type": "actions",
                "block_id": "error_actions",
                "elements": [
                    button(":warning: Show Error Details", SHOW_ERROR_DETAILS_ACTION, value)
                ],
            }
        )
    return blocks


def detail_view_blocks(
    heading: str,
    text: str,
    limits: ChunkLimits = DEFAULT_LIMITS,
) -> list[Block]:
    """Header followed by ``text`` chunked into size-bounded sections."""
    return [header(heading), *(section(chunk) for chunk in chunk_text(text, limits))]


def json_code_block(value: Any) -> str:
    return "```" + json.dumps(value, indent=2, default=str) + "```"


def modal_view(title: str, blocks: list[Block]) -> dict[str, Any]:
    return {
        "type": "modal",
        "title": {"type": "plain_text", "text": title},
        "close": {"type": "plain_text", "text": "Close"},
        "blocks": blocks,
    }


def loading_blocks() -> list[Block]:
    return [section("Fetching details…", markdown=False)]


def progress_bar(done: int, total: int, width: int) -> str:
    filled = round(done / total * width)
    return "█" * filled + "░" * max(0, width - filled)


def progress_blocks(label: str, done: int, total: int, width: int) -> list[Block]:
    return [section(f"*{label}*\n{progress_bar(done, total, width)}  {done}/{total}")]


def app_home_blocks(
    integrations: Sequence[Integration],
    *,
    is_admin: bool = False,
    refresh_disabled: bool = False,
    show_refreshing_notice: bool = False,
) -> list[Block]:
    """Home tab: admin controls (or a welcome line) and running integrations."""
    blocks: list[Block] = []
    if is_admin:
        if not refresh_disabled:
            blocks.append(
                {
                    "type": "actions",
                    "block_id": "refresh_block",
                    "elements": [button("Refresh Integrations", REFRESH_INTEGRATIONS_ACTION)],
                }
            )
        if show_refreshing_notice:
            blocks.append(
                {
                    "type": "context",
                    "elements": [
                        {
                            "type": "mrkdwn",
                            "text": ":hourglass_flowing_sand: *Refreshing integrations…*",
                        }
                    ],
                }
            )
    else:
        blocks.append(section("Welcome to Polarity", markdown=False))

    if not integrations:
        blocks.append(section("No running integrations configured.", markdown=False))
        return blocks

    blocks.append(section("*Running Integrations*"))
    for integration in integrations:
        blocks.append(
            {
                "type": "context",
                "elements": [
                    {"type": "mrkdwn", "text": f"• {integration.name} ({integration.acronym})"}
                ],
            }
        )
    return limit_blocks(blocks)
