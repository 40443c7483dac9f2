"""Tests for Block Kit builders."""

import json

import pytest

from polarity_bot.data import EnrichedResult, Entity, EntityGroup, Integration, ResultData
from polarity_bot.errors import ApiError, LookupTimeoutError
from polarity_bot.payload_cache import CACHE_ID_KEY, PayloadCache, decode_button_value
from polarity_bot.render.blocks import (
    MAX_HEADER_CHARS,
    REFRESH_INTEGRATIONS_ACTION,
    SHOW_DETAILS_ACTION,
    SHOW_ERROR_DETAILS_ACTION,
    app_home_blocks,
    detail_view_blocks,
    error_blocks,
    header,
    json_code_block,
    limit_blocks,
    progress_blocks,
    result_blocks,
    section,
    summary_tag_text,
)
from polarity_bot.render.chunking import MAX_FRAGMENT_CHARS, TRUNCATION_NOTICE, ChunkLimits

VT = Integration(id="vt", name="VirusTotal", acronym="VT")
SHODAN = Integration(id="shodan", name="Shodan", acronym="SH")
IP = Entity(value="8.8.8.8", type="IPv4")


@pytest.fixture
def cache() -> PayloadCache:
    return PayloadCache()


def texts(blocks: list[dict]) -> list[str]:
    return [b["text"]["text"] for b in blocks if "text" in b]


class TestSummaryTags:
    """Tests for summary_tag_text."""

    def test_plain_string(self) -> None:
        assert summary_tag_text("Malicious") == "Malicious"

    def test_text_object(self) -> None:
        assert summary_tag_text({"text": "Score: 9"}) == "Score: 9"

    def test_strips_inline_svg(self) -> None:
        assert summary_tag_text('<svg viewBox="0 0 1 1"><path/></svg> Bad') == "Bad"

    def test_unsupported_tag(self) -> None:
        assert summary_tag_text(42) == "Tag unavailable"


class TestResultBlocks:
    """Tests for result_blocks."""

    def test_title_and_sections(self, cache: PayloadCache) -> None:
        group = EntityGroup(
            IP,
            [
                EnrichedResult(IP, ResultData(summary=("clean", {"text": "AS15169"})), VT),
                EnrichedResult(IP, ResultData(summary=()), SHODAN),
            ],
        )
        blocks = result_blocks([group], cache, include_title=True)

        assert blocks[0] == header("8.8.8.8 (IPv4)")
        assert blocks[1]["text"]["text"] == "*VirusTotal* (VT)\n`clean` `AS15169`"
        assert blocks[2]["text"]["text"] == "*Shodan* (SH)\n_No summary_"
        assert "accessory" not in blocks[1]

    def test_without_title(self, cache: PayloadCache) -> None:
        group = EntityGroup(IP, [EnrichedResult(IP, ResultData(summary=("x",)), VT)])
        blocks = result_blocks([group], cache, include_title=False)
        assert [b["type"] for b in blocks] == ["section"]

    def test_null_rows_and_empty_groups_skipped(self, cache: PayloadCache) -> None:
        other = Entity(value="example.com", type="domain")
        groups = [
            EntityGroup(
                IP,
                [
                    EnrichedResult(IP, ResultData(summary=("x",)), VT),
                    EnrichedResult(IP, None, SHODAN),
                ],
            ),
            EntityGroup(other, [EnrichedResult(other, None, VT)]),
        ]
        blocks = result_blocks(groups, cache, include_title=True)
        assert [b["type"] for b in blocks] == ["header", "section"]

    def test_dividers_between_groups_only(self, cache: PayloadCache) -> None:
        other = Entity(value="example.com", type="domain")
        groups = [
            EntityGroup(IP, [EnrichedResult(IP, ResultData(summary=("x",)), VT)]),
            EntityGroup(other, [EnrichedResult(other, ResultData(summary=("y",)), VT)]),
        ]
        blocks = result_blocks(groups, cache, include_title=True)
        assert [b["type"] for b in blocks] == ["header", "section", "divider", "header", "section"]

    def test_details_button_payload(self, cache: PayloadCache) -> None:
        group = EntityGroup(
            IP, [EnrichedResult(IP, ResultData(summary=("x",)), VT, has_details=True)]
        )
        accessory = result_blocks([group], cache, include_title=False)[0]["accessory"]

        assert accessory["action_id"] == SHOW_DETAILS_ACTION
        assert json.loads(accessory["value"]) == {
            "integrationId": "vt",
            "entity": {"value": "8.8.8.8", "type": "IPv4"},
        }

    def test_long_header_truncated(self) -> None:
        block = header("x" * 500)
        assert len(block["text"]["text"]) == MAX_HEADER_CHARS


class TestErrorBlocks:
    """Tests for error_blocks."""

    def test_api_error_has_details_button(self, cache: PayloadCache) -> None:
        err = ApiError("Upstream failed", {"status": "502"})
        blocks = error_blocks("VirusTotal", err, cache)

        assert blocks[0]["text"]["text"] == ":warning: *VirusTotal* – Upstream failed"
        actions = blocks[1]
        assert actions["type"] == "actions"
        assert actions["block_id"] == "error_actions"
        btn = actions["elements"][0]
        assert btn["text"]["text"] == ":warning: Show Error Details"
        assert btn["action_id"] == SHOW_ERROR_DETAILS_ACTION
        assert decode_button_value(btn["value"], cache) == {"meta": {"status": "502"}}

    def test_large_meta_deferred_to_cache(self, cache: PayloadCache) -> None:
        err = ApiError("boom", {"body": "x" * 5000})
        btn = error_blocks("VT", err, cache)[1]["elements"][0]

        assert CACHE_ID_KEY in json.loads(btn["value"])
        assert decode_button_value(btn["value"], cache) == {"meta": {"body": "x" * 5000}}

    def test_other_errors_have_no_button(self, cache: PayloadCache) -> None:
        blocks = error_blocks("VT", LookupTimeoutError("vt", 120), cache)
        assert texts(blocks) == [":warning: *VT* – Lookup timed out after 120 seconds"]
        assert len(blocks) == 1

    def test_long_message_kept_within_fragment_ceiling(self, cache: PayloadCache) -> None:
        err = ApiError("E" * 5000, {"status": "500"})
        blocks = error_blocks("Xray", err, cache)

        text = blocks[0]["text"]["text"]
        assert len(text) == MAX_FRAGMENT_CHARS
        assert text.startswith(":warning: *Xray* – EEE")
        assert text.endswith("…")
        # Full metadata still reachable through the button
        assert blocks[1]["elements"][0]["action_id"] == SHOW_ERROR_DETAILS_ACTION

    def test_custom_limits(self, cache: PayloadCache) -> None:
        limits = ChunkLimits(max_fragment_chars=50)
        blocks = error_blocks("VT", RuntimeError("x" * 100), cache, limits)
        assert len(blocks[0]["text"]["text"]) == 50

    def test_message_falls_back_to_type_name(self, cache: PayloadCache) -> None:
        blocks = error_blocks("VT", RuntimeError(), cache)
        assert texts(blocks) == [":warning: *VT* – RuntimeError"]


class TestLimitBlocks:
    """Tests for limit_blocks."""

    def test_appends_single_notice(self) -> None:
        blocks = [section("x" * 10) for _ in range(5)]
        limited = limit_blocks(blocks, ChunkLimits(max_fragments=3))
        assert len(limited) == 4
        assert limited[-1]["elements"][0]["text"] == TRUNCATION_NOTICE

    def test_cumulative_size(self) -> None:
        blocks = [section("x" * 40) for _ in range(5)]
        limited = limit_blocks(blocks, ChunkLimits(max_total_chars=100))
        assert len(limited) == 3


def test_detail_view_blocks_chunks_code() -> None:
    text = json_code_block({"key": "v" * 40})
    blocks = detail_view_blocks("VirusTotal (VT)", text, ChunkLimits(max_fragment_chars=20))

    assert blocks[0] == header("VirusTotal (VT)")
    for block in blocks[1:]:
        body = block["text"]["text"]
        assert body.startswith("```") and body.endswith("```")
        assert len(body) <= 20


def test_progress_blocks() -> None:
    blocks = progress_blocks("Processing", 5, 10, 10)
    assert texts(blocks) == ["*Processing*\n█████░░░░░  5/10"]


class TestAppHome:
    """Tests for app_home_blocks."""

    def test_admin_sees_refresh_button(self) -> None:
        blocks = app_home_blocks([VT], is_admin=True)
        assert blocks[0]["elements"][0]["action_id"] == REFRESH_INTEGRATIONS_ACTION
        assert blocks[-1]["elements"][0]["text"] == "• VirusTotal (VT)"

    def test_refreshing_state(self) -> None:
        blocks = app_home_blocks(
            [VT], is_admin=True, refresh_disabled=True, show_refreshing_notice=True
        )
        assert all(b["type"] != "actions" for b in blocks)
        assert "Refreshing integrations" in blocks[0]["elements"][0]["text"]

    def test_non_admin_welcome(self) -> None:
        blocks = app_home_blocks([VT, SHODAN])
        assert texts(blocks)[:2] == ["Welcome to Polarity", "*Running Integrations*"]
        assert len(blocks) == 4

    def test_no_integrations(self) -> None:
        blocks = app_home_blocks([], is_admin=False)
        assert texts(blocks)[-1] == "No running integrations configured."
