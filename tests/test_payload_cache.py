"""Tests for the payload cache and button value encoding."""

import json

import pytest

from polarity_bot.payload_cache import (
    CACHE_ID_KEY,
    PayloadCache,
    decode_button_value,
    encode_button_value,
)


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> PayloadCache:
    return PayloadCache(ttl_seconds=60, clock=clock)


class TestPayloadCache:
    """Tests for PayloadCache."""

    def test_save_then_load(self, cache: PayloadCache) -> None:
        handle = cache.save("payload")
        assert cache.load(handle) == "payload"

    def test_handles_are_unique(self, cache: PayloadCache) -> None:
        assert cache.save("a") != cache.save("a")

    def test_unknown_handle(self, cache: PayloadCache) -> None:
        assert cache.load("missing") is None

    def test_entry_expires_after_ttl(self, cache: PayloadCache, clock: FakeClock) -> None:
        handle = cache.save("payload")
        clock.now += 59
        assert cache.load(handle) == "payload"
        clock.now += 1
        assert cache.load(handle) is None

    def test_expired_entries_swept_on_save(self, cache: PayloadCache, clock: FakeClock) -> None:
        cache.save("old")
        clock.now += 61
        cache.save("new")
        assert len(cache) == 1

    def test_rejects_non_positive_ttl(self) -> None:
        with pytest.raises(ValueError):
            PayloadCache(ttl_seconds=0)


class TestButtonValues:
    """Tests for encode_button_value / decode_button_value."""

    def test_small_payload_inlined(self, cache: PayloadCache) -> None:
        payload = {"integrationId": "vt", "entity": {"value": "x", "type": "hash"}}
        value = encode_button_value(payload, cache)
        assert json.loads(value) == payload
        assert len(cache) == 0
        assert decode_button_value(value, cache) == payload

    def test_large_payload_deferred(self, cache: PayloadCache) -> None:
        payload = {"meta": {"body": "x" * 5000}}
        value = encode_button_value(payload, cache)

        assert len(value) < 100
        assert CACHE_ID_KEY in json.loads(value)
        assert decode_button_value(value, cache) == payload

    def test_limit_is_inclusive(self, cache: PayloadCache) -> None:
        payload = {"a": "x" * 10}
        encoded = json.dumps(payload)
        assert encode_button_value(payload, cache, limit=len(encoded)) == encoded
        assert encode_button_value(payload, cache, limit=len(encoded) - 1) != encoded

    def test_expired_handle_decodes_to_none(self, cache: PayloadCache, clock: FakeClock) -> None:
        value = encode_button_value({"meta": "y" * 3000}, cache)
        clock.now += 120
        assert decode_button_value(value, cache) is None

    def test_empty_value(self, cache: PayloadCache) -> None:
        assert decode_button_value(None, cache) == {}
        assert decode_button_value("", cache) == {}

    def test_non_object_value_wrapped(self, cache: PayloadCache) -> None:
        assert decode_button_value('"plain"', cache) == {"value": "plain"}
