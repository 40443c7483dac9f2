"""Tests for data models."""

from dataclasses import FrozenInstanceError

import pytest

from polarity_bot.data import (
    EnrichedResult,
    Entity,
    EntityGroup,
    EntityType,
    Integration,
    LookupResult,
    ResultData,
)


class TestEntity:
    """Tests for Entity model."""

    def test_from_api_reads_display_value(self) -> None:
        entity = Entity.from_api({"value": "8.8.8.8", "type": "IPv4", "displayValue": "8.8.8.8"})
        assert entity.value == "8.8.8.8"
        assert entity.type == EntityType.IPV4
        assert entity.display_value == "8.8.8.8"

    def test_from_api_reads_hyphenated_display_value(self) -> None:
        entity = Entity.from_api({"value": "a", "type": "string", "display-value": "A"})
        assert entity.display_value == "A"

    def test_from_api_defaults_missing_type(self) -> None:
        entity = Entity.from_api({"value": "x"})
        assert entity.type == "N/A"
        assert entity.display_value is None

    def test_unknown_type_is_preserved(self) -> None:
        entity = Entity.from_api({"value": "x", "type": "cve"})
        assert entity.type == "cve"

    def test_key_prefers_display_value(self) -> None:
        entity = Entity(value="raw", type="domain", display_value="shown")
        assert entity.key == ("shown", "domain")

    def test_key_falls_back_to_value(self) -> None:
        assert Entity(value="raw", type="domain").key == ("raw", "domain")

    def test_raw_excluded_from_equality(self) -> None:
        a = Entity(value="x", type="hash", raw={"extra": 1})
        b = Entity(value="x", type="hash")
        assert a == b
        assert hash(a) == hash(b)

    def test_to_api_returns_raw_bag(self) -> None:
        raw = {"value": "x", "type": "hash", "isHash": True}
        assert Entity.from_api(raw).to_api() == raw

    def test_to_api_without_raw(self) -> None:
        assert Entity(value="x", type="hash").to_api() == {"value": "x", "type": "hash"}

    def test_is_frozen(self) -> None:
        entity = Entity(value="x", type="hash")
        with pytest.raises(FrozenInstanceError):
            entity.value = "y"  # type: ignore[misc]


class TestIntegration:
    """Tests for Integration model."""

    def test_from_api(self) -> None:
        integration = Integration.from_api(
            {"id": "vt", "attributes": {"name": "VirusTotal", "acronym": "VT"}}
        )
        assert integration == Integration(id="vt", name="VirusTotal", acronym="VT")

    def test_from_api_without_attributes(self) -> None:
        integration = Integration.from_api({"id": "vt"})
        assert integration.name == ""
        assert integration.acronym == ""

    def test_label_fallbacks(self) -> None:
        assert Integration(id="vt", name="VirusTotal", acronym="VT").label == "VirusTotal"
        assert Integration(id="vt", acronym="VT").label == "VT"
        assert Integration(id="vt").label == "vt"


class TestResultData:
    """Tests for ResultData parsing."""

    def test_none_means_no_data(self) -> None:
        assert ResultData.from_api(None) is None

    def test_extracts_summary_and_details(self) -> None:
        data = ResultData.from_api(
            {"summary": {"tags": ["malicious"]}, "details": {"score": 90}, "foo": 1}
        )
        assert data is not None
        assert data.summary == ()
        assert data.details == {"score": 90}
        assert data.extra == {"foo": 1}
        assert data.has_details

    def test_summary_list_becomes_tuple(self) -> None:
        data = ResultData.from_api({"summary": ["a", {"text": "b"}]})
        assert data is not None
        assert data.summary == ("a", {"text": "b"})
        assert not data.has_details


class TestLookupResult:
    """Tests for LookupResult parsing."""

    def test_from_api_with_null_data(self) -> None:
        result = LookupResult.from_api({"entity": {"value": "x", "type": "hash"}, "data": None})
        assert result.entity.value == "x"
        assert result.data is None


class TestEntityGroup:
    """Tests for EntityGroup."""

    def test_has_data(self) -> None:
        entity = Entity(value="x", type="hash")
        integration = Integration(id="vt")
        group = EntityGroup(entity, [EnrichedResult(entity, None, integration)])
        assert not group.has_data

        group.results.append(EnrichedResult(entity, ResultData(summary=("hit",)), integration))
        assert group.has_data
