"""Core data models for the Polarity bot."""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class EntityType(StrEnum):
    """Entity classification tags returned by the Polarity parser."""

    IPV4 = "IPv4"
    IPV6 = "IPv6"
    IPV4_CIDR = "IPv4CIDR"
    HASH = "hash"
    STRING = "string"
    URL = "url"
    DOMAIN = "domain"
    MAC = "MAC"
    EMAIL = "email"
    CUSTOM = "custom"


@dataclass(frozen=True)
class Entity:
    """A parsed unit of search interest (IP address, domain, hash, ...).

    ``type`` is kept as the raw tag string so that tags the parser adds later
    still round-trip; compare against ``EntityType`` members for known tags.
    ``raw`` holds the full attribute bag the API returned and is passed back
    unchanged on lookups.
    """

    value: str
    type: str
    display_value: str | None = None
    raw: dict[str, Any] = field(default_factory=dict, compare=False, hash=False, repr=False)

    @property
    def key(self) -> tuple[str, str]:
        """Identity used for grouping: (display value or value, type)."""
        return (self.display_value or self.value, self.type)

    @property
    def label(self) -> str:
        """Text shown to users for this entity."""
        return self.display_value or self.value or "Unknown"

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> "Entity":
        display_value = raw.get("displayValue") or raw.get("display-value")
        return cls(
            value=str(raw.get("value", "")),
            type=str(raw.get("type") or "N/A"),
            display_value=str(display_value) if display_value else None,
            raw=dict(raw),
        )

    def to_api(self) -> dict[str, Any]:
        """Serialize back to the shape the lookup endpoint expects."""
        if self.raw:
            return dict(self.raw)
        return {"value": self.value, "type": self.type}


@dataclass(frozen=True)
class Integration:
    """A remote data-source integration running on the Polarity server."""

    id: str
    name: str = ""
    acronym: str = ""

    @property
    def label(self) -> str:
        """Best available human name for attribution."""
        return self.name or self.acronym or self.id

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> "Integration":
        attributes = raw.get("attributes") or {}
        return cls(
            id=str(raw["id"]),
            name=attributes.get("name") or "",
            acronym=attributes.get("acronym") or "",
        )


@dataclass(frozen=True)
class ResultData:
    """Opaque payload of a lookup result that found something.

    Only ``summary`` (a list of tags, each a string or an object with a
    ``text`` key) and ``details`` are pulled out; everything else an
    integration returns passes through untyped in ``extra``.
    """

    summary: tuple[Any, ...] = ()
    details: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)
    extra: dict[str, Any] = field(default_factory=dict, compare=False, hash=False, repr=False)

    @property
    def has_details(self) -> bool:
        return bool(self.details)

    @classmethod
    def from_api(cls, raw: dict[str, Any] | None) -> "ResultData | None":
        if raw is None:
            return None
        summary = raw.get("summary")
        details = raw.get("details")
        extra = {k: v for k, v in raw.items() if k not in ("summary", "details")}
        return cls(
            summary=tuple(summary) if isinstance(summary, list) else (),
            details=dict(details) if isinstance(details, dict) else {},
            extra=extra,
        )


@dataclass(frozen=True)
class LookupResult:
    """Outcome of one integration evaluating one entity.

    ``data is None`` means the entity was searched but nothing was found.
    """

    entity: Entity
    data: ResultData | None = None

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> "LookupResult":
        return cls(
            entity=Entity.from_api(raw.get("entity") or {}),
            data=ResultData.from_api(raw.get("data")),
        )


@dataclass(frozen=True)
class LookupResponse:
    """Entities an integration searched plus the results it produced."""

    searched_entities: tuple[Entity, ...] = ()
    results: tuple[LookupResult, ...] = ()


@dataclass(frozen=True)
class EnrichedResult:
    """A lookup result stripped to its summary and attributed to an integration."""

    entity: Entity
    data: ResultData | None
    integration: Integration
    has_details: bool = False


@dataclass
class EntityGroup:
    """All enriched results contributed for one entity identity."""

    entity: Entity
    results: list[EnrichedResult] = field(default_factory=list)

    @property
    def has_data(self) -> bool:
        """True when at least one integration found something."""
        return any(r.data is not None for r in self.results)


@dataclass(frozen=True)
class CachedPayload:
    """A string payload held by the payload cache until ``expires_at``."""

    id: str
    value: str
    expires_at: float
