"""Polarity REST API client built on httpx."""

import json
import logging
import os
from typing import Any
from urllib.parse import quote

import httpx

from polarity_bot.data import Entity, LookupResponse, LookupResult
from polarity_bot.errors import ApiError

logger = logging.getLogger(__name__)

JSON_API_CONTENT_TYPE = "application/vnd.api+json"
INTEGRATIONS_PAGE_SIZE = 300


class PolarityClient:
    """Client for the Polarity entity-parsing and integration-lookup endpoints.

    Proxies configured through ``HTTPS_PROXY``/``HTTP_PROXY`` are honoured by
    httpx automatically.

    Args:
        hostname: Polarity server hostname (defaults to POLARITY_HOSTNAME env var).
        api_key: Bearer token (defaults to POLARITY_API_KEY env var).
        ignore_tls_errors: Skip certificate verification. Defaults to the
            POLARITY_IGNORE_TLS_ERRORS env var being the string "true".
        timeout: Per-request timeout in seconds.
        transport: Optional httpx transport, used by tests.
    """

    def __init__(
        self,
        *,
        hostname: str | None = None,
        api_key: str | None = None,
        ignore_tls_errors: bool | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._hostname = hostname or os.environ.get("POLARITY_HOSTNAME")
        if not self._hostname:
            raise ValueError(
                "Polarity hostname required. Pass hostname or set POLARITY_HOSTNAME env var."
            )
        self._api_key = api_key or os.environ.get("POLARITY_API_KEY")
        if not self._api_key:
            raise ValueError(
                "Polarity API key required. Pass api_key or set POLARITY_API_KEY env var."
            )
        if ignore_tls_errors is None:
            ignore_tls_errors = os.environ.get("POLARITY_IGNORE_TLS_ERRORS") == "true"
        self._verify = not ignore_tls_errors
        self._timeout = timeout
        self._transport = transport

    @property
    def base_url(self) -> str:
        return f"https://{self._hostname}"

    async def parse_entities(self, text: str) -> list[Entity]:
        """Convert a block of text into Polarity entity objects.

        Args:
            text: A string that may contain one or more entities.

        Returns:
            Parsed entities, possibly empty.

        Raises:
            ApiError: If the server responds with a non-2xx status.
        """
        body = await self._request(
            "POST",
            "/api/parsed-entities",
            payload={"data": {"attributes": {"text": text}}},
        )
        attributes = (body.get("data") or {}).get("attributes") or {}
        return [Entity.from_api(raw) for raw in attributes.get("entities") or []]

    async def lookup(self, entities: list[Entity], integration_id: str) -> LookupResponse:
        """Look up parsed entities against a single integration.

        Args:
            entities: Entities to look up.
            integration_id: Polarity integration ID to query.

        Returns:
            The entities the server actually searched and the lookup results.

        Raises:
            ApiError: If the server responds with a non-2xx status.
        """
        if not entities:
            return LookupResponse()

        body = await self._request(
            "POST",
            f"/api/integrations/{quote(integration_id, safe='')}/lookup",
            payload={
                "data": {
                    "type": "integration-lookups",
                    "attributes": {"entities": [e.to_api() for e in entities]},
                }
            },
        )
        attributes = (body.get("data") or {}).get("attributes") or {}
        return LookupResponse(
            searched_entities=tuple(
                Entity.from_api(raw) for raw in attributes.get("entities") or []
            ),
            results=tuple(LookupResult.from_api(raw) for raw in attributes.get("results") or []),
        )

    async def lookup_text(self, text: str, integration_id: str) -> LookupResponse:
        """Parse ``text`` and look the entities up against one integration."""
        entities = await self.parse_entities(text)
        return await self.lookup(entities, integration_id)

    async def get_running_integrations(self) -> list[dict[str, Any]]:
        """Fetch all integrations currently in the ``running`` state.

        Raises:
            ApiError: If the server responds with a non-2xx status.
        """
        body = await self._request(
            "GET",
            "/api/integrations",
            params={
                "filter[integration.status]": "running",
                "page[size]": INTEGRATIONS_PAGE_SIZE,
            },
        )
        return list(body.get("data") or [])

    async def _request(
        self,
        method: str,
        path: str,
        *,
        payload: dict[str, Any] | None = None,
        params: dict[str, str | int] | None = None,
    ) -> dict[str, Any]:
        """Send one request and return the decoded JSON body."""
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": JSON_API_CONTENT_TYPE,
        }
        content = json.dumps(payload) if payload is not None else None

        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self._timeout,
            verify=self._verify,
            transport=self._transport,
        ) as client:
            response = await client.request(
                method, path, params=params, headers=headers, content=content
            )

        if response.is_error:
            raise _to_api_error(response, headers, content)
        return response.json() or {}


def sanitize_headers(headers: dict[str, str]) -> dict[str, str]:
    """Redact the bearer token so headers can be logged or shown to users."""
    sanitized = dict(headers)
    for key in ("Authorization", "authorization"):
        auth = sanitized.get(key)
        if isinstance(auth, str) and auth.startswith("Bearer "):
            sanitized[key] = f"Bearer {auth[7:11]}…redacted"
    return sanitized


def _to_api_error(
    response: httpx.Response,
    headers: dict[str, str],
    content: str | None,
) -> ApiError:
    """Convert an HTTP error response into an ``ApiError``.

    The message prefers the nested ``meta.errors[0].detail`` of the first
    JSON:API error, then its ``detail``, then the status line.
    """
    message = f"{response.status_code} {response.reason_phrase}"
    meta: dict[str, Any] = {}

    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        errors = body.get("errors")
        first = errors[0] if isinstance(errors, list) and errors else None
        if isinstance(first, dict):
            meta = dict(first)
            inner = None
            first_meta = first.get("meta")
            if isinstance(first_meta, dict):
                inner_errors = first_meta.get("errors")
                if isinstance(inner_errors, list) and inner_errors:
                    if isinstance(inner_errors[0], dict):
                        inner = inner_errors[0].get("detail")
            message = inner or first.get("detail") or message

    meta["request"] = {
        "url": str(response.request.url),
        "method": response.request.method,
        "headers": sanitize_headers(headers),
        "body": content,
    }
    logger.debug("Polarity API error %s: %s", response.status_code, message)
    return ApiError(str(message), meta)
