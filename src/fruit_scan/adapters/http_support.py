"""Shared httpx request handling for remote service adapters."""

import json
import logging

import httpx

from fruit_scan.domain.errors import (
    ConfigurationError,
    MalformedResponseError,
    NetworkError,
    ServiceError,
)

_logger = logging.getLogger(__name__)


async def request_json(
    http_client: httpx.AsyncClient,
    method: str,
    url: str,
    **kwargs: object,
) -> object:
    """Send a request and decode its JSON body, translating httpx failures."""
    try:
        response = await http_client.request(method, url, **kwargs)
    except httpx.TimeoutException as exc:
        raise NetworkError(f"{method} {url} timed out") from exc
    except httpx.HTTPError as exc:
        raise NetworkError(f"{method} {url} failed: {exc}") from exc
    except httpx.InvalidURL as exc:
        raise ConfigurationError(f"Invalid service URL {url!r}: {exc}") from exc

    if response.is_error:
        _logger.debug(
            "%s %s returned status=%s body=%s",
            method,
            url,
            response.status_code,
            response.text[:200],
        )
        raise ServiceError(response.status_code)

    try:
        return json.loads(response.content)
    except ValueError as exc:
        raise MalformedResponseError(f"{method} {url} returned invalid JSON") from exc
