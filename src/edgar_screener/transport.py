"""HTTP helpers shared by the feed and provider clients.

Requests are issued with a `requests.Session` on a worker thread so that the
event loop keeps running while a call is in flight. Every failure (timeout,
connection error, non-2xx status, undecodable body) is raised as a
`TransportError` carrying the status code when there is one.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping

import requests  # type: ignore[import-untyped]

from edgar_screener.errors import TransportError

log = logging.getLogger(__name__)

# Timeouts in seconds
METADATA_TIMEOUT = 10.0
FEED_TIMEOUT = 30.0


def new_session(headers: Mapping[str, str] | None = None) -> requests.Session:
    """Return a `requests.Session` with default headers applied."""
    session = requests.Session()
    if headers:
        session.headers.update(headers)
    return session


async def _get(
    session: requests.Session,
    url: str,
    params: Mapping[str, Any] | None,
    headers: Mapping[str, str] | None,
    timeout: float,
) -> requests.Response:
    log.debug("GET %s", url)
    try:
        resp = await asyncio.to_thread(
            session.get, url, params=params, headers=headers, timeout=timeout
        )
    except requests.Timeout as e:
        raise TransportError(f"GET {url} timed out after {timeout:.0f}s") from e
    except requests.RequestException as e:
        raise TransportError(f"GET {url} failed: {e.__class__.__name__}") from e

    if resp.status_code >= 400:
        raise TransportError(
            f"GET {url} returned HTTP {resp.status_code}",
            status_code=resp.status_code,
            detail=(resp.text or "")[:300],
        )
    return resp


async def get_json(
    session: requests.Session,
    url: str,
    *,
    params: Mapping[str, Any] | None = None,
    headers: Mapping[str, str] | None = None,
    timeout: float = METADATA_TIMEOUT,
) -> Any:
    """GET `url` and decode the body as JSON.

    Raises:
        TransportError: on any network, status or decoding failure.
    """
    resp = await _get(session, url, params, headers, timeout)
    try:
        return resp.json()
    except ValueError as e:
        raise TransportError(f"GET {url} returned a body that is not JSON") from e


async def get_bytes(
    session: requests.Session,
    url: str,
    *,
    params: Mapping[str, Any] | None = None,
    headers: Mapping[str, str] | None = None,
    timeout: float = FEED_TIMEOUT,
) -> bytes:
    """GET `url` and return the raw body.

    Raises:
        TransportError: on any network or status failure.
    """
    resp = await _get(session, url, params, headers, timeout)
    return resp.content
