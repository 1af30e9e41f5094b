"""HTTP transport shared by the upstream endpoint modules."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from raspinfo.exceptions import UpstreamError

_logger = logging.getLogger(__name__)

USER_AGENT = "raspinfo/1.0"


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`HttpTransport`) concrete.
    """

    async def get_text(
        self,
        url: str,
        *,
        source: str,
        params: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> str: ...

    async def get_json(
        self,
        url: str,
        *,
        source: str,
        params: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any: ...

    async def post_json(
        self,
        url: str,
        payload: Mapping[str, Any],
        *,
        source: str,
        headers: Mapping[str, str] | None = None,
    ) -> Any: ...


class HttpTransport:
    """aiohttp based transport with a per-request timeout.

    Every failure (network error, timeout, non-200 status, invalid JSON) is
    raised as :class:`UpstreamError` so callers only deal with one type.
    """

    def __init__(self, http_session: aiohttp.ClientSession, *, timeout: float = 10.0) -> None:
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    async def _request(
        self,
        method: str,
        url: str,
        *,
        source: str,
        params: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
        body: str | None = None,
    ) -> str:
        request_headers = {"user-agent": USER_AGENT}
        if body is not None:
            request_headers["content-type"] = "application/json"
        if headers:
            request_headers.update(headers)

        _logger.debug("%s %s", method, url)

        try:
            async with self._http.request(
                method,
                url,
                params=params,
                data=body,
                headers=request_headers,
                timeout=self._timeout,
            ) as resp:
                text = await resp.text()
                if resp.status != 200:
                    raise UpstreamError(
                        f"{source} api returned status: {resp.status}",
                        status_code=resp.status,
                        source=source,
                    )
        except UpstreamError:
            raise
        except asyncio.TimeoutError as exc:
            raise UpstreamError(f"{source} request timed out", source=source) from exc
        except aiohttp.ClientError as exc:
            raise UpstreamError(f"failed to fetch {source} data: {exc}", source=source) from exc
        except UnicodeDecodeError as exc:
            raise UpstreamError(f"failed to decode {source} response: {exc}", source=source) from exc

        return text

    async def get_text(
        self,
        url: str,
        *,
        source: str,
        params: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> str:
        return await self._request("GET", url, source=source, params=params, headers=headers)

    async def get_json(
        self,
        url: str,
        *,
        source: str,
        params: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        text = await self._request("GET", url, source=source, params=params, headers=headers)
        return _decode_json(text, source)

    async def post_json(
        self,
        url: str,
        payload: Mapping[str, Any],
        *,
        source: str,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        body = json.dumps(payload, separators=(",", ":"))
        text = await self._request("POST", url, source=source, headers=headers, body=body)
        return _decode_json(text, source)


def _decode_json(text: str, source: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise UpstreamError(f"failed to decode {source} json: {text[:200]}", source=source) from exc
