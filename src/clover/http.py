"""Async HTTP client shared by every stage of a run."""

from __future__ import annotations

import json
from typing import Any

import aiohttp
from loguru import logger

from clover.config import Settings
from clover.errors import TransportError


def browser_headers(settings: Settings) -> dict[str, str]:
    """Fixed header set mimicking the mini-app running in a desktop webview."""
    return {
        "Content-Type": "application/json",
        "Cache-Control": "no-cache",
        "Lang": "en",
        "Origin": settings.origin,
        "User-Agent": settings.user_agent,
        "Sec-Ch-Ua": '"Microsoft Edge";v="129", "Not=A?Brand";v="8", "Chromium";v="129", '
        '"Microsoft Edge WebView2";v="129"',
        "Sec-Ch-Ua-Mobile": "?0",
        "Sec-Ch-Ua-Platform": '"Windows"',
        "Sec-Fetch-Dest": "empty",
        "Sec-Fetch-Mode": "cors",
        "Sec-Fetch-Site": "same-site",
    }


def _decode_body(text: str) -> Any:
    if not text.strip():
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


class HttpClient:
    """Thin aiohttp wrapper: fixed headers, fixed timeout, no retries.

    Use as an async context manager; the underlying session is opened on enter
    and closed on exit unless one was passed in.
    """

    def __init__(self, settings: Settings, *, session: aiohttp.ClientSession | None = None) -> None:
        self.settings = settings
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> HttpClient:
        if self._session is None:
            self._session = aiohttp.ClientSession(
                headers=browser_headers(self.settings),
                timeout=aiohttp.ClientTimeout(total=self.settings.request_timeout),
            )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        _ = (exc_type, exc, tb)
        await self.close()

    async def close(self) -> None:
        if self._session is not None and self._owns_session:
            await self._session.close()
        self._session = None

    async def request(
        self,
        method: str,
        url: str,
        *,
        token: str | None = None,
        json: Any = None,
        params: dict[str, str] | None = None,
    ) -> Any:
        """Issue one request and return the decoded body of a 2xx response.

        Raises:
            TransportError: on a non-2xx status, a timeout or any client error.
        """
        if self._session is None:
            raise RuntimeError("HttpClient is not open. Use it as an async context manager.")

        headers = {"Authorization": token} if token else None
        logger.debug("http.request method={} url={}", method, url)
        try:
            async with self._session.request(method, url, headers=headers, json=json, params=params) as response:
                body = _decode_body(await response.text(errors="replace"))
                status = response.status
                response_headers = dict(response.headers)
        except TimeoutError as exc:
            raise TransportError(f"{method} {url} timed out after {self.settings.request_timeout}s") from exc
        except aiohttp.ClientError as exc:
            raise TransportError(f"{method} {url} failed: {type(exc).__name__}: {exc}") from exc

        if not 200 <= status < 300:
            raise TransportError(
                f"{method} {url} returned {status}",
                status=status,
                body=body,
                headers=response_headers,
            )
        return body

    async def post(self, url: str, **kwargs: Any) -> Any:
        return await self.request("POST", url, **kwargs)
