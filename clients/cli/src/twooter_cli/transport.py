"""HTTP transport adapters with a success/failure callback contract."""

from __future__ import annotations

import asyncio
import logging
from typing import Mapping, Optional, Protocol

import aiohttp

from twooter_cli.bridge import FailureCallback, SuccessCallback
from twooter_cli.errors import TransportFailure
from twooter_cli.redact import mask_secrets

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 10.0


class Transport(Protocol):
    def send(
        self,
        url: str,
        method: str,
        headers: Mapping[str, str],
        body: Optional[bytes],
        on_success: SuccessCallback,
        on_failure: FailureCallback,
    ) -> None:
        """Start the request; call exactly one of the callbacks exactly once."""


class AiohttpTransport:
    """Transport backed by a lazily created ``aiohttp.ClientSession``.

    Each ``send`` schedules a task on the running loop. The decoded response
    text goes to ``on_success``; status codes >= 400, connection errors and
    timeouts go to ``on_failure`` as a ``TransportFailure``.
    """

    def __init__(self, timeout_s: float = DEFAULT_TIMEOUT_S, session: aiohttp.ClientSession | None = None) -> None:
        self.timeout_s = timeout_s
        self._session = session
        self._owns_session = session is None
        self._tasks: set[asyncio.Task] = set()

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout_s))
            self._owns_session = True
        return self._session

    def send(
        self,
        url: str,
        method: str,
        headers: Mapping[str, str],
        body: Optional[bytes],
        on_success: SuccessCallback,
        on_failure: FailureCallback,
    ) -> None:
        task = asyncio.get_running_loop().create_task(
            self._perform(url, method, dict(headers), body, on_success, on_failure)
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _perform(
        self,
        url: str,
        method: str,
        headers: dict[str, str],
        body: Optional[bytes],
        on_success: SuccessCallback,
        on_failure: FailureCallback,
    ) -> None:
        logger.debug("%s %s", method, url)
        try:
            async with self._get_session().request(method, url, headers=headers, data=body) as response:
                raw = await response.read()
                text = raw.decode("utf-8", errors="replace")
                status = response.status
                reason = response.reason or ""
        except asyncio.TimeoutError:
            on_failure(TransportFailure(message=f"timed out after {self.timeout_s}s"))
            return
        except aiohttp.ClientError as exc:
            on_failure(TransportFailure(message=f"{type(exc).__name__}: {exc}"))
            return
        except Exception as exc:
            logger.exception("%s %s failed unexpectedly", method, url)
            on_failure(TransportFailure(message=f"{type(exc).__name__}: {exc}"))
            return
        if status >= 400:
            logger.info("%s %s -> %s %s", method, url, status, mask_secrets(text[:200]))
            on_failure(TransportFailure(message=reason or "request failed", status=status, body=text))
            return
        on_success(text)

    async def close(self) -> None:
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def __aenter__(self) -> "AiohttpTransport":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
