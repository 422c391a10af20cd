"""Turn a callback-style transport call into a single-resolution future."""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any, Callable

from twooter_cli.errors import BadResponse, TransportFailure

logger = logging.getLogger(__name__)

SuccessCallback = Callable[[Any], None]
FailureCallback = Callable[[TransportFailure], None]
Invoke = Callable[[SuccessCallback, FailureCallback], None]


def bridge(invoke: Invoke, *, loop: asyncio.AbstractEventLoop | None = None) -> asyncio.Future:
    """Call ``invoke(on_success, on_failure)`` and return a future for its outcome.

    The first callback to fire settles the future; later calls are ignored so
    the future resolves exactly once. A failure is stored as ``BadResponse``
    and raised where the future is awaited, never inside the callback.
    """

    if loop is None:
        loop = asyncio.get_running_loop()
    future: asyncio.Future = loop.create_future()
    owner_thread = threading.get_ident()
    settled = False

    def _settle(apply: Callable[[], None], label: str) -> None:
        nonlocal settled
        if settled:
            logger.debug("ignoring duplicate %s callback", label)
            return
        settled = True
        if threading.get_ident() == owner_thread:
            apply()
        else:
            loop.call_soon_threadsafe(apply)

    def _resolve(value: Any) -> None:
        if not future.done():
            future.set_result(value)

    def _reject(failure: TransportFailure) -> None:
        if not future.done():
            future.set_exception(BadResponse(failure))

    def on_success(value: Any) -> None:
        _settle(lambda: _resolve(value), "success")

    def on_failure(failure: TransportFailure) -> None:
        if not isinstance(failure, TransportFailure):
            failure = TransportFailure(message=str(failure))
        _settle(lambda: _reject(failure), "failure")

    try:
        invoke(on_success, on_failure)
    except Exception as exc:
        logger.debug("transport invoke raised", exc_info=True)
        on_failure(TransportFailure(message=f"{type(exc).__name__}: {exc}"))
    return future
