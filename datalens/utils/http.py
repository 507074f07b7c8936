"""HTTP utilities providing retry/backoff semantics for transport failures."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

import httpx

logger = logging.getLogger(__name__)


class RetryConfig:
    def __init__(self, *, attempts: int = 2, backoff_seconds: float = 1.0) -> None:
        self.attempts = max(1, attempts)
        self.backoff_seconds = backoff_seconds


async def request_with_retry(
    func: Callable[..., Awaitable[httpx.Response]],
    *args,
    retry_config: RetryConfig | None = None,
    **kwargs,
) -> httpx.Response:
    """Call ``func`` until it returns a response or the attempts run out.

    Only transport failures (connection errors, timeouts) are retried; any
    response, whatever its status, is handed back to the caller.
    """
    config = retry_config or RetryConfig()
    attempt = 0
    last_exception: httpx.TransportError | None = None

    while attempt < config.attempts:
        try:
            return await func(*args, **kwargs)
        except httpx.TransportError as exc:
            last_exception = exc
            attempt += 1
            if attempt >= config.attempts:
                break
            logger.warning(
                "Transport error (attempt %d/%d): %s; retrying.",
                attempt,
                config.attempts,
                exc,
            )
            await asyncio.sleep(config.backoff_seconds * attempt)

    if last_exception is not None:
        raise last_exception
    raise RuntimeError("Request failed without raising an exception")


def response_detail(payload: object, fallback: str = "") -> str:
    """Pick the most descriptive error text from an upstream JSON body."""
    if isinstance(payload, dict):
        for key in ("detail", "message", "error"):
            value = payload.get(key)
            if isinstance(value, str) and value:
                return value
    return fallback


__all__ = ["RetryConfig", "request_with_retry", "response_detail"]
