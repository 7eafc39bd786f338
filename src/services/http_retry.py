"""Bounded retry loop for outbound POST calls.

Transport errors and 5xx responses are retried with exponential backoff up
to ``max_retries`` extra attempts. Any other response is returned as is;
the caller decides what a non-200 means.
"""

import asyncio
from dataclasses import dataclass

import httpx
import logfire


@dataclass
class AttemptOutcome:
    """Final response or transport error of a retried call."""

    response: httpx.Response | None
    error: httpx.RequestError | None
    attempts: int


def _is_retryable(response: httpx.Response) -> bool:
    return response.status_code >= 500


async def post_with_retry(
    client: httpx.AsyncClient,
    url: str,
    *,
    operation: str,
    max_retries: int = 0,
    backoff_seconds: float = 0.5,
    **request_kwargs,
) -> AttemptOutcome:
    """POST ``url`` until it succeeds, fails permanently, or retries run out.

    Args:
        client: Open httpx client (carries the timeout)
        url: Target URL
        operation: Name used in log records
        max_retries: Extra attempts after the first one
        backoff_seconds: Delay before the first retry; doubles each time
        **request_kwargs: Passed to ``client.post``

    Returns:
        AttemptOutcome with either the last response or the last error.
    """
    attempt = 0
    while True:
        attempt += 1
        try:
            response = await client.post(url, **request_kwargs)
        except httpx.RequestError as e:
            if attempt > max_retries:
                return AttemptOutcome(response=None, error=e, attempts=attempt)
            reason = f"{type(e).__name__}: {e}"
        else:
            if not _is_retryable(response) or attempt > max_retries:
                return AttemptOutcome(response=response, error=None, attempts=attempt)
            reason = f"HTTP {response.status_code}"

        delay = backoff_seconds * (2 ** (attempt - 1))
        logfire.warn(
            "Outbound call failed, retrying",
            operation=operation,
            attempt=attempt,
            max_retries=max_retries,
            delay_seconds=delay,
            reason=reason,
        )
        await asyncio.sleep(delay)
