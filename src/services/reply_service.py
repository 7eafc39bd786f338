"""Client for the external reply/training backend.

The backend is a Parse Server exposing cloud functions at
``<base_url>/<function_name>``. Every function answers
``{"result": {"msg": ..., "replyMsg": ...}}``; callers only need
``replyMsg``.
"""

import time
from typing import Any

import httpx
import logfire
from pydantic import ValidationError

from src.config import Settings, get_settings
from src.logging_config import redact_tokens
from src.models.reply_models import CloudFunctionResponse
from src.services.http_retry import post_with_retry


class ReplyServiceClient:
    """Call cloud functions on the reply service.

    A call that fails for any reason (transport error, non-200, bad JSON)
    is logged and yields None, which callers treat as "no answer".

    Example:
        >>> client = ReplyServiceClient.from_settings(get_settings())
        >>> await client.call_function("getReplyMsg", {"msg": "hello"})
        'hi there'
    """

    def __init__(
        self,
        base_url: str,
        app_id: str,
        rest_key: str,
        timeout_seconds: float,
        max_retries: int = 0,
        backoff_seconds: float = 0.5,
    ):
        self._base_url = base_url.rstrip("/")
        self._headers = {
            "Content-Type": "application/json",
            "X-Parse-Application-Id": app_id,
            "X-Parse-REST-API-Key": rest_key,
        }
        self._timeout = timeout_seconds
        self._max_retries = max_retries
        self._backoff = backoff_seconds

    @classmethod
    def from_settings(cls, settings: Settings) -> "ReplyServiceClient":
        return cls(
            base_url=settings.reply_service_base_url,
            app_id=settings.reply_service_app_id,
            rest_key=settings.reply_service_rest_key,
            timeout_seconds=settings.reply_service_timeout_seconds,
            max_retries=settings.reply_service_max_retries,
            backoff_seconds=settings.retry_backoff_seconds,
        )

    async def call_function(self, method_name: str, body: dict[str, Any]) -> str | None:
        """Invoke a cloud function and return its ``result.replyMsg``.

        Args:
            method_name: Cloud function name, e.g. "getReplyMsg"
            body: JSON request body

        Returns:
            The reply text ("" when the function returned none), or None if
            the call failed.
        """
        start_time = time.time()
        url = f"{self._base_url}/{method_name}"

        logfire.info(
            "Calling reply service",
            method=method_name,
            request=body,
            headers=redact_tokens(self._headers),
        )

        async with httpx.AsyncClient(timeout=self._timeout) as client:
            outcome = await post_with_retry(
                client,
                url,
                operation=f"reply_service:{method_name}",
                max_retries=self._max_retries,
                backoff_seconds=self._backoff,
                headers=self._headers,
                json=body,
            )
        elapsed_ms = (time.time() - start_time) * 1000

        if outcome.error is not None:
            logfire.error(
                "Reply service request error",
                method=method_name,
                error=str(outcome.error),
                error_type=type(outcome.error).__name__,
                attempts=outcome.attempts,
                response_time_ms=elapsed_ms,
            )
            return None

        response = outcome.response
        if response.status_code != 200:
            logfire.error(
                "Reply service call failed",
                method=method_name,
                status_code=response.status_code,
                response_body=response.text[:500],
                attempts=outcome.attempts,
                response_time_ms=elapsed_ms,
            )
            return None

        try:
            parsed = CloudFunctionResponse.model_validate_json(response.content)
        except ValidationError as e:
            logfire.error(
                "Reply service returned an unexpected body",
                method=method_name,
                error=str(e),
                response_body=response.text[:500],
            )
            return None

        reply = parsed.result.reply_msg or ""
        logfire.info(
            "Reply service answered",
            method=method_name,
            result_msg=parsed.result.msg,
            reply_msg=reply,
            response_time_ms=elapsed_ms,
        )
        return reply


def get_reply_service_client(settings: Settings | None = None) -> ReplyServiceClient:
    """Factory function to create a ReplyServiceClient from settings."""
    return ReplyServiceClient.from_settings(settings or get_settings())
