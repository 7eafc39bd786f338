"""Centralized logging configuration with Pydantic Logfire integration."""

import logging
from typing import Any

import logfire
from fastapi import FastAPI

from src.config import get_settings


def setup_logfire(app: FastAPI) -> None:
    """
    Initialize and configure Pydantic Logfire for observability.

    Sets up:
    - FastAPI instrumentation (request/response tracing)
    - Pydantic instrumentation (webhook model validation logging)
    - httpx instrumentation (Send API and reply-service calls)
    - Environment-aware Python logging format
    """
    settings = get_settings()

    logfire_config: dict[str, Any] = {
        "environment": settings.env,
        "send_to_logfire": "if-token-present",
    }
    if settings.logfire_token:
        logfire_config["token"] = settings.logfire_token

    logfire.configure(**logfire_config)

    logfire.instrument_fastapi(app)
    logfire.instrument_pydantic()
    logfire.instrument_httpx()

    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    if settings.env == "local":
        # Local: Console formatting for development
        logging.basicConfig(
            level=log_level,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )
    else:
        # Production: Logfire handles structured formatting
        logging.basicConfig(level=log_level, format="%(message)s")


def mask_pii(value: str | None, mask_char: str = "*") -> str:
    """
    Mask potentially sensitive data in logs.

    Args:
        value: Value to mask
        mask_char: Character to use for masking

    Returns:
        Masked string
    """
    if not value:
        return ""

    if len(value) <= 4:
        return mask_char * len(value)

    # Show first 2 and last 2 characters, mask the rest
    return f"{value[:2]}{mask_char * (len(value) - 4)}{value[-2:]}"


def redact_tokens(data: dict[str, Any]) -> dict[str, Any]:
    """
    Redact credentials from a dict before it is logged.

    Matches keys case-insensitively, so HTTP header names such as
    ``X-Parse-REST-API-Key`` are redacted as well as ``access_token``.

    Args:
        data: Dictionary that may contain sensitive values

    Returns:
        Copy of the dictionary with sensitive values masked
    """
    sensitive_fragments = ("token", "secret", "password", "authorization", "key")

    redacted: dict[str, Any] = {}
    for key, value in data.items():
        is_sensitive = any(part in key.lower() for part in sensitive_fragments)
        if isinstance(value, dict):
            redacted[key] = redact_tokens(value)
        elif is_sensitive and isinstance(value, str):
            redacted[key] = mask_pii(value)
        else:
            redacted[key] = value
    return redacted
