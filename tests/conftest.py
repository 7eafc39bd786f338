"""Shared pytest fixtures and configuration.

Fixture Categories:
1. Settings: mock_settings, app_secret
2. Messaging: mock_messaging_service, mock_reply_client, message_router, event_classifier
3. Payload builders: make_message_event, make_envelope, sign_body
4. Infrastructure: test_client, mock_logfire, respx_mock
"""

import hashlib
import hmac
import json
import os
from typing import Any
from unittest.mock import AsyncMock, MagicMock, Mock

import pytest
import respx

# Required settings must exist before any module calls get_settings()
os.environ.setdefault("MESSENGER_APP_SECRET", "test-app-secret")
os.environ.setdefault("MESSENGER_VALIDATION_TOKEN", "test-verify-token")
os.environ.setdefault("MESSENGER_PAGE_ACCESS_TOKEN", "test-page-token")
os.environ.setdefault("LOGFIRE_IGNORE_NO_CONFIG", "1")

from src.config import Settings, get_settings
from src.services.event_classifier import EventClassifier
from src.services.message_router import MessageRouter
from src.services.messaging_protocol import MockMessagingService
from src.services.reply_service import ReplyServiceClient
from src.services.training_relay import TrainingRelay

TEST_APP_SECRET = "test-app-secret"
TEST_REPLY_SERVICE_URL = "https://reply.test/parse/functions"

# Modules that read settings through their own get_settings import
_SETTINGS_CONSUMERS = (
    "src.config",
    "src.main",
    "src.logging_config",
    "src.api.webhook",
    "src.services.facebook_service",
    "src.services.reply_service",
    "src.services.message_router",
    "src.services.event_classifier",
    "src.cli.bot_cli",
)


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    """Keep the lru_cache of get_settings from leaking between tests."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def respx_mock():
    """Respx mock fixture for HTTP mocking."""
    with respx.mock:
        yield respx


# =============================================================================
# Settings
# =============================================================================


@pytest.fixture
def app_secret() -> str:
    return TEST_APP_SECRET


@pytest.fixture
def mock_settings(monkeypatch):
    """Mock application settings, patched into every module that reads them."""
    settings = Settings(
        messenger_app_secret=TEST_APP_SECRET,
        messenger_validation_token="test-verify-token",
        messenger_page_access_token="test-page-token",
        reply_service_base_url=TEST_REPLY_SERVICE_URL,
        reply_service_app_id="test-app-id",
        reply_service_rest_key="test-rest-key",
        retry_backoff_seconds=0.0,
        env="local",
        logfire_token=None,
    )

    for module in _SETTINGS_CONSUMERS:
        monkeypatch.setattr(f"{module}.get_settings", lambda: settings)
    return settings


# =============================================================================
# Messaging Mocks
# =============================================================================


@pytest.fixture
def mock_messaging_service():
    """Recording messaging service; inspect .sent_messages / .sent_texts."""
    return MockMessagingService()


@pytest.fixture
def mock_reply_client():
    """Mock reply-service client.

    call_function() returns "" (no rule matched) unless the test sets
    return_value or side_effect.
    """
    client = MagicMock(spec=ReplyServiceClient)
    client.call_function = AsyncMock(return_value="")
    return client


@pytest.fixture
def message_router(mock_messaging_service, mock_reply_client):
    """MessageRouter wired to the recording messaging service."""
    return MessageRouter(
        messaging_service=mock_messaging_service,
        reply_client=mock_reply_client,
        training_relay=TrainingRelay(reply_client=mock_reply_client),
    )


@pytest.fixture
def event_classifier(mock_messaging_service, message_router):
    return EventClassifier(
        messaging_service=mock_messaging_service, router=message_router
    )


# =============================================================================
# Payload Builders
# =============================================================================


@pytest.fixture
def make_message_event():
    """Build a raw messaging event dict with a message variant."""

    def _make(sender_id: str = "user-1", **message: Any) -> dict:
        message.setdefault("mid", "mid.1")
        return {
            "sender": {"id": sender_id},
            "recipient": {"id": "page-1"},
            "timestamp": 1458692752478,
            "message": message,
        }

    return _make


@pytest.fixture
def make_envelope():
    """Wrap raw messaging events into a page envelope."""

    def _make(*events: dict, object_type: str = "page", changes: list | None = None) -> dict:
        entry: dict[str, Any] = {
            "id": "page-1",
            "time": 1458692752478,
            "messaging": list(events),
        }
        if changes is not None:
            entry["changes"] = changes
        return {"object": object_type, "entry": [entry]}

    return _make


@pytest.fixture
def sign_body():
    """Return (body bytes, x-hub-signature header) for a payload."""

    def _sign(payload: dict, secret: str = TEST_APP_SECRET) -> tuple[bytes, str]:
        body = json.dumps(payload).encode("utf-8")
        digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha1).hexdigest()
        return body, f"sha1={digest}"

    return _sign


# =============================================================================
# Infrastructure
# =============================================================================


@pytest.fixture
def test_client(mock_settings, event_classifier):
    """FastAPI TestClient with the event classifier swapped for the mock-wired one."""
    from fastapi.testclient import TestClient

    from src.main import app
    from src.services.event_classifier import get_event_classifier

    app.dependency_overrides[get_event_classifier] = lambda: event_classifier
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def mock_logfire(monkeypatch):
    """
    Mock Logfire for tests that assert on log calls.

    Replaces the module-level ``logfire`` of our services with a mock
    whose calls can be inspected.
    """
    from contextlib import contextmanager

    @contextmanager
    def mock_span(*args, **kwargs):
        yield {}

    mock_logfire_module = MagicMock()
    mock_logfire_module.info = Mock()
    mock_logfire_module.warn = Mock()
    mock_logfire_module.error = Mock()
    mock_logfire_module.span = mock_span

    for module in (
        "src.services.signature",
        "src.services.http_retry",
        "src.services.facebook_service",
        "src.services.reply_service",
        "src.services.training_relay",
        "src.services.message_router",
        "src.services.event_classifier",
        "src.middleware.correlation_id",
        "src.logging_config",
    ):
        monkeypatch.setattr(f"{module}.logfire", mock_logfire_module)

    return mock_logfire_module
