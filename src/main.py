"""FastAPI application initialization."""

import os
from contextlib import asynccontextmanager

import logfire
import sentry_sdk
from fastapi import FastAPI
from sentry_sdk.integrations.fastapi import FastApiIntegration

from src.api import health, webhook
from src.config import get_settings
from src.logging_config import setup_logfire
from src.middleware.correlation_id import CorrelationIDMiddleware

APP_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager.

    Loading settings here makes startup fail when the app secret,
    validation token or page access token is missing.
    """
    settings = get_settings()

    setup_logfire(app)

    if settings.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            traces_sample_rate=settings.sentry_traces_sample_rate,
            send_default_pii=False,
            integrations=[FastApiIntegration()],
        )

    logfire.info(
        "Application startup complete",
        environment=settings.env,
        graph_api_version=settings.graph_api_version,
        reply_service=settings.reply_service_base_url,
    )

    yield

    logfire.info("Application shutdown complete")


app = FastAPI(
    title="Messenger Quiz Bot",
    description="Messenger webhook bot with keyword demos, quizzes and a trainable reply service",
    version=APP_VERSION,
    lifespan=lifespan,
)

app.add_middleware(CorrelationIDMiddleware)

app.include_router(health.router, tags=["health"])
app.include_router(webhook.router, prefix="/webhook", tags=["webhook"])


@app.get("/")
def root():
    """Root endpoint."""
    settings = get_settings()
    return {
        "message": "Messenger Quiz Bot API",
        "graph_api_version": settings.graph_api_version,
        "version": APP_VERSION,
    }


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", 5000))
    uvicorn.run(
        "src.main:app", host="0.0.0.0", port=port, reload=os.getenv("ENV") == "local"
    )
