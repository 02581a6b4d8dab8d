import logging
import sys
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from app.config import Settings
from app.correlator import CallCorrelator
from app.exceptions.custom import (
    ConfigurationError,
    DispatchFailed,
    InvalidRequest,
    RateLimitError,
    UpstreamError,
)
from app.exceptions.handlers import (
    configuration_error_handler,
    dispatch_failed_handler,
    invalid_request_handler,
    rate_limit_error_handler,
    upstream_error_handler,
)
from app.jobs import JobStore
from app.routers.calls import router as calls_router
from app.routers.lookup import router as lookup_router
from app.routers.webhooks import router as webhooks_router
from app.services.claude import ClaudeService
from app.services.dispatcher import CallDispatcher
from app.services.elevenlabs import ElevenLabsService
from app.services.lookup import PhoneLookupService
from app.services.perplexity import PerplexityService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = Settings()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stdout,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)

    async with httpx.AsyncClient(timeout=settings.http_timeout_seconds) as client:
        perplexity = PerplexityService(client, settings.perplexity_api_key)
        claude = ClaudeService(settings.anthropic_api_key)
        app.state.lookup_service = PhoneLookupService(perplexity, claude)

        elevenlabs = ElevenLabsService(
            client,
            settings.elevenlabs_api_key,
            settings.elevenlabs_agent_id,
            settings.elevenlabs_phone_number_id,
        )
        correlator = CallCorrelator()
        app.state.correlator = correlator
        app.state.dispatcher = CallDispatcher(
            elevenlabs, correlator, timeout=settings.call_timeout_seconds
        )
        app.state.job_store = JobStore()

        if not settings.elevenlabs_api_key:
            logger.warning("ElevenLabs not configured, /call_numbers will return 503")

        yield

        if len(correlator):
            logger.warning("Shutting down with %d call batch(es) still pending", len(correlator))


app = FastAPI(title="Phone Caller", lifespan=lifespan)

app.add_exception_handler(InvalidRequest, invalid_request_handler)
app.add_exception_handler(ConfigurationError, configuration_error_handler)
app.add_exception_handler(UpstreamError, upstream_error_handler)
app.add_exception_handler(RateLimitError, rate_limit_error_handler)
app.add_exception_handler(DispatchFailed, dispatch_failed_handler)

app.include_router(lookup_router)
app.include_router(calls_router)
app.include_router(webhooks_router)
