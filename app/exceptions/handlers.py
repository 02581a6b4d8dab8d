import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from .custom import (
    ConfigurationError,
    DispatchFailed,
    InvalidRequest,
    RateLimitError,
    UpstreamError,
)

logger = logging.getLogger(__name__)


async def invalid_request_handler(_request: Request, exc: InvalidRequest) -> JSONResponse:
    logger.info("Rejected request: %s", exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message},
    )


async def configuration_error_handler(_request: Request, exc: ConfigurationError) -> JSONResponse:
    logger.error("Configuration error: %s", exc.message)
    return JSONResponse(
        status_code=503,
        content={"detail": exc.message},
    )


async def upstream_error_handler(_request: Request, exc: UpstreamError) -> JSONResponse:
    logger.error(
        "%s error: %s (status=%s, body=%s)",
        exc.service, exc.message, exc.status_code, exc.body,
    )
    return JSONResponse(
        status_code=502,
        content={"detail": f"{exc.service} error: {exc.message}"},
    )


async def rate_limit_error_handler(_request: Request, exc: RateLimitError) -> JSONResponse:
    logger.warning("Rate limit hit for %s", exc.service)
    return JSONResponse(
        status_code=429,
        content={"detail": f"Rate limit exceeded for {exc.service}"},
    )


async def dispatch_failed_handler(_request: Request, exc: DispatchFailed) -> JSONResponse:
    logger.error("ElevenLabs batch submission failed: status=%s body=%s", exc.status_code, exc.body)
    status = f"status {exc.status_code}" if exc.status_code is not None else "transport error"
    return JSONResponse(
        status_code=502,
        content={"detail": f"Batch call submission rejected by ElevenLabs ({status})"},
    )
