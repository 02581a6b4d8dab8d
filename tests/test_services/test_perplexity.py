"""Tests for PerplexityService."""

import json

import httpx
import pytest
import respx
from httpx import Response

from app.exceptions.custom import (
    ConfigurationError,
    EmptyResult,
    RateLimitError,
    UpstreamError,
)
from app.services.perplexity import API_URL, MODEL, PerplexityService


@pytest.fixture
def service():
    client = httpx.AsyncClient()
    return PerplexityService(client, "test-api-key")


def _perplexity_response(content) -> dict:
    """Build a minimal Perplexity API response."""
    return {
        "id": "test-id",
        "model": "sonar",
        "choices": [{"index": 0, "message": {"content": content}, "finish_reason": "stop"}],
    }


@respx.mock
async def test_search_success(service):
    content = "Tony's Pizza, 123 Main St. Call (415) 555-0199 for orders."
    respx.post(API_URL).mock(
        return_value=Response(200, json=_perplexity_response(content))
    )

    result = await service.search("pizza in San Francisco")

    assert result == content


@respx.mock
async def test_search_sends_query_and_headers(service):
    respx.post(API_URL).mock(
        return_value=Response(200, json=_perplexity_response("answer"))
    )

    await service.search("dentists in Austin")

    req = respx.calls.last.request
    assert req.headers["authorization"] == "Bearer test-api-key"
    assert req.headers["content-type"] == "application/json"
    body = json.loads(req.content)
    assert body["model"] == MODEL
    assert body["messages"][0]["role"] == "system"
    assert body["messages"][1] == {"role": "user", "content": "dentists in Austin"}


@respx.mock
async def test_search_api_error(service):
    respx.post(API_URL).mock(return_value=Response(500, text="Internal Server Error"))

    with pytest.raises(UpstreamError) as exc_info:
        await service.search("query")

    assert exc_info.value.status_code == 500
    assert exc_info.value.body == "Internal Server Error"
    assert exc_info.value.service == "Perplexity"


@respx.mock
async def test_search_rate_limit(service):
    respx.post(API_URL).mock(return_value=Response(429, text="slow down"))

    with pytest.raises(RateLimitError) as exc_info:
        await service.search("query")

    assert exc_info.value.status_code == 429


@respx.mock
async def test_search_timeout(service):
    respx.post(API_URL).mock(side_effect=httpx.ReadTimeout("timeout"))

    with pytest.raises(UpstreamError) as exc_info:
        await service.search("query")

    assert exc_info.value.status_code is None
    assert exc_info.value.message == "ReadTimeout"


@respx.mock
async def test_search_empty_content(service):
    respx.post(API_URL).mock(
        return_value=Response(200, json=_perplexity_response("   "))
    )

    with pytest.raises(EmptyResult):
        await service.search("query")


@respx.mock
async def test_search_null_content(service):
    respx.post(API_URL).mock(
        return_value=Response(200, json=_perplexity_response(None))
    )

    with pytest.raises(EmptyResult):
        await service.search("query")


@respx.mock
async def test_search_unexpected_structure(service):
    respx.post(API_URL).mock(return_value=Response(200, json={"choices": []}))

    with pytest.raises(EmptyResult):
        await service.search("query")


@respx.mock
async def test_search_without_api_key_makes_no_request():
    route = respx.post(API_URL).mock(
        return_value=Response(200, json=_perplexity_response("answer"))
    )

    async with httpx.AsyncClient() as client:
        service = PerplexityService(client, "")
        with pytest.raises(ConfigurationError) as exc_info:
            await service.search("query")

    assert exc_info.value.setting == "PERPLEXITY_API_KEY"
    assert not route.called
