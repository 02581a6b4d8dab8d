import json

import httpx
import pytest
import respx
from httpx import Response

from app.exceptions.custom import ConfigurationError, DispatchFailed
from app.services.elevenlabs import BATCH_CALL_URL, ElevenLabsService, build_recipient


@respx.mock
@pytest.mark.asyncio
async def test_submit_batch_call_success():
    respx.post(BATCH_CALL_URL).mock(
        return_value=Response(
            200,
            json={
                "id": "btcal_123",
                "phone_number_id": "phone-1",
                "name": "Task: ask opening hours",
                "agent_id": "agent-1",
                "created_at_unix": 1739537297,
                "scheduled_time_unix": 1739537297,
                "total_calls_dispatched": 0,
                "total_calls_scheduled": 2,
                "last_updated_at_unix": 1739537297,
                "status": "pending",
                "agent_name": "Caller",
                "phone_provider": "twilio",
            },
        )
    )

    async with httpx.AsyncClient() as client:
        service = ElevenLabsService(client, "key", "agent-1", "phone-1")
        resp = await service.submit_batch_call(
            ["+1-415-555-0199", "+1-415-555-0100"], "ask opening hours"
        )

    assert resp.id == "btcal_123"
    assert resp.total_calls_scheduled == 2
    assert resp.status == "pending"


@respx.mock
@pytest.mark.asyncio
async def test_submit_batch_call_request_body():
    respx.post(BATCH_CALL_URL).mock(return_value=Response(200, json={"id": "btcal_1"}))

    async with httpx.AsyncClient() as client:
        service = ElevenLabsService(client, "key", "agent-1", "phone-1")
        await service.submit_batch_call(["(415) 555-0199"], "ask opening hours")

    sent = respx.calls[0].request
    assert sent.headers["xi-api-key"] == "key"

    body = json.loads(sent.content)
    assert body["agent_id"] == "agent-1"
    assert body["agent_phone_number_id"] == "phone-1"
    assert body["call_name"].startswith("Task: ask opening hours - ")
    assert isinstance(body["scheduled_time_unix"], int)

    recipient = body["recipients"][0]
    assert recipient["phone_number"] == "+14155550199"
    client_data = recipient["conversation_initiation_client_data"]
    assert client_data["dynamic_variables"] == {
        "task": "ask opening hours",
        "phone_number": "(415) 555-0199",
    }
    agent = client_data["conversation_config_override"]["agent"]
    assert "ask opening hours" in agent["prompt"]["prompt"]
    assert agent["first_message"] == "Hello! I'm calling regarding ask opening hours"
    assert agent["language"] == "en"


@respx.mock
@pytest.mark.asyncio
async def test_submit_batch_call_error_status():
    respx.post(BATCH_CALL_URL).mock(return_value=Response(500, text="Server error"))

    async with httpx.AsyncClient() as client:
        service = ElevenLabsService(client, "key", "agent-1", "phone-1")
        with pytest.raises(DispatchFailed) as exc_info:
            await service.submit_batch_call(["+14155550199"], "task")

    assert exc_info.value.status_code == 500
    assert exc_info.value.body == "Server error"


@respx.mock
@pytest.mark.asyncio
async def test_submit_batch_call_rate_limit_is_dispatch_failure():
    respx.post(BATCH_CALL_URL).mock(return_value=Response(429, text="Rate limited"))

    async with httpx.AsyncClient() as client:
        service = ElevenLabsService(client, "key", "agent-1", "phone-1")
        with pytest.raises(DispatchFailed) as exc_info:
            await service.submit_batch_call(["+14155550199"], "task")

    assert exc_info.value.status_code == 429


@respx.mock
@pytest.mark.asyncio
async def test_submit_batch_call_timeout():
    respx.post(BATCH_CALL_URL).mock(side_effect=httpx.ReadTimeout("timeout"))

    async with httpx.AsyncClient() as client:
        service = ElevenLabsService(client, "key", "agent-1", "phone-1")
        with pytest.raises(DispatchFailed) as exc_info:
            await service.submit_batch_call(["+14155550199"], "task")

    assert exc_info.value.status_code is None
    assert "timeout" in exc_info.value.body


@respx.mock
@pytest.mark.asyncio
async def test_submit_batch_call_unexpected_body():
    respx.post(BATCH_CALL_URL).mock(return_value=Response(200, text="<html>ok</html>"))

    async with httpx.AsyncClient() as client:
        service = ElevenLabsService(client, "key", "agent-1", "phone-1")
        with pytest.raises(DispatchFailed) as exc_info:
            await service.submit_batch_call(["+14155550199"], "task")

    assert exc_info.value.status_code == 200


@pytest.mark.asyncio
async def test_submit_batch_call_requires_api_key():
    async with httpx.AsyncClient() as client:
        service = ElevenLabsService(client, "", "agent-1", "phone-1")
        with pytest.raises(ConfigurationError) as exc_info:
            await service.submit_batch_call(["+14155550199"], "task")

    assert exc_info.value.setting == "ELEVENLABS_API_KEY"


def test_build_recipient_keeps_submitted_number_for_correlation():
    recipient = build_recipient("+1-555-000-0001", "confirm appointment")

    assert recipient.phone_number == "+15550000001"
    data = recipient.conversation_initiation_client_data
    assert data.dynamic_variables["phone_number"] == "+1-555-000-0001"
    assert data.dynamic_variables["task"] == "confirm appointment"


def test_build_recipient_dials_international_number_as_given():
    recipient = build_recipient("+4930123456", "confirm appointment")

    assert recipient.phone_number == "+4930123456"
    assert recipient.conversation_initiation_client_data.dynamic_variables["phone_number"] == (
        "+4930123456"
    )
