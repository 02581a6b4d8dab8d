import logging

from fastapi import APIRouter, Request
from pydantic import ValidationError

from app.dependencies import CorrelatorDep
from app.mappers.callback_mapper import build_call_outcome
from app.schemas.elevenlabs import PostCallTranscriptionData, WebhookEvent
from app.schemas.responses import CallbackAck

logger = logging.getLogger(__name__)

router = APIRouter()

POST_CALL_TRANSCRIPTION = "post_call_transcription"


@router.post("/call-callback", response_model=CallbackAck)
async def call_callback(request: Request, correlator: CorrelatorDep) -> CallbackAck:
    """ElevenLabs post-call webhook.

    Always answers 200: the provider disables webhooks that keep failing,
    and a callback we cannot use is only worth a log line.
    """
    try:
        event = WebhookEvent.model_validate(await request.json())
    except ValueError:
        logger.warning("Discarding malformed call callback")
        return CallbackAck(status="invalid")

    if event.type != POST_CALL_TRANSCRIPTION:
        logger.debug("Ignoring call callback of type %s", event.type)
        return CallbackAck(status="ignored")

    try:
        data = PostCallTranscriptionData.model_validate(event.data)
    except ValidationError:
        logger.warning("Discarding post-call callback with unexpected data shape")
        return CallbackAck(status="invalid")

    outcome = build_call_outcome(data)
    if outcome is None:
        logger.warning(
            "Post-call callback for conversation %s has no phone number to correlate",
            data.conversation_id,
        )
        return CallbackAck(status="invalid")

    result = correlator.record_completion(outcome.phone_number, outcome)
    return CallbackAck(status=result.value)


@router.get("/call-callback/health")
async def call_callback_health() -> dict[str, str]:
    return {"status": "ok"}
