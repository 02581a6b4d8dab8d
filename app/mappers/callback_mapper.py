from app.schemas.calls import CallOutcome, TranscriptTurn
from app.schemas.elevenlabs import PostCallTranscriptionData
from app.services.elevenlabs import CORRELATION_VARIABLE


def correlated_phone_number(data: PostCallTranscriptionData) -> str | None:
    """Phone number the dispatcher attached to this recipient, if echoed back."""
    client_data = data.conversation_initiation_client_data
    if client_data is None:
        return None
    value = client_data.dynamic_variables.get(CORRELATION_VARIABLE)
    if not isinstance(value, str) or not value.strip():
        return None
    return value.strip()


def build_call_outcome(data: PostCallTranscriptionData) -> CallOutcome | None:
    phone_number = correlated_phone_number(data)
    if phone_number is None:
        return None

    # Tool-call turns carry no message; turns without a role are dropped too
    transcript = tuple(
        TranscriptTurn(role=entry.role, message=entry.message)
        for entry in data.transcript
        if entry.role and entry.message
    )
    analysis = data.analysis
    return CallOutcome(
        phone_number=phone_number,
        transcript=transcript,
        summary=(analysis.transcript_summary or "") if analysis else "",
        conversation_id=data.conversation_id,
        call_successful=analysis.call_successful if analysis else None,
    )
