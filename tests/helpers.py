from app.schemas.calls import CallOutcome, TranscriptTurn


def make_outcome(phone_number: str, summary: str = "", *turns: tuple[str, str]) -> CallOutcome:
    return CallOutcome(
        phone_number=phone_number,
        transcript=tuple(TranscriptTurn(role=r, message=m) for r, m in turns),
        summary=summary,
    )


def callback_payload(
    phone_number: str | None,
    transcript: list[tuple[str, str]] | None = None,
    summary: str = "",
    event_type: str = "post_call_transcription",
) -> dict:
    """Minimal ElevenLabs post-call webhook body."""
    dynamic_variables = {"task": "confirm appointment"}
    if phone_number is not None:
        dynamic_variables["phone_number"] = phone_number
    return {
        "type": event_type,
        "event_timestamp": 1739537297,
        "data": {
            "agent_id": "test-agent-id",
            "conversation_id": f"conv-{phone_number}",
            "status": "done",
            "transcript": [
                {"role": role, "message": message, "time_in_call_secs": i}
                for i, (role, message) in enumerate(transcript or [])
            ],
            "metadata": {"call_duration_secs": 22},
            "analysis": {
                "call_successful": "success",
                "transcript_summary": summary,
                "data_collection_results": {},
            },
            "conversation_initiation_client_data": {
                "dynamic_variables": dynamic_variables,
            },
        },
    }
