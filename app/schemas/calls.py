from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class TranscriptTurn(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: str
    message: str


class CallOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    phone_number: str
    transcript: tuple[TranscriptTurn, ...] = ()
    summary: str = ""
    conversation_id: str | None = None
    call_successful: str | None = None


class CallBatchResult(BaseModel):
    batch_id: str
    provider_batch_id: str | None = None
    task: str
    outcomes: list[CallOutcome]
    summary: str = ""  # provider summary of the call that completed the batch


class CallNumbersRequest(BaseModel):
    numbers: list[str]
    task: str
