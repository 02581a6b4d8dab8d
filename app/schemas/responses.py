from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from app.schemas.calls import CallBatchResult


class JobSubmittedResponse(BaseModel):
    job_id: str
    batch_id: str
    status: str
    message: str


class JobStatusResponse(BaseModel):
    job_id: str
    batch_id: str
    status: str
    created_at: datetime
    finished_at: datetime | None = None
    numbers: list[str] = []
    task: str = ""
    result: CallBatchResult | None = None
    report: str | None = None
    error: str | None = None


class CallbackAck(BaseModel):
    status: str  # "matched" | "completed" | "unmatched" | "ignored" | "invalid"
