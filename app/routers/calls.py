import asyncio
import logging

from fastapi import APIRouter, HTTPException

from app.dependencies import DispatcherDep, JobStoreDep
from app.exceptions.custom import CallTimeout
from app.jobs import JobStatus, JobStore
from app.mappers.call_report import build_call_report
from app.schemas.calls import CallNumbersRequest
from app.schemas.responses import JobStatusResponse, JobSubmittedResponse
from app.services.dispatcher import PendingCallBatch

logger = logging.getLogger(__name__)

router = APIRouter()


async def _await_batch(
    job_id: str,
    pending: PendingCallBatch,
    store: JobStore,
) -> None:
    store.mark_running(job_id)
    try:
        result = await pending.result()
        store.mark_completed(job_id, result)
    except CallTimeout as exc:
        logger.warning("Call job %s timed out: %s", job_id, exc)
        store.mark_failed(job_id, str(exc))
    except Exception as exc:
        logger.exception("Call job %s failed", job_id)
        store.mark_failed(job_id, str(exc))


@router.post("/call_numbers", response_model=JobSubmittedResponse, status_code=202)
async def call_numbers(
    request: CallNumbersRequest,
    dispatcher: DispatcherDep,
    store: JobStoreDep,
) -> JobSubmittedResponse:
    pending = await dispatcher.submit(request.numbers, request.task)

    job = store.create_job(pending.batch_id, pending.numbers, pending.task)
    asyncio.create_task(_await_batch(job.job_id, pending, store))
    return JobSubmittedResponse(
        job_id=job.job_id,
        batch_id=pending.batch_id,
        status=job.status,
        message=f"Calling {len(pending.numbers)} number(s)",
    )


@router.get("/jobs/{job_id}", response_model=JobStatusResponse)
async def get_job(job_id: str, store: JobStoreDep) -> JobStatusResponse:
    job = store.get_job(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail="Job not found")

    report = None
    if job.status == JobStatus.completed and job.result is not None:
        report = build_call_report(job.result)

    return JobStatusResponse(
        job_id=job.job_id,
        batch_id=job.batch_id,
        status=job.status,
        created_at=job.created_at,
        finished_at=job.finished_at,
        numbers=job.numbers,
        task=job.task,
        result=job.result,
        report=report,
        error=job.error,
    )
