from typing import Annotated

from fastapi import Depends, Request

from app.correlator import CallCorrelator
from app.jobs import JobStore
from app.services.dispatcher import CallDispatcher
from app.services.lookup import PhoneLookupService


def get_lookup_service(request: Request) -> PhoneLookupService:
    return request.app.state.lookup_service


def get_dispatcher(request: Request) -> CallDispatcher:
    return request.app.state.dispatcher


def get_correlator(request: Request) -> CallCorrelator:
    return request.app.state.correlator


def get_job_store(request: Request) -> JobStore:
    return request.app.state.job_store


LookupDep = Annotated[PhoneLookupService, Depends(get_lookup_service)]
DispatcherDep = Annotated[CallDispatcher, Depends(get_dispatcher)]
CorrelatorDep = Annotated[CallCorrelator, Depends(get_correlator)]
JobStoreDep = Annotated[JobStore, Depends(get_job_store)]
