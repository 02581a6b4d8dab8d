from fastapi import APIRouter

from app.dependencies import LookupDep
from app.schemas.lookup import PhoneLookupRequest, PhoneLookupResponse

router = APIRouter()


@router.post("/find_phone_numbers", response_model=PhoneLookupResponse)
async def find_phone_numbers(
    request: PhoneLookupRequest,
    service: LookupDep,
) -> PhoneLookupResponse:
    return await service.find_phone_numbers(request.query)
