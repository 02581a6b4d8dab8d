import logging

from app.exceptions.custom import EmptyResult, InvalidRequest
from app.schemas.lookup import PhoneLookupResponse
from app.services.claude import ClaudeService
from app.services.perplexity import PerplexityService

logger = logging.getLogger(__name__)


class PhoneLookupService:
    def __init__(self, search: PerplexityService, extraction: ClaudeService):
        self._search = search
        self._extraction = extraction

    async def find_phone_numbers(self, query: str) -> PhoneLookupResponse:
        if not query or not query.strip():
            raise InvalidRequest("A search query is required")

        # Both credentials are checked before the first network call.
        self._extraction.check_configured()

        try:
            answer = await self._search.search(query)
        except EmptyResult:
            logger.info("No search answer for %r", query)
            return PhoneLookupResponse()

        numbers = await self._extraction.extract_phone_numbers(answer)
        return PhoneLookupResponse(phone_numbers=numbers, source=answer)
