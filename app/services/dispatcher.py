import asyncio
import logging

from app.correlator import CallBatch, CallCorrelator
from app.exceptions.custom import InvalidRequest
from app.schemas.calls import CallBatchResult
from app.services.elevenlabs import ElevenLabsService

logger = logging.getLogger(__name__)

DEFAULT_CALL_TIMEOUT = 1800  # seconds


class PendingCallBatch:
    """Handle returned by ``CallDispatcher.submit``; resolves when every call reported."""

    def __init__(self, batch: CallBatch):
        self._batch = batch

    @property
    def batch_id(self) -> str:
        return self._batch.batch_id

    @property
    def provider_batch_id(self) -> str | None:
        return self._batch.provider_batch_id

    @property
    def numbers(self) -> list[str]:
        return list(self._batch.numbers.values())

    @property
    def task(self) -> str:
        return self._batch.task

    def done(self) -> bool:
        return self._batch.completion.done()

    async def result(self) -> CallBatchResult:
        # Shielded: a cancelled waiter leaves the batch to finish or time out.
        return await asyncio.shield(self._batch.completion)


class CallDispatcher:
    def __init__(
        self,
        elevenlabs: ElevenLabsService,
        correlator: CallCorrelator,
        timeout: float | None = DEFAULT_CALL_TIMEOUT,
    ):
        self._elevenlabs = elevenlabs
        self._correlator = correlator
        self._timeout = timeout

    async def submit(self, numbers: list[str], task: str) -> PendingCallBatch:
        numbers = [n.strip() for n in numbers if n and n.strip()]
        if not numbers:
            raise InvalidRequest("At least one phone number is required")
        if not task or not task.strip():
            raise InvalidRequest("A task description is required")

        self._elevenlabs.check_configured()

        # Reserved before submitting so a concurrent submit cannot claim the
        # same numbers while the provider request is in flight.
        batch = self._correlator.reserve(numbers, task)
        try:
            response = await self._elevenlabs.submit_batch_call(
                list(batch.numbers.values()), task
            )
        except BaseException:
            self._correlator.abandon(batch)
            raise

        self._correlator.activate(batch, response.id)

        if self._timeout:
            handle = asyncio.get_running_loop().call_later(
                self._timeout, self._correlator.expire, batch.batch_id, self._timeout
            )
            batch.completion.add_done_callback(lambda _: handle.cancel())

        return PendingCallBatch(batch)
