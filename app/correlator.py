"""In-memory correlation of provider callbacks to outstanding call batches.

A callback from the voice provider carries only the phone number it was
placed to, so a number may be pending in at most one live batch. All state
is mutated synchronously on the event loop thread; none of the methods
below await, which keeps callbacks for the same batch serialized.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum

from app.exceptions.custom import CallTimeout, InvalidRequest
from app.mappers.phone_numbers import correlation_key
from app.schemas.calls import CallBatchResult, CallOutcome

logger = logging.getLogger(__name__)


class CorrelationResult(StrEnum):
    matched = "matched"
    completed = "completed"
    unmatched = "unmatched"


def _retrieve_exception(future: asyncio.Future) -> None:
    # Timed-out batches whose caller went away would otherwise log
    # "exception was never retrieved" on garbage collection.
    if not future.cancelled():
        future.exception()


@dataclass
class CallBatch:
    batch_id: str
    task: str
    numbers: dict[str, str]  # correlation key -> number as submitted
    pending_numbers: set[str]
    completion: asyncio.Future
    created_at: datetime
    collected_results: list[CallOutcome] = field(default_factory=list)
    provider_batch_id: str | None = None

    @property
    def active(self) -> bool:
        return self.provider_batch_id is not None

    def pending(self) -> list[str]:
        return [n for key, n in self.numbers.items() if key in self.pending_numbers]


class CallCorrelator:
    def __init__(self) -> None:
        self._batches: dict[str, CallBatch] = {}
        self._by_number: dict[str, CallBatch] = {}

    def __len__(self) -> int:
        return len(self._batches)

    def get_batch(self, batch_id: str) -> CallBatch | None:
        return self._batches.get(batch_id)

    def is_pending(self, phone_number: str) -> bool:
        return correlation_key(phone_number) in self._by_number

    def reserve(self, numbers: list[str], task: str) -> CallBatch:
        """Register the recipients of a batch that is about to be submitted.

        Duplicate numbers collapse to one pending entry. Raises
        ``InvalidRequest`` for an empty list or when any number is already
        pending in another live batch.
        """
        keyed: dict[str, str] = {}
        for number in numbers:
            keyed.setdefault(correlation_key(number), number)
        if not keyed:
            raise InvalidRequest("At least one phone number is required")

        busy = [number for key, number in keyed.items() if key in self._by_number]
        if busy:
            raise InvalidRequest(
                f"Already being called in another batch: {', '.join(busy)}",
                status_code=409,
            )

        completion = asyncio.get_running_loop().create_future()
        completion.add_done_callback(_retrieve_exception)
        batch = CallBatch(
            batch_id=uuid.uuid4().hex[:12],
            task=task,
            numbers=keyed,
            pending_numbers=set(keyed),
            completion=completion,
            created_at=datetime.now(timezone.utc),
        )
        self._batches[batch.batch_id] = batch
        for key in keyed:
            self._by_number[key] = batch
        return batch

    def activate(self, batch: CallBatch, provider_batch_id: str) -> None:
        batch.provider_batch_id = provider_batch_id
        # Every callback may have arrived while the submission was in flight
        completion = batch.completion
        if completion.done() and not completion.cancelled() and completion.exception() is None:
            completion.result().provider_batch_id = provider_batch_id
            return
        logger.info(
            "Batch %s live (provider id %s), waiting for %d call(s)",
            batch.batch_id, provider_batch_id, len(batch.pending_numbers),
        )

    def abandon(self, batch: CallBatch, exc: BaseException | None = None) -> None:
        """Drop a batch from live state, failing its completion if ``exc`` is given."""
        self._remove(batch)
        if exc is not None and not batch.completion.done():
            batch.completion.set_exception(exc)

    def expire(self, batch_id: str, timeout: float) -> bool:
        batch = self._batches.get(batch_id)
        if batch is None:
            return False

        pending = batch.pending()
        logger.warning(
            "Batch %s timed out after %.0fs, still waiting for %s",
            batch_id, timeout, ", ".join(pending),
        )
        self.abandon(batch, CallTimeout(batch_id, timeout, pending))
        return True

    def record_completion(self, phone_number: str, outcome: CallOutcome) -> CorrelationResult:
        key = correlation_key(phone_number)
        batch = self._by_number.get(key)
        if batch is None or key not in batch.pending_numbers:
            logger.warning(
                "Unmatched call completion for %s (duplicate, late or unknown)",
                phone_number,
            )
            return CorrelationResult.unmatched

        batch.pending_numbers.discard(key)
        del self._by_number[key]
        reported = outcome.model_copy(update={"phone_number": batch.numbers[key]})
        batch.collected_results.append(reported)

        if batch.pending_numbers:
            logger.info(
                "Batch %s: %s reported, %d call(s) outstanding",
                batch.batch_id, reported.phone_number, len(batch.pending_numbers),
            )
            return CorrelationResult.matched

        result = CallBatchResult(
            batch_id=batch.batch_id,
            provider_batch_id=batch.provider_batch_id,
            task=batch.task,
            outcomes=list(batch.collected_results),
            summary=reported.summary,
        )
        self._remove(batch)
        if not batch.completion.done():
            batch.completion.set_result(result)
        logger.info(
            "Batch %s completed with %d outcome(s)",
            batch.batch_id, len(result.outcomes),
        )
        return CorrelationResult.completed

    def _remove(self, batch: CallBatch) -> None:
        self._batches.pop(batch.batch_id, None)
        for key in batch.numbers:
            if self._by_number.get(key) is batch:
                del self._by_number[key]
