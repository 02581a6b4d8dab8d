import logging
import time
from datetime import datetime, timezone

import httpx

from app.exceptions.custom import ConfigurationError, DispatchFailed
from app.mappers.phone_numbers import correlation_key
from app.schemas.elevenlabs import (
    AgentOverride,
    AgentPromptOverride,
    BatchCallRecipient,
    BatchCallRequest,
    BatchCallResponse,
    ConversationConfigOverride,
    ConversationInitiationClientData,
)

logger = logging.getLogger(__name__)

BATCH_CALL_URL = "https://api.elevenlabs.io/v1/convai/batch-calling/submit"

# Echoed back in the post-call webhook; used to correlate the callback.
CORRELATION_VARIABLE = "phone_number"


def build_recipient(phone_number: str, task: str) -> BatchCallRecipient:
    return BatchCallRecipient(
        phone_number=correlation_key(phone_number),
        conversation_initiation_client_data=ConversationInitiationClientData(
            conversation_config_override=ConversationConfigOverride(
                agent=AgentOverride(
                    prompt=AgentPromptOverride(
                        prompt=f"You are an assistant making a phone call. Your task is: {task}",
                    ),
                    first_message=f"Hello! I'm calling regarding {task}",
                    language="en",
                ),
            ),
            dynamic_variables={"task": task, CORRELATION_VARIABLE: phone_number},
        ),
    )


class ElevenLabsService:
    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str,
        agent_id: str,
        phone_number_id: str,
    ):
        self._client = client
        self._api_key = api_key
        self._headers = {"xi-api-key": api_key}
        self._agent_id = agent_id
        self._phone_number_id = phone_number_id

    def check_configured(self) -> None:
        for setting, value in (
            ("ELEVENLABS_API_KEY", self._api_key),
            ("ELEVENLABS_AGENT_ID", self._agent_id),
            ("ELEVENLABS_PHONE_NUMBER_ID", self._phone_number_id),
        ):
            if not value:
                raise ConfigurationError(setting)

    async def submit_batch_call(
        self, phone_numbers: list[str], task: str
    ) -> BatchCallResponse:
        """Submit one batch with a recipient per phone number.

        Raises ``DispatchFailed`` on transport errors and on any non-2xx
        response.
        """
        self.check_configured()

        request = BatchCallRequest(
            call_name=f"Task: {task} - {datetime.now(timezone.utc).isoformat()}",
            agent_id=self._agent_id,
            agent_phone_number_id=self._phone_number_id,
            recipients=[build_recipient(n, task) for n in phone_numbers],
            scheduled_time_unix=int(time.time()),
        )

        logger.info("Submitting batch call to %s", ", ".join(phone_numbers))
        try:
            resp = await self._client.post(
                BATCH_CALL_URL,
                json=request.model_dump(exclude_none=True),
                headers=self._headers,
            )
        except httpx.HTTPError as exc:
            logger.exception("ElevenLabs batch submission failed")
            raise DispatchFailed(None, str(exc) or type(exc).__name__) from exc

        if not resp.is_success:
            raise DispatchFailed(resp.status_code, resp.text)

        try:
            data = BatchCallResponse.model_validate(resp.json())
        except ValueError as exc:
            # pydantic's ValidationError is a ValueError too
            raise DispatchFailed(resp.status_code, resp.text) from exc
        logger.info(
            "Batch call submitted: id=%s dispatched=%s scheduled=%s",
            data.id, data.total_calls_dispatched, data.total_calls_scheduled,
        )
        return data
