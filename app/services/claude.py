import json
import logging
import re

from anthropic import APIError, AsyncAnthropic
from pydantic import ValidationError

from app.exceptions.custom import ConfigurationError
from app.mappers.phone_numbers import extract_phone_numbers, normalize_phone_number
from app.schemas.lookup import ExtractedPhoneNumbers

logger = logging.getLogger(__name__)

MODEL = "claude-sonnet-4-20250514"

_JSON_RE = re.compile(r"\{[^{}]*\}")

_EXTRACTION_PROMPT = """\
You are an expert at extracting phone numbers from text. Extract all phone \
numbers from the provided text.

Rules:
1. Extract all phone numbers regardless of format (e.g. (555) 123-4567, \
555-123-4567, 555.123.4567, +1-555-123-4567).
2. Return US numbers as +1-XXX-XXX-XXXX; if the country code is missing, assume US (+1).
3. Remove any extensions or additional text.
4. Return only valid phone numbers.

Reply with ONLY a JSON object of the form {"phone_numbers": ["+1-555-123-4567"]}, \
no markdown fences, no explanation. If no phone numbers are found reply \
{"phone_numbers": []}."""


class ClaudeService:
    def __init__(self, api_key: str):
        self._client = AsyncAnthropic(api_key=api_key) if api_key else None

    def check_configured(self) -> None:
        if self._client is None:
            raise ConfigurationError("ANTHROPIC_API_KEY")

    async def complete(self, system_prompt: str, user_prompt: str) -> str | None:
        self.check_configured()
        try:
            response = await self._client.messages.create(
                model=MODEL,
                max_tokens=1024,
                system=system_prompt,
                messages=[{"role": "user", "content": user_prompt}],
            )
            return response.content[0].text
        except (APIError, IndexError, AttributeError):
            logger.exception("Claude API call failed")
            return None

    async def extract_phone_numbers(self, text: str) -> list[str]:
        """Structure the phone numbers found in ``text``.

        Falls back to a deterministic pattern scan of ``text`` when Claude
        is unreachable or its reply does not match ``ExtractedPhoneNumbers``.
        """
        reply = await self.complete(
            _EXTRACTION_PROMPT,
            f"Extract all phone numbers from this text:\n\n{text}",
        )
        numbers = self._parse_phone_numbers(reply) if reply is not None else None
        if numbers is None:
            logger.warning("Could not parse Claude extraction reply, scanning text instead")
            return extract_phone_numbers(text)

        logger.info("Claude extracted %d phone number(s)", len(numbers))
        return numbers

    @classmethod
    def _parse_phone_numbers(cls, reply: str) -> list[str] | None:
        parsed = cls._try_parse_json(reply)
        if parsed is None:
            return None
        try:
            extracted = ExtractedPhoneNumbers.model_validate(parsed)
        except ValidationError:
            return None

        numbers: list[str] = []
        for raw in extracted.phone_numbers:
            number = normalize_phone_number(raw) or raw.strip()
            if number and number not in numbers:
                numbers.append(number)
        return numbers

    @staticmethod
    def _try_parse_json(text: str) -> dict | None:
        # Strip markdown fences
        stripped = re.sub(r"```(?:json)?\s*", "", text).strip().rstrip("`")

        # Try direct parse
        try:
            obj = json.loads(stripped)
            if isinstance(obj, dict):
                return obj
        except (json.JSONDecodeError, ValueError):
            pass

        # Fallback: find JSON object in the text
        match = _JSON_RE.search(text)
        if match:
            try:
                return json.loads(match.group(0))
            except (json.JSONDecodeError, ValueError):
                pass

        return None
