import re

# Optional leading country code, optional parenthesized area code, then
# 3-3-4 digit groups separated by dots, dashes or whitespace.
_US_PHONE_RE = re.compile(
    r"(?<!\d)(?:\+?1[-.\s]?)?\(?(\d{3})\)?[-.\s]?(\d{3})[-.\s]?(\d{4})(?!\d)"
)

_NON_DIGIT_RE = re.compile(r"\D")


def _format_us(area: str, exchange: str, line: str) -> str:
    return f"+1-{area}-{exchange}-{line}"


def normalize_phone_number(raw: str) -> str | None:
    """Return the canonical ``+1-XXX-XXX-XXXX`` form of a US number.

    "(415) 555-0199" → "+1-415-555-0199"
    "+1 415.555.0199" → "+1-415-555-0199"
    "+44 20 7946 0958" → None
    """
    digits = _NON_DIGIT_RE.sub("", raw)
    if len(digits) == 11 and digits.startswith("1"):
        digits = digits[1:]
    elif len(digits) != 10:
        return None
    return _format_us(digits[:3], digits[3:6], digits[6:])


def extract_phone_numbers(text: str) -> list[str]:
    """Scan free text for US phone numbers.

    Every match is normalized to ``+1-XXX-XXX-XXXX`` and deduplicated,
    keeping the order of first appearance.
    """
    found: list[str] = []
    seen: set[str] = set()
    for match in _US_PHONE_RE.finditer(text):
        formatted = _format_us(*match.groups())
        if formatted not in seen:
            seen.add(formatted)
            found.append(formatted)
    return found


def correlation_key(phone_number: str) -> str:
    """E.164 form used to dial a number and to match its callback to a batch.

    A number given with a leading "+" already carries its country code and
    only loses its formatting. Ten-digit numbers without one are assumed
    to be US numbers, so "+1-555-000-0001", "(555) 000-0001" and
    "+15550000001" share a key while "+4930123456" stays as it is.
    """
    digits = _NON_DIGIT_RE.sub("", phone_number)
    if len(digits) == 10 and not phone_number.strip().startswith("+"):
        digits = "1" + digits
    return f"+{digits}"
