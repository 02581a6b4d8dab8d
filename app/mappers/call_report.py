from app.schemas.calls import CallBatchResult, CallOutcome


def format_transcript(outcome: CallOutcome) -> str:
    """Render one call as ``phone:`` followed by ``role: message`` lines."""
    lines = [f"{outcome.phone_number}:"]
    lines.extend(f"{turn.role}: {turn.message}" for turn in outcome.transcript)
    return "\n".join(lines)


def build_call_report(result: CallBatchResult) -> str:
    """Plain-text report of a finished batch for the tool host."""
    parts: list[str] = [f"Task: {result.task}"]

    for outcome in result.outcomes:
        section = format_transcript(outcome)
        if outcome.summary:
            section += f"\nSummary: {outcome.summary}"
        parts.append(section)

    if not result.outcomes:
        parts.append("No calls completed.")

    return "\n\n".join(parts)
