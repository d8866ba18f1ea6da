"""
LLM-assisted event extraction for organizers.

An organizer pastes an announcement (or a link) and gets back a pre-filled
event form. The result is a suggestion only: failures are reported as
`success=False` and never block the organizer from filling the form by hand.
"""

import json
from datetime import date
from typing import Any, Optional

import httpx
from openai import AsyncOpenAI, OpenAIError
from pydantic import ValidationError

from campus_compass.core.config import get_settings
from campus_compass.core.logging import get_logger
from campus_compass.core.metrics import record_extraction
from campus_compass.schemas.event import ExtractedEvent, ExtractionResponse

logger = get_logger(__name__)

SUGGESTED_CATEGORIES = (
    "Academic", "Career", "Sports", "Social", "Free Food", "Greek Life", "Arts",
    "Music", "Technology", "Wellness", "Workshop", "Networking", "Information",
)

SYSTEM_PROMPT = (
    "You extract campus event details from announcements. "
    "Always respond with a single valid JSON object."
)

_client: Optional[AsyncOpenAI] = None


def get_openai_client() -> Optional[AsyncOpenAI]:
    """Module-level client, created on first use. None when no API key is configured."""
    global _client
    settings = get_settings()
    if not settings.OPENAI_API_KEY:
        return None
    if _client is None:
        _client = AsyncOpenAI(
            api_key=settings.OPENAI_API_KEY,
            timeout=settings.OPENAI_TIMEOUT_SECONDS,
        )
    return _client


def build_prompt(text: str, today: date) -> str:
    return (
        "Extract event information from the following text or URL content.\n"
        f"Today is {today.isoformat()}; resolve relative dates against it.\n"
        "Respond with a JSON object with these keys:\n"
        "- title: the event title\n"
        "- description: event description (optional)\n"
        "- start_date: YYYY-MM-DD\n"
        "- start_time: HH:MM, 24-hour\n"
        "- end_date: YYYY-MM-DD (optional)\n"
        "- end_time: HH:MM, 24-hour (optional)\n"
        "- location: event location (optional)\n"
        f"- categories: list of tags, preferably from: {', '.join(SUGGESTED_CATEGORIES)}\n"
        "- image_url: image URL if one is present (optional)\n\n"
        f"Text/URL: {text}\n\n"
        "If the information is unclear, make reasonable assumptions for a typical campus event."
    )


def extract_json(response_text: str) -> Optional[dict[str, Any]]:
    """Parse a JSON object, tolerating a surrounding markdown code fence."""
    try:
        parsed = json.loads(response_text)
        return parsed if isinstance(parsed, dict) else None
    except json.JSONDecodeError:
        pass

    if "```" in response_text:
        start = response_text.find("```") + 3
        end = response_text.rfind("```")
        if "json" in response_text[start:start + 10]:
            start = response_text.find("\n", start) + 1
        try:
            parsed = json.loads(response_text[start:end].strip())
            return parsed if isinstance(parsed, dict) else None
        except json.JSONDecodeError:
            return None

    return None


async def extract_event_from_text(
    text: str,
    today: Optional[date] = None,
    client: Optional[AsyncOpenAI] = None,
) -> ExtractionResponse:
    settings = get_settings()
    client = client or get_openai_client()
    if client is None:
        logger.warning("event_extraction_skipped", reason="openai_not_configured")
        record_extraction(success=False)
        return ExtractionResponse(success=False, error="Event extraction is not configured")

    try:
        response = await client.chat.completions.create(
            model=settings.OPENAI_MODEL,
            temperature=0.2,
            response_format={"type": "json_object"},
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_prompt(text, today or date.today())},
            ],
        )
        content = (response.choices[0].message.content or "").strip()
    except (OpenAIError, httpx.HTTPError, IndexError) as e:
        logger.error("event_extraction_failed", error=str(e))
        record_extraction(success=False)
        return ExtractionResponse(success=False, error="Failed to extract event information")

    payload = extract_json(content)
    if payload is None:
        logger.error("event_extraction_invalid_json", response=content[:500])
        record_extraction(success=False)
        return ExtractionResponse(success=False, error="Failed to extract event information")

    try:
        data = ExtractedEvent.model_validate(payload)
    except ValidationError as e:
        logger.error("event_extraction_invalid_shape", errors=e.error_count())
        record_extraction(success=False)
        return ExtractionResponse(success=False, error="Failed to extract event information")

    record_extraction(success=True)
    logger.info("event_extracted", title=data.title, categories=len(data.categories))
    return ExtractionResponse(success=True, data=data)
