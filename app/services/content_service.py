# app/services/content_service.py
"""
Notification text generation through an OpenAI-compatible chat completions API.
Given a free-form context (alert details, audience, tone) it returns a short
message suitable for both email body and text-to-speech.
"""

import json
import httpx
from app.config import settings
from app.utils.logger import get_logger

logger = get_logger(__name__)

SYSTEM_PROMPT = (
    "You write concise security alert notifications for city operations staff. "
    "Plain text only, no markdown, at most 80 words, suitable for reading aloud."
)


class ContentGenerationError(RuntimeError):
    pass


async def generate_message(context: dict) -> str:
    if not settings.AI_API_KEY:
        raise ContentGenerationError("Content generation API key is not configured")

    payload = {
        "model": settings.AI_MODEL,
        "messages": [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": "Write the notification for this context:\n"
                                        + json.dumps(context, default=str, indent=2)},
        ],
        "temperature": 0.3,
    }
    headers = {"Authorization": f"Bearer {settings.AI_API_KEY}"}

    async with httpx.AsyncClient(timeout=settings.AI_TIMEOUT_SECONDS) as client:
        response = await client.post(settings.AI_API_URL, json=payload, headers=headers)

    if response.status_code != 200:
        raise ContentGenerationError(f"Content API returned HTTP {response.status_code}")

    try:
        text = response.json()["choices"][0]["message"]["content"].strip()
    except (KeyError, IndexError, TypeError, ValueError, AttributeError) as e:
        raise ContentGenerationError(f"Unexpected content API response: {e}") from e
    if not text:
        raise ContentGenerationError("Content API returned an empty message")

    logger.info(f"[AI] Generated notification text ({len(text)} chars)")
    return text
