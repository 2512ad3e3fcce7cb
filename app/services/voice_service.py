# app/services/voice_service.py
"""
Automated voice calls through the Twilio REST API.

Endpoint: POST {TWILIO_API_BASE}/Accounts/{sid}/Calls.json
Auth:     HTTP Basic (account SID + auth token)
The call script is sent inline as TwiML.
"""

import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Optional
import httpx
from app.config import settings
from app.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_VOICE = "Polly.Joanna"
DEFAULT_LANGUAGE = "en-US"


class VoiceNotConfigured(RuntimeError):
    pass


class VoiceProviderError(RuntimeError):
    pass


@dataclass
class CallOptions:
    voice: str = DEFAULT_VOICE
    language: str = DEFAULT_LANGUAGE
    loop: int = 1
    pause_duration: int = 1
    intro_pause: int = 0
    second_message: Optional[str] = None


def build_twiml(message: str, options: CallOptions) -> str:
    """
    <Response>
      [<Pause length=intro/>] <Say ... loop=n>message</Say>
      [<Pause length=pause/>] [<Say>second message</Say>]
    </Response>
    """
    root = ET.Element("Response")
    if options.intro_pause:
        ET.SubElement(root, "Pause", length=str(options.intro_pause))

    say = ET.SubElement(root, "Say", voice=options.voice, language=options.language, loop=str(options.loop))
    say.text = message

    if options.pause_duration > 0:
        ET.SubElement(root, "Pause", length=str(options.pause_duration))
    if options.second_message:
        second = ET.SubElement(root, "Say", voice=options.voice, language=options.language)
        second.text = options.second_message

    return ET.tostring(root, encoding="unicode")


async def make_call(phone_number: str, message: str, options: Optional[CallOptions] = None) -> dict:
    """Place a call. Returns {"success": True, "callSid": ...}; raises on failure."""
    if not settings.TWILIO_ENABLED:
        raise VoiceNotConfigured("Twilio credentials are not configured")

    options = options or CallOptions()
    url = f"{settings.TWILIO_API_BASE}/Accounts/{settings.TWILIO_ACCOUNT_SID}/Calls.json"
    data = {
        "To": phone_number,
        "From": settings.TWILIO_PHONE_NUMBER,
        "Twiml": build_twiml(message, options),
    }

    auth = httpx.BasicAuth(settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN)
    async with httpx.AsyncClient(auth=auth, timeout=15) as client:
        response = await client.post(url, data=data)

    if response.status_code >= 400:
        try:
            detail = response.json().get("message", response.text)
        except ValueError:
            detail = response.text
        raise VoiceProviderError(f"Twilio returned HTTP {response.status_code}: {detail}")

    call_sid = response.json().get("sid")
    logger.info(f"[CALL] Initiated call {call_sid} to {phone_number}")
    return {"success": True, "callSid": call_sid}
