"""
Thin wrappers around the hosted models that read receipts, caption photos,
summarize voice notes, write impact stories and translate them.

Each operation comes in two flavours:

- ``try_<operation>`` returns a :class:`GatewayResult` that says whether the
  model actually answered. Failures carry the fallback value.
- ``<operation>`` returns only the value, so callers always get something
  usable and never see an exception.
"""

import json
import base64
import logging
from dataclasses import dataclass
from datetime import date
from typing import Generic, Optional, TypeVar

from anthropic import AsyncAnthropic
from openai import AsyncOpenAI
from pydantic import ValidationError

from ..config import get_settings
from ..models import ReceiptData, DEFAULT_CURRENCY, DEFAULT_LANGUAGE


logger = logging.getLogger(__name__)

T = TypeVar("T")

FALLBACK_STORE_NAME = "Unknown Store"
FALLBACK_FRAUD_NOTES = "Extraction failed due to error."
FALLBACK_CAPTION = "Verified distribution photo."
EMPTY_CAPTION = "Distribution event photo."
FALLBACK_VOICE_SUMMARY = "Voice processing failed. Please type details manually."
FALLBACK_STORY = "We successfully distributed aid to the community. Thank you for your support."
EMPTY_STORY = "Report generation failed. Please try again."

REQUIRED_RECEIPT_FIELDS = ["storeName", "totalAmount", "items", "currency", "trustScore"]

AUDIO_FILENAMES = {
    "audio/mpeg": "voice-note.mp3",
    "audio/mp3": "voice-note.mp3",
    "audio/mp4": "voice-note.m4a",
    "audio/wav": "voice-note.wav",
    "audio/x-wav": "voice-note.wav",
    "audio/webm": "voice-note.webm",
    "audio/ogg": "voice-note.ogg",
}


RECEIPT_EXTRACTION_PROMPT = """You are an expert forensic accountant for an NGO. Analyze the provided image of a receipt/invoice.
Extract the Store Name, Date, Total Amount, Currency, and a List of Items.

CRITICAL: Analyze the image for authenticity.
- Is the text consistent?
- Does it look like a real store receipt?
- Are there signs of digital tampering?

Assign a 'trustScore' from 0 to 100 (100 is perfectly authentic).
Add 'fraudNotes' explaining any issues or confirming authenticity.

If no total is found, calculate the sum of the items.
Return the date in YYYY-MM-DD format.

Respond with a JSON object of this shape:

{
  "storeName": "Name of the store (required)",
  "date": "YYYY-MM-DD (optional)",
  "totalAmount": 120.50,
  "currency": "Currency code (USD, IDR, EUR, etc.) - infer from symbols or context",
  "trustScore": 95,
  "fraudNotes": "Short explanation of the score (optional)",
  "items": [
    {"name": "Item description", "quantity": 2, "price": 60.25}
  ]
}

Important:
- storeName, totalAmount, currency, items and trustScore are required
- All amounts and quantities must be numeric values, not strings
- Return ONLY the JSON, no additional text"""


CAPTION_PROMPT = """Analyze this image of a charity distribution.
Describe the activity in one sentence for a photo caption.
Mention the items being distributed and the environment if visible.
Ensure the description is respectful to the beneficiaries' dignity."""


VOICE_SUMMARY_PROMPT = """Below is the transcript of a field worker's voice note describing a charity distribution event.
Extract the key details: What happened, where, who was helped, and the general mood.
Convert this into a professional, heart-warming paragraph for a donor report.
Ignore filler words or pauses.

Transcript:
{transcript}"""


STORY_PROMPT = """You are a professional non-profit communications officer.
Write a transparent and heart-warming distribution summary (approx 150 words) based on the data below.
Write the response in {language}.

Campaign: {campaign_name}
Location: {location}
Beneficiaries: {beneficiary_count} people/families
Supplies Purchased: {items}
Total Value: {currency} {total}
Visual Evidence Context: {captions}
Field Worker Notes: {notes}

Focus on the impact and the gratitude of the community.
Keep the tone professional, empathetic, and honest.
End with a specific thank you message to the donors."""


TRANSLATION_PROMPT = """Translate the following charity report into professional {language}.
Ensure that Islamic terms (like Sadaqah, Muzakki, Mustahik) are either kept and explained or translated accurately depending on the context.

Text: "{text}\""""


@dataclass
class GatewayResult(Generic[T]):
    """Outcome of one model call.

    ``value`` is always usable: on failure it holds the fallback.
    """
    value: T
    ok: bool = True
    error: Optional[str] = None

    @classmethod
    def failure(cls, fallback: T, error: str) -> "GatewayResult[T]":
        return cls(value=fallback, ok=False, error=error)


def _to_base64(data: str | bytes) -> str:
    if isinstance(data, bytes):
        return base64.b64encode(data).decode("utf-8")
    return data


def _to_bytes(data: str | bytes) -> bytes:
    if isinstance(data, bytes):
        return data
    return base64.b64decode(data)


def _format_amount(amount: float) -> str:
    if float(amount).is_integer():
        return str(int(amount))
    return str(amount)


def _image_block(image_base64: str, media_type: str) -> dict:
    return {
        "type": "image",
        "source": {
            "type": "base64",
            "media_type": media_type,
            "data": image_base64,
        },
    }


async def _generate(content: str | list[dict], temperature: Optional[float] = None) -> str:
    """Send one user turn to Claude and return the stripped reply text."""
    settings = get_settings()
    client = AsyncAnthropic(api_key=settings.anthropic_api_key)

    kwargs = {}
    if temperature is not None:
        kwargs["temperature"] = temperature

    message = await client.messages.create(
        model=settings.anthropic_model,
        max_tokens=settings.max_tokens,
        messages=[{"role": "user", "content": content}],
        **kwargs,
    )

    if not message.content:
        return ""
    return (message.content[0].text or "").strip()


async def _transcribe(audio: bytes, media_type: str) -> str:
    settings = get_settings()
    client = AsyncOpenAI(api_key=settings.openai_api_key)

    filename = AUDIO_FILENAMES.get(media_type, "voice-note.mp3")
    transcription = await client.audio.transcriptions.create(
        model=settings.transcription_model,
        file=(filename, audio, media_type),
    )
    return (transcription.text or "").strip()


def _parse_json_object(response_text: str) -> dict:
    """Find the JSON object in a reply that may carry extra prose."""
    json_start = response_text.find("{")
    json_end = response_text.rfind("}") + 1
    if json_start != -1 and json_end > json_start:
        data = json.loads(response_text[json_start:json_end])
    else:
        data = json.loads(response_text)

    if not isinstance(data, dict):
        raise ValueError("Expected a JSON object")
    return data


def fallback_receipt(image_base64: Optional[str] = None) -> ReceiptData:
    """Receipt returned when extraction fails."""
    return ReceiptData(
        store_name=FALLBACK_STORE_NAME,
        date=date.today().isoformat(),
        total_amount=0,
        currency=DEFAULT_CURRENCY,
        trust_score=0,
        fraud_notes=FALLBACK_FRAUD_NOTES,
        items=[],
        original_image=image_base64,
    )


async def try_extract_receipt_data(
    image_data: str | bytes,
    media_type: str = "image/jpeg"
) -> GatewayResult[ReceiptData]:
    """
    Extract store, date, total, currency, items and a trust score from a receipt.

    Args:
        image_data: Base64 encoded image string or raw bytes
        media_type: MIME type of the image (image/jpeg, image/png, etc.)

    Returns:
        GatewayResult holding the extracted ReceiptData, or the fallback
        receipt if the call failed or the reply did not match the schema
    """
    image_base64 = _to_base64(image_data)

    try:
        response_text = await _generate([
            _image_block(image_base64, media_type),
            {"type": "text", "text": RECEIPT_EXTRACTION_PROMPT},
        ])
        if not response_text:
            raise ValueError("No data returned from model")

        data = _parse_json_object(response_text)
        missing = [field for field in REQUIRED_RECEIPT_FIELDS if field not in data]
        if missing:
            raise ValueError(f"Missing required fields: {', '.join(missing)}")

        receipt = ReceiptData.model_validate({**data, "originalImage": image_base64})
    except (json.JSONDecodeError, ValidationError) as e:
        logger.warning("Receipt extraction returned unusable data: %s", e)
        return GatewayResult.failure(fallback_receipt(image_base64), str(e))
    except ValueError as e:
        logger.warning("Receipt extraction returned incomplete data: %s", e)
        return GatewayResult.failure(fallback_receipt(image_base64), str(e))
    except Exception as e:
        logger.warning("Receipt extraction failed: %s", e)
        return GatewayResult.failure(fallback_receipt(image_base64), str(e))

    logger.info(
        "Extracted receipt from %s: %s %s, trust score %d",
        receipt.store_name, receipt.currency, receipt.total_amount, receipt.trust_score,
    )
    return GatewayResult(value=receipt)


async def try_caption_photo(
    image_data: str | bytes,
    media_type: str = "image/jpeg"
) -> GatewayResult[str]:
    """Describe a distribution photo in one sentence."""
    try:
        caption = await _generate([
            _image_block(_to_base64(image_data), media_type),
            {"type": "text", "text": CAPTION_PROMPT},
        ])
    except Exception as e:
        logger.warning("Photo captioning failed: %s", e)
        return GatewayResult.failure(FALLBACK_CAPTION, str(e))

    if not caption:
        return GatewayResult.failure(EMPTY_CAPTION, "Empty caption returned")
    return GatewayResult(value=caption)


async def try_summarize_voice_note(
    audio_data: str | bytes,
    media_type: str = "audio/mpeg"
) -> GatewayResult[str]:
    """
    Turn a spoken field report into a paragraph for the donor report.

    The recording is transcribed first, then condensed by the text model.
    """
    try:
        transcript = await _transcribe(_to_bytes(audio_data), media_type)
        if not transcript:
            return GatewayResult.failure("", "Empty transcript returned")

        summary = await _generate(VOICE_SUMMARY_PROMPT.format(transcript=transcript))
    except Exception as e:
        logger.warning("Voice note processing failed: %s", e)
        return GatewayResult.failure(FALLBACK_VOICE_SUMMARY, str(e))

    if not summary:
        return GatewayResult.failure("", "Empty summary returned")
    return GatewayResult(value=summary)


def build_story_prompt(
    campaign_name: str,
    location: str,
    beneficiary_count: int,
    receipts: list[ReceiptData],
    photo_captions: list[str],
    additional_notes: Optional[str] = None,
    language: str = DEFAULT_LANGUAGE,
) -> str:
    items = ", ".join(
        f"{item.quantity}x {item.name}"
        for receipt in receipts
        for item in receipt.items
    )
    total_spent = sum(receipt.total_amount for receipt in receipts)
    currency = receipts[0].currency if receipts and receipts[0].currency else DEFAULT_CURRENCY

    return STORY_PROMPT.format(
        language=language,
        campaign_name=campaign_name,
        location=location,
        beneficiary_count=beneficiary_count,
        items=items,
        currency=currency,
        total=_format_amount(total_spent),
        captions="; ".join(photo_captions),
        notes=additional_notes or "N/A",
    )


async def try_generate_impact_story(
    campaign_name: str,
    location: str,
    beneficiary_count: int,
    receipts: list[ReceiptData],
    photo_captions: list[str],
    additional_notes: Optional[str] = None,
    language: str = DEFAULT_LANGUAGE,
) -> GatewayResult[str]:
    """
    Write a ~150 word narrative about the distribution.

    Args:
        campaign_name: Name of the campaign
        location: Where the distribution happened
        beneficiary_count: Number of people/families helped
        receipts: Receipts whose items and totals are summarized
        photo_captions: Captions of the distribution photos
        additional_notes: Field worker notes, e.g. a voice-note summary
        language: Human language the story is written in

    Returns:
        GatewayResult holding the story text
    """
    prompt = build_story_prompt(
        campaign_name, location, beneficiary_count, receipts,
        photo_captions, additional_notes, language,
    )

    try:
        story = await _generate(prompt, temperature=get_settings().story_temperature)
    except Exception as e:
        logger.warning("Story generation failed: %s", e)
        return GatewayResult.failure(FALLBACK_STORY, str(e))

    if not story:
        return GatewayResult.failure(EMPTY_STORY, "Empty story returned")
    return GatewayResult(value=story)


async def try_translate_story(text: str, target_language: str) -> GatewayResult[str]:
    """Render an existing story in another language. Falls back to the input text."""
    try:
        translated = await _generate(TRANSLATION_PROMPT.format(language=target_language, text=text))
    except Exception as e:
        logger.warning("Translation to %s failed: %s", target_language, e)
        return GatewayResult.failure(text, str(e))

    if not translated:
        return GatewayResult.failure(text, "Empty translation returned")
    return GatewayResult(value=translated)


async def extract_receipt_data(image_data: str | bytes, media_type: str = "image/jpeg") -> ReceiptData:
    return (await try_extract_receipt_data(image_data, media_type)).value


async def caption_photo(image_data: str | bytes, media_type: str = "image/jpeg") -> str:
    return (await try_caption_photo(image_data, media_type)).value


async def summarize_voice_note(audio_data: str | bytes, media_type: str = "audio/mpeg") -> str:
    return (await try_summarize_voice_note(audio_data, media_type)).value


async def generate_impact_story(
    campaign_name: str,
    location: str,
    beneficiary_count: int,
    receipts: list[ReceiptData],
    photo_captions: list[str],
    additional_notes: Optional[str] = None,
    language: str = DEFAULT_LANGUAGE,
) -> str:
    result = await try_generate_impact_story(
        campaign_name, location, beneficiary_count, receipts,
        photo_captions, additional_notes, language,
    )
    return result.value


async def translate_story(text: str, target_language: str) -> str:
    return (await try_translate_story(text, target_language)).value
