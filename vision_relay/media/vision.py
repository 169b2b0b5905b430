from __future__ import annotations

import base64
import logging
from enum import Enum
from typing import Any, Dict, List

import openai
from openai import OpenAI

from vision_relay.config import RelayConfig
from vision_relay.errors import (
    NoChoicesError,
    ProviderHTTPError,
    ProviderParseError,
    ProviderResponseError,
)

logger = logging.getLogger(__name__)


class PromptKind(str, Enum):
    PHOTO_TEXT = "photo_text"
    DOCUMENT_TEXT = "document_text"
    STRUCTURED_JSON = "structured_json"


PROMPTS: Dict[PromptKind, str] = {
    PromptKind.PHOTO_TEXT: (
        "Extract any text visible in this image, including VIN numbers, license plates, "
        "or any other readable text. If you find multiple pieces of text, list them clearly."
    ),
    PromptKind.DOCUMENT_TEXT: (
        "Extract all the text content from this image. Look for any readable text including "
        "VIN numbers, license plates, vehicle information, or any other text content. "
        "Provide a clear, organized summary of all text found."
    ),
    PromptKind.STRUCTURED_JSON: """
Extract the readable text from this image and respond with a single JSON object only.
No markdown, no prose.

Use exactly these fields:
{
  "vin": <string_or_null>,            // 17-character vehicle identification number
  "license_plate": <string_or_null>,
  "vehicle_info": <string_or_null>,   // make, model, year, colour if visible
  "address": <string_or_null>,
  "other_text": <string_or_null>      // anything else that is readable
}

Rules:
- If a field is not present in the image, use null.
- Never invent values or extra fields.
""".strip(),
}

# EXTRACTION_PROMPT setting -> prompt used for photos and uploads
PROMPT_MODES = {
    "text": PromptKind.PHOTO_TEXT,
    "json": PromptKind.STRUCTURED_JSON,
}


def to_data_uri(data: bytes, mime_type: str = "image/png") -> str:
    """
    Inline raw image bytes as a data URI the vision API accepts.
    """
    if mime_type == "image/jpg":
        mime_type = "image/jpeg"
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def build_messages(image_ref: str, kind: PromptKind) -> List[Dict[str, Any]]:
    """
    Single-turn request: one user message with the instruction and the image.
    """
    return [
        {
            "role": "user",
            "content": [
                {"type": "text", "text": PROMPTS[kind]},
                {"type": "image_url", "image_url": {"url": image_ref}},
            ],
        }
    ]


class VisionExtractor:
    """
    Sends an image reference (URL or data URI) to an OpenAI vision model and
    returns the first choice's text verbatim.

    No post-processing is applied, even for STRUCTURED_JSON: the model's reply
    is forwarded as-is.
    """

    def __init__(self, client: Any, model: str = "gpt-4o-mini"):
        self._client = client
        self.model = model

    @classmethod
    def from_config(cls, config: RelayConfig) -> "VisionExtractor":
        # max_retries=0: every provider call is attempted exactly once
        client = OpenAI(
            api_key=config.openai_api_key,
            timeout=config.request_timeout,
            max_retries=0,
        )
        return cls(client, model=config.openai_model)

    def extract(self, image_ref: str, kind: PromptKind = PromptKind.PHOTO_TEXT) -> str:
        """
        Run one extraction.

        Raises:
            ProviderHTTPError: the request never got a response (connection, timeout).
            ProviderResponseError: the provider returned a non-success status.
            ProviderParseError: the body could not be decoded into a completion.
            NoChoicesError: the completion carried no choices.
        """
        try:
            response = self._client.chat.completions.create(
                model=self.model,
                messages=build_messages(image_ref, kind),
            )
        except openai.APIStatusError as e:
            raise ProviderResponseError(
                f"OpenAI API error: {e.status_code} {e.message}",
                status_code=e.status_code,
            ) from e
        except openai.APIConnectionError as e:
            raise ProviderHTTPError(f"failed to make request: {e}") from e
        except (openai.APIResponseValidationError, ValueError) as e:
            raise ProviderParseError(f"failed to parse OpenAI response: {e}") from e

        choices = getattr(response, "choices", None)
        if choices is None:
            raise ProviderParseError("failed to parse OpenAI response: no choices field")
        if len(choices) == 0:
            raise NoChoicesError("no response from OpenAI")

        try:
            content = choices[0].message.content
        except AttributeError as e:
            raise ProviderParseError(f"failed to parse OpenAI response: {e}") from e

        logger.info("[VISION] %s extraction returned %d chars", kind.value, len(content or ""))
        return content or ""
