# vision_relay/telegram/ux.py
from __future__ import annotations

from enum import Enum
from typing import Dict, Tuple

from vision_relay.errors import Stage


class MediaKind(str, Enum):
    PHOTO = "photo"
    DOCUMENT = "document"
    NONE = "none"


PHOTO_REPLY_LABEL = "🔍 **Extracted text from image:**"
DOCUMENT_REPLY_LABEL = "📄 **Extracted text from PDF:**"
RENDERED_PAGE_CAPTION = "Converted PDF page to image"

IMAGE_DOWNLOAD_FAILED = "Sorry, I couldn't download the image. Please try again."
IMAGE_EXTRACT_FAILED = (
    "Sorry, I couldn't extract any text from this image. Please try with a clearer image."
)
PDF_DOWNLOAD_FAILED = "Sorry, I couldn't download the PDF. Please try again."
PDF_CONTENT_FAILED = "Sorry, I couldn't download the PDF content. Please try again."
PDF_EXTRACT_FAILED = (
    "Sorry, I couldn't extract any text from this PDF. Please try with a different document."
)

# (media kind, failing stage) -> what the user sees
FAILURE_MESSAGES: Dict[Tuple[MediaKind, Stage], str] = {
    (MediaKind.PHOTO, Stage.RESOLVE): IMAGE_DOWNLOAD_FAILED,
    (MediaKind.PHOTO, Stage.DOWNLOAD): IMAGE_DOWNLOAD_FAILED,
    (MediaKind.PHOTO, Stage.EXTRACT): IMAGE_EXTRACT_FAILED,
    (MediaKind.DOCUMENT, Stage.RESOLVE): PDF_DOWNLOAD_FAILED,
    (MediaKind.DOCUMENT, Stage.DOWNLOAD): PDF_CONTENT_FAILED,
    (MediaKind.DOCUMENT, Stage.RASTERIZE): PDF_EXTRACT_FAILED,
    (MediaKind.DOCUMENT, Stage.EXTRACT): PDF_EXTRACT_FAILED,
}

_FALLBACK = {
    MediaKind.PHOTO: IMAGE_EXTRACT_FAILED,
    MediaKind.DOCUMENT: PDF_EXTRACT_FAILED,
}


def failure_message(kind: MediaKind, stage: Stage) -> str:
    """
    Pick the fixed, non-technical string for a failed flow.
    """
    return FAILURE_MESSAGES.get((kind, stage)) or _FALLBACK.get(kind, IMAGE_EXTRACT_FAILED)


def build_extraction_reply(kind: MediaKind, extracted_text: str) -> str:
    label = DOCUMENT_REPLY_LABEL if kind is MediaKind.DOCUMENT else PHOTO_REPLY_LABEL
    return f"{label}\n\n{extracted_text}"
