# vision_relay/telegram/models.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class ImageVariant:
    """
    One resolution of a Telegram photo.

    Telegram sends the variants of a photo in ascending size order, so the
    last one in the list is the largest.
    """

    file_id: str
    width: int = 0
    height: int = 0
    file_size: int = 0

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "ImageVariant":
        return cls(
            file_id=raw.get("file_id", ""),
            width=raw.get("width") or 0,
            height=raw.get("height") or 0,
            file_size=raw.get("file_size") or 0,
        )


@dataclass
class DocumentDescriptor:
    file_id: str
    mime_type: str = ""
    file_name: str = ""
    file_size: int = 0

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "DocumentDescriptor":
        return cls(
            file_id=raw.get("file_id", ""),
            mime_type=raw.get("mime_type") or "",
            file_name=raw.get("file_name") or "",
            file_size=raw.get("file_size") or 0,
        )


@dataclass
class InboundUpdate:
    """
    The parts of a Telegram update the relay cares about.

    Fields:
        update_id: Telegram's update counter.
        chat_id: Chat to reply into (None if the update has no message/chat).
        sender_id: `message.from.id`, informational only.
        photos: Photo variants in platform order (may be empty).
        document: Attached document, if any.
    """

    update_id: int
    chat_id: Optional[int] = None
    sender_id: Optional[int] = None
    photos: List[ImageVariant] = field(default_factory=list)
    document: Optional[DocumentDescriptor] = None

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "InboundUpdate":
        message = raw.get("message") or {}
        chat = message.get("chat") or {}
        sender = message.get("from") or {}
        document = message.get("document")

        return cls(
            update_id=raw.get("update_id") or 0,
            chat_id=chat.get("id"),
            sender_id=sender.get("id"),
            photos=[ImageVariant.from_dict(p) for p in (message.get("photo") or [])],
            document=DocumentDescriptor.from_dict(document) if document else None,
        )

    def largest_photo(self) -> Optional[ImageVariant]:
        if not self.photos:
            return None
        return self.photos[-1]
