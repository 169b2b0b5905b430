# vision_relay/telegram/__init__.py
from .models import DocumentDescriptor, ImageVariant, InboundUpdate
from .ux import (
    MediaKind,
    build_extraction_reply,
    failure_message,
)

__all__ = [
    "DocumentDescriptor",
    "ImageVariant",
    "InboundUpdate",
    "MediaKind",
    "build_extraction_reply",
    "failure_message",
]
