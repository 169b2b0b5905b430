"""
Shared fixtures: fake Telegram/OpenAI collaborators and a Flask test client
wired to them. No test talks to the network.
"""
from typing import Any, Dict, List, Optional, Tuple

import pytest

from vision_relay.config import RelayConfig
from vision_relay.errors import RelayError
from vision_relay.main import create_app
from vision_relay.media.pipeline import UpdateDispatcher
from vision_relay.media.vision import PromptKind

FILE_URL_PREFIX = "https://api.telegram.org/file/bottest-token/"


class FakeTelegram:
    """Records every outbound call; raise on a step by setting `fail_on`."""

    def __init__(self, fail_on: Optional[Dict[str, RelayError]] = None, content: bytes = b"%PDF-1.4 fake"):
        self.fail_on = fail_on or {}
        self.content = content
        self.resolved: List[str] = []
        self.downloaded: List[str] = []
        self.messages: List[Tuple[Any, str]] = []
        self.photos: List[Tuple[Any, bytes, Optional[str]]] = []

    def _maybe_fail(self, step: str) -> None:
        if step in self.fail_on:
            raise self.fail_on[step]

    def resolve_file_url(self, file_id: str) -> str:
        self.resolved.append(file_id)
        self._maybe_fail("resolve")
        return f"{FILE_URL_PREFIX}photos/{file_id}.jpg"

    def download_file(self, url: str) -> bytes:
        self.downloaded.append(url)
        self._maybe_fail("download")
        return self.content

    def send_message(self, chat_id: Any, text: str) -> None:
        self.messages.append((chat_id, text))
        self._maybe_fail("send_message")

    def send_photo(self, chat_id: Any, image: bytes, caption: Optional[str] = None) -> None:
        self.photos.append((chat_id, image, caption))
        self._maybe_fail("send_photo")


class FakeExtractor:
    def __init__(self, result: str = "ABC123", error: Optional[RelayError] = None):
        self.result = result
        self.error = error
        self.calls: List[Tuple[str, PromptKind]] = []

    def extract(self, image_ref: str, kind: PromptKind = PromptKind.PHOTO_TEXT) -> str:
        self.calls.append((image_ref, kind))
        if self.error is not None:
            raise self.error
        return self.result


class FakeRasterizer:
    def __init__(self, png: bytes = b"\x89PNG\r\n\x1a\nfake", error: Optional[RelayError] = None):
        self.png = png
        self.error = error
        self.calls: List[Tuple[bytes, int]] = []

    def __call__(self, pdf_bytes: bytes, dpi: int) -> bytes:
        self.calls.append((pdf_bytes, dpi))
        if self.error is not None:
            raise self.error
        return self.png


@pytest.fixture
def relay_config() -> RelayConfig:
    return RelayConfig(
        telegram_bot_token="test-token",
        openai_api_key="test-openai-key",
    )


@pytest.fixture
def telegram() -> FakeTelegram:
    return FakeTelegram()


@pytest.fixture
def extractor() -> FakeExtractor:
    return FakeExtractor()


@pytest.fixture
def rasterizer() -> FakeRasterizer:
    return FakeRasterizer()


@pytest.fixture
def dispatcher(telegram, extractor, rasterizer) -> UpdateDispatcher:
    return UpdateDispatcher(telegram=telegram, extractor=extractor, rasterizer=rasterizer)


@pytest.fixture
def app(relay_config, dispatcher):
    app = create_app(relay_config, dispatcher=dispatcher)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


def make_update(
    photos: Optional[List[Dict[str, Any]]] = None,
    document: Optional[Dict[str, Any]] = None,
    chat_id: Optional[int] = 4242,
    update_id: int = 1001,
) -> Dict[str, Any]:
    message: Dict[str, Any] = {
        "message_id": 7,
        "from": {"id": 99, "is_bot": False, "first_name": "Sam"},
        "date": 1700000000,
    }
    if chat_id is not None:
        message["chat"] = {"id": chat_id, "type": "private"}
    if photos is not None:
        message["photo"] = photos
    if document is not None:
        message["document"] = document
    return {"update_id": update_id, "message": message}


def photo(file_id: str, width: int = 90, height: int = 90, file_size: int = 1000) -> Dict[str, Any]:
    return {
        "file_id": file_id,
        "file_unique_id": f"u-{file_id}",
        "width": width,
        "height": height,
        "file_size": file_size,
    }


def pdf_document(file_id: str = "doc-1", mime_type: str = "application/pdf") -> Dict[str, Any]:
    return {
        "file_id": file_id,
        "file_unique_id": f"u-{file_id}",
        "file_name": "scan.pdf",
        "mime_type": mime_type,
        "file_size": 20480,
    }
