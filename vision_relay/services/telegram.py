# vision_relay/services/telegram.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from vision_relay.config import RelayConfig
from vision_relay.errors import DownloadError, NotifyError, ResolutionError

logger = logging.getLogger(__name__)

RENDERED_PAGE_FILENAME = "converted_image.png"


class TelegramClient:
    """
    Thin wrapper over the Telegram Bot HTTP API.

    Covers the three things the relay needs: turning a file handle into a
    download URL, fetching raw bytes, and posting replies (text or photo).
    Every call is made exactly once; failures surface as typed RelayErrors.
    """

    def __init__(
        self,
        bot_token: str,
        api_base: str = "https://api.telegram.org",
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        self._token = bot_token
        self._api_base = api_base.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()

    @classmethod
    def from_config(cls, config: RelayConfig, session: Optional[requests.Session] = None) -> "TelegramClient":
        return cls(
            bot_token=config.telegram_bot_token,
            api_base=config.telegram_api_base,
            timeout=config.request_timeout,
            session=session,
        )

    def _method_url(self, method: str) -> str:
        return f"{self._api_base}/bot{self._token}/{method}"

    def file_url(self, file_path: str) -> str:
        return f"{self._api_base}/file/bot{self._token}/{file_path}"

    def _redact(self, text: object) -> str:
        # requests puts the full URL, token included, into its exception text
        return str(text).replace(self._token, "***") if self._token else str(text)

    # ------------------------------------------------------------------
    # File Resolver
    # ------------------------------------------------------------------
    def resolve_file_url(self, file_id: str) -> str:
        """
        Resolve a Telegram file_id to a fully-qualified download URL via getFile.

        Raises:
            ResolutionError: transport error, unparseable body, ok=false,
                or no file_path in the result.
        """
        try:
            resp = self._session.get(
                self._method_url("getFile"),
                params={"file_id": file_id},
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            raise ResolutionError(f"failed to get file info: {self._redact(e)}") from e

        try:
            body = resp.json()
        except ValueError as e:
            raise ResolutionError(f"failed to parse file response: {self._redact(e)}") from e

        if not isinstance(body, dict) or not body.get("ok"):
            raise ResolutionError("telegram API error: file not found")

        file_path = (body.get("result") or {}).get("file_path")
        if not file_path:
            raise ResolutionError("telegram API error: no file_path in getFile result")

        return self.file_url(file_path)

    def download_file(self, url: str) -> bytes:
        """
        Fetch the raw bytes behind a resolved file URL.
        """
        try:
            resp = self._session.get(url, timeout=self._timeout)
        except requests.RequestException as e:
            raise DownloadError(f"failed to download file: {self._redact(e)}") from e

        if resp.status_code != 200:
            raise DownloadError(f"failed to download file: status {resp.status_code}")

        return resp.content

    # ------------------------------------------------------------------
    # Notifier
    # ------------------------------------------------------------------
    def _post(self, method: str, **kwargs: Any) -> None:
        try:
            resp = self._session.post(self._method_url(method), timeout=self._timeout, **kwargs)
        except requests.RequestException as e:
            raise NotifyError(f"{method} failed: {self._redact(e)}") from e

        if resp.status_code != 200:
            raise NotifyError(f"telegram API error on {method}: {resp.status_code} {self._redact(resp.text)}")

    def send_message(self, chat_id: int | str, text: str) -> None:
        """
        Send a Markdown text message to a chat.
        """
        payload: Dict[str, Any] = {
            "chat_id": chat_id,
            "text": text,
            "parse_mode": "Markdown",
        }
        self._post("sendMessage", json=payload)

    def send_photo(self, chat_id: int | str, image: bytes, caption: Optional[str] = None) -> None:
        """
        Upload raw PNG bytes to a chat as a photo, with an optional caption.
        """
        data: Dict[str, Any] = {"chat_id": str(chat_id)}
        if caption:
            data["caption"] = caption

        files = {"photo": (RENDERED_PAGE_FILENAME, image, "image/png")}
        self._post("sendPhoto", data=data, files=files)
