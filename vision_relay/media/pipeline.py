"""
Media relay pipeline.

One update in, at most one reply (plus an optional rendered page) out:

    photo:    resolve → extract(URL) → reply
    document: resolve → download → rasterize page 0 → extract(data URI) → reply

Every downstream failure is caught here, logged, and turned into a fixed
user-facing string. Nothing raised below this module reaches the webhook.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from vision_relay.config import RelayConfig
from vision_relay.errors import NotifyError, RelayError, Stage
from vision_relay.media.models import RelayJob
from vision_relay.media.rasterizer import DEFAULT_DPI, render_first_page
from vision_relay.media.vision import PROMPT_MODES, PromptKind, VisionExtractor, to_data_uri
from vision_relay.services.telegram import TelegramClient
from vision_relay.telegram.models import DocumentDescriptor, ImageVariant, InboundUpdate
from vision_relay.telegram.ux import (
    RENDERED_PAGE_CAPTION,
    MediaKind,
    build_extraction_reply,
    failure_message,
)

logger = logging.getLogger(__name__)

SUPPORTED_DOCUMENT_TYPES = {"application/pdf"}

Rasterizer = Callable[[bytes, int], bytes]


def is_supported_document(mime_type: Optional[str]) -> bool:
    return (mime_type or "").lower() in SUPPORTED_DOCUMENT_TYPES


class UpdateDispatcher:
    """
    Sequences the file resolver, rasterizer, vision extractor and notifier for
    one inbound update.

    Holds no per-request state, so one instance serves concurrent requests.
    """

    def __init__(
        self,
        telegram: TelegramClient,
        extractor: VisionExtractor,
        rasterizer: Rasterizer = render_first_page,
        photo_prompt: PromptKind = PromptKind.PHOTO_TEXT,
        render_dpi: int = DEFAULT_DPI,
        send_rendered_page: bool = True,
    ):
        self.telegram = telegram
        self.extractor = extractor
        self.rasterizer = rasterizer
        self.photo_prompt = photo_prompt
        self.render_dpi = render_dpi
        self.send_rendered_page = send_rendered_page

    @classmethod
    def from_config(cls, config: RelayConfig) -> "UpdateDispatcher":
        return cls(
            telegram=TelegramClient.from_config(config),
            extractor=VisionExtractor.from_config(config),
            photo_prompt=PROMPT_MODES[config.prompt_mode],
            render_dpi=config.render_dpi,
            send_rendered_page=config.send_rendered_page,
        )

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------
    def dispatch(self, update: InboundUpdate) -> RelayJob:
        """
        Handle one update. Never raises for pipeline failures.

        Photos are checked before documents, so an update carrying both is
        handled as a photo.
        """
        job = RelayJob(update_id=update.update_id, chat_id=update.chat_id)

        photo = update.largest_photo()
        document = update.document
        if photo is None and not (document and is_supported_document(document.mime_type)):
            logger.info("[TG UPDATE %s] no photos or PDFs in message", update.update_id)
            return job

        if update.chat_id is None:
            logger.warning("[TG UPDATE %s] attachment without chat id; ignoring", update.update_id)
            return job

        if photo is not None:
            job.media_type = MediaKind.PHOTO
            job.file_id = photo.file_id
            return self._run(job, lambda: self._photo_flow(update.chat_id, photo))

        job.media_type = MediaKind.DOCUMENT
        job.file_id = document.file_id
        return self._run(job, lambda: self._document_flow(update.chat_id, document))

    # ------------------------------------------------------------------
    # Flows
    # ------------------------------------------------------------------
    def _run(self, job: RelayJob, flow: Callable[[], str]) -> RelayJob:
        try:
            text = flow()
        except RelayError as e:
            job.status = "failed"
            job.stage = e.stage.value
            job.error = str(e)
            logger.error(
                "[%s ERROR] update=%s chat=%s stage=%s: %s",
                job.media_type.value.upper(),
                job.update_id,
                job.chat_id,
                e.stage.value,
                e,
            )
            self._notify(job.chat_id, failure_message(job.media_type, e.stage))
            return job
        except Exception as e:  # noqa: BLE001
            job.status = "failed"
            job.stage = Stage.INTERNAL.value
            job.error = str(e)
            logger.exception(
                "[%s ERROR] update=%s unexpected failure", job.media_type.value.upper(), job.update_id
            )
            self._notify(job.chat_id, failure_message(job.media_type, Stage.INTERNAL))
            return job

        job.status = "extracted"
        job.extracted_text = text
        self._notify(job.chat_id, build_extraction_reply(job.media_type, text))
        return job

    def _photo_flow(self, chat_id: int, photo: ImageVariant) -> str:
        logger.info(
            "[PHOTO] chat=%s file_id=%s (%dx%d)", chat_id, photo.file_id, photo.width, photo.height
        )
        image_url = self.telegram.resolve_file_url(photo.file_id)
        return self.extractor.extract(image_url, self.photo_prompt)

    def _document_flow(self, chat_id: int, document: DocumentDescriptor) -> str:
        logger.info(
            "[DOCUMENT] chat=%s file=%s mime=%s size=%s",
            chat_id,
            document.file_name,
            document.mime_type,
            document.file_size,
        )
        file_url = self.telegram.resolve_file_url(document.file_id)
        content = self.telegram.download_file(file_url)
        png = self.rasterizer(content, self.render_dpi)
        text = self.extractor.extract(to_data_uri(png, "image/png"), PromptKind.DOCUMENT_TEXT)

        if self.send_rendered_page:
            try:
                self.telegram.send_photo(chat_id, png, caption=RENDERED_PAGE_CAPTION)
            except NotifyError as e:
                logger.error("[NOTIFY ERROR] chat=%s rendered page: %s", chat_id, e)

        return text

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _notify(self, chat_id: int, text: str) -> bool:
        """
        Best-effort reply. Failures are logged only.
        """
        try:
            self.telegram.send_message(chat_id, text)
        except NotifyError as e:
            logger.error("[NOTIFY ERROR] chat=%s: %s", chat_id, e)
            return False
        return True

    def relay_text(self, chat_id: int, text: str) -> bool:
        return self._notify(chat_id, text)
