from __future__ import annotations

import logging
from typing import Any

from flask import Blueprint, current_app, jsonify, request

from vision_relay.errors import ExtractionError, MalformedRequestError
from vision_relay.media.pipeline import UpdateDispatcher
from vision_relay.media.vision import to_data_uri
from vision_relay.telegram.models import InboundUpdate
from vision_relay.telegram.ux import IMAGE_EXTRACT_FAILED, MediaKind, build_extraction_reply
from vision_relay.telegram.validator import parse_update_body

logger = logging.getLogger(__name__)

api = Blueprint("api", __name__)

ALLOWED_UPLOAD_TYPES = {"image/jpeg", "image/jpg", "image/png"}

EXTENSION_KEY = "vision_relay"


def _dispatcher() -> UpdateDispatcher:
    return current_app.extensions[EXTENSION_KEY]


@api.errorhandler(MalformedRequestError)
def malformed_request(e: MalformedRequestError) -> Any:
    logger.warning("[WEBHOOK] rejected body: %s", e)
    return jsonify({"error": "Invalid JSON"}), 400


@api.route("/", methods=["GET"])
def healthcheck() -> Any:
    return jsonify({"message": "Bot is live 🚀", "status": "healthy"})


@api.route("/webhook", methods=["POST"])
def webhook() -> Any:
    """
    Telegram webhook endpoint.

    Always acknowledges a well-formed update with 200 so Telegram does not
    redeliver it; extraction failures are reported to the chat instead.
    Only a body that fails to decode is answered with 400.
    """
    data = parse_update_body(request.get_data(cache=False))
    update = InboundUpdate.from_dict(data)
    logger.info("[TG UPDATE] id=%s chat=%s", update.update_id, update.chat_id)

    job = _dispatcher().dispatch(update)
    logger.info(
        "[TG UPDATE] id=%s media=%s status=%s",
        job.update_id,
        job.media_type.value,
        job.status,
    )
    return jsonify({"status": "ok"})


@api.route("/upload", methods=["POST"])
def upload() -> Any:
    """
    Local testing endpoint: multipart upload of one image (field "image").

    Returns the extracted text as JSON and, when TELEGRAM_CHAT_ID is
    configured, relays the same reply to that chat.
    """
    file = request.files.get("image")
    if file is None or not file.filename:
        return jsonify({"error": "No image file provided"}), 400

    content_type = (file.mimetype or "").lower()
    if content_type not in ALLOWED_UPLOAD_TYPES:
        return jsonify({"error": "Invalid file type. Only JPEG and PNG images are allowed"}), 400

    image = file.read()
    dispatcher = _dispatcher()

    try:
        extracted_text = dispatcher.extractor.extract(
            to_data_uri(image, content_type),
            dispatcher.photo_prompt,
        )
    except ExtractionError as e:
        logger.error("[UPLOAD ERROR] %s: %s", file.filename, e)
        return jsonify({"error": IMAGE_EXTRACT_FAILED}), 502

    chat_id = current_app.config.get("RELAY_CHAT_ID")
    if chat_id is not None:
        dispatcher.relay_text(chat_id, build_extraction_reply(MediaKind.PHOTO, extracted_text))

    return jsonify(
        {
            "extracted_text": extracted_text,
            "file_name": file.filename,
            "size": len(image),
        }
    )
