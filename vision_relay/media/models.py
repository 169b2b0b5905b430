from dataclasses import dataclass
from typing import Optional

from vision_relay.telegram.ux import MediaKind


@dataclass
class RelayJob:
    """
    Outcome of dispatching one Telegram update.

    Returned to the webhook handler for logging and to tests; never stored.

    Fields:
        update_id: Telegram update id.
        chat_id: Chat the reply went to (None when the update had no chat).
        media_type: photo, document, or none.
        status: "ignored", "extracted", or "failed".
        file_id: File handle that was processed, if any.
        extracted_text: Provider output on success.
        stage: Failing pipeline stage on failure.
        error: Internal error detail (never sent to the user).
    """

    update_id: int
    chat_id: Optional[int] = None
    media_type: MediaKind = MediaKind.NONE

    status: str = "ignored"
    file_id: Optional[str] = None
    extracted_text: Optional[str] = None
    stage: Optional[str] = None
    error: Optional[str] = None
