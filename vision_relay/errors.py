"""
Error taxonomy for the relay.

Every failure below the dispatcher is a RelayError tagged with the pipeline
stage it came from. The dispatcher looks the stage up in a single table of
user-facing strings (see telegram/ux.py) so detail never reaches the chat.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class Stage(str, Enum):
    REQUEST = "request"
    RESOLVE = "resolve"
    DOWNLOAD = "download"
    RASTERIZE = "rasterize"
    EXTRACT = "extract"
    NOTIFY = "notify"
    INTERNAL = "internal"


class ConfigError(Exception):
    """Missing or invalid startup configuration. Fatal."""


class RelayError(Exception):
    """Base class for request-scoped failures."""

    stage: Stage = Stage.REQUEST

    def __init__(self, message: str = ""):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__


class MalformedRequestError(RelayError):
    """Inbound webhook body is not a usable update."""

    stage = Stage.REQUEST


# --- Telegram file API -------------------------------------------------------


class ResolutionError(RelayError):
    """getFile failed or did not return a file path."""

    stage = Stage.RESOLVE


class DownloadError(RelayError):
    """Raw bytes could not be fetched from the file URL."""

    stage = Stage.DOWNLOAD


# --- Rasterization -----------------------------------------------------------


class RasterizeError(RelayError):
    stage = Stage.RASTERIZE


class DocumentOpenError(RasterizeError):
    pass


class EmptyDocumentError(RasterizeError):
    pass


class RenderError(RasterizeError):
    pass


class EncodeError(RasterizeError):
    pass


# --- Vision provider ---------------------------------------------------------


class ExtractionError(RelayError):
    stage = Stage.EXTRACT


class ProviderHTTPError(ExtractionError):
    """Transport-level failure talking to the provider."""


class ProviderResponseError(ExtractionError):
    """Provider answered with a non-success status."""

    def __init__(
        self,
        message: str = "",
        *,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.status_code = status_code


class ProviderParseError(ExtractionError):
    """Provider body could not be decoded into a completion."""


class NoChoicesError(ExtractionError):
    """Completion decoded fine but carried zero choices."""


# --- Outbound messaging ------------------------------------------------------


class NotifyError(RelayError):
    stage = Stage.NOTIFY
