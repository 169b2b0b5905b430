"""
Page rasterizer (PDF → PNG).

Only the first page of a document is ever rendered; later pages are ignored
on purpose. Rendering goes through pypdfium2 and the bitmap is encoded to PNG
with Pillow (via `bitmap.to_pil()`).
"""

from __future__ import annotations

import io
import logging
import threading

import pypdfium2 as pdfium

from vision_relay.errors import (
    DocumentOpenError,
    EmptyDocumentError,
    EncodeError,
    RenderError,
)

logger = logging.getLogger(__name__)

# PDF user space is 72 units per inch
PDF_BASE_DPI = 72.0
DEFAULT_DPI = 300

FIRST_PAGE = 0

# pdfium is not thread-safe; the server handles requests on several threads
_PDFIUM_LOCK = threading.Lock()


def render_first_page(pdf_bytes: bytes, dpi: int = DEFAULT_DPI) -> bytes:
    """
    Render page 0 of a PDF to PNG bytes.

    Args:
        pdf_bytes: Complete document content.
        dpi: Target resolution; converted to a pdfium scale factor.

    Returns:
        bytes: PNG-encoded image of the first page.

    Raises:
        DocumentOpenError: bytes are not a document pdfium can open.
        EmptyDocumentError: the document has no pages.
        RenderError: pdfium failed to render the page.
        EncodeError: the bitmap could not be encoded as PNG.
    """
    with _PDFIUM_LOCK:
        return _render_locked(pdf_bytes, dpi)


def _render_locked(pdf_bytes: bytes, dpi: int) -> bytes:
    try:
        doc = pdfium.PdfDocument(pdf_bytes)
    except Exception as e:  # noqa: BLE001
        raise DocumentOpenError(f"failed to open PDF: {e}") from e

    try:
        page_count = len(doc)
        if page_count == 0:
            raise EmptyDocumentError("PDF has no pages")

        scale = float(dpi) / PDF_BASE_DPI if dpi and dpi > 0 else 1.0

        try:
            page = doc[FIRST_PAGE]
            bitmap = page.render(scale=scale)
            image = bitmap.to_pil()
        except Exception as e:  # noqa: BLE001
            raise RenderError(f"failed to render PDF page: {e}") from e

        try:
            buf = io.BytesIO()
            image.save(buf, format="PNG")
        except Exception as e:  # noqa: BLE001
            raise EncodeError(f"failed to encode image: {e}") from e

        png = buf.getvalue()
        logger.info(
            "[RASTERIZE] rendered page %d/%d at %d dpi (%d bytes)",
            FIRST_PAGE + 1,
            page_count,
            dpi,
            len(png),
        )
        return png
    finally:
        doc.close()
