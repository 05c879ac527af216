"""
PDF processing service using pypdf.

Handles extraction of the embedded text layer from EPD documents.
"""

import io
import logging
from typing import BinaryIO

from pypdf import PdfReader
from pypdf.errors import PdfReadError

logger = logging.getLogger(__name__)


class PDFExtractionError(Exception):
    """Raised when text cannot be extracted from a PDF."""

    pass


class PDFService:
    """
    Service for PDF text extraction.

    Reads the text layer only; scanned PDFs without one yield no text.
    """

    def __init__(self, page_separator: str = "\n\n"):
        """
        Initialize the PDF service.

        Args:
            page_separator: String placed between the text of consecutive pages.
        """
        self.page_separator = page_separator

    @staticmethod
    def _read_bytes(file_bytes: bytes | BinaryIO) -> bytes:
        if hasattr(file_bytes, "read"):
            return file_bytes.read()
        return file_bytes

    def _open(self, file_bytes: bytes | BinaryIO) -> PdfReader:
        pdf_bytes = self._read_bytes(file_bytes)

        if not pdf_bytes:
            raise PDFExtractionError("Empty PDF file provided")

        # Validate PDF magic bytes
        if not pdf_bytes[:4] == b"%PDF":
            raise PDFExtractionError(
                "Invalid PDF file: does not start with PDF header"
            )

        try:
            return PdfReader(io.BytesIO(pdf_bytes))
        except PdfReadError as e:
            logger.error("PDF read error: %s", e)
            raise PDFExtractionError(f"Invalid or corrupted PDF file: {e}") from e
        except Exception as e:
            logger.exception("Unexpected error opening PDF")
            raise PDFExtractionError(f"Failed to open PDF: {e}") from e

    def extract_text(self, file_bytes: bytes | BinaryIO) -> str:
        """
        Extract the text of every page.

        Args:
            file_bytes: PDF file as bytes or file-like object.

        Returns:
            Text of all pages joined by ``page_separator``.

        Raises:
            PDFExtractionError: If the PDF cannot be read or has no text layer.
        """
        reader = self._open(file_bytes)

        try:
            pages_text = []
            for page in reader.pages:
                page_text = page.extract_text()
                if page_text:
                    pages_text.append(page_text)
        except Exception as e:
            logger.exception("Unexpected error during text extraction")
            raise PDFExtractionError(f"Failed to extract text from PDF: {e}") from e

        text = self.page_separator.join(pages_text).strip()
        if not text:
            raise PDFExtractionError("No extractable text found in PDF")

        logger.info(
            "Extracted %d characters from %d page(s)", len(text), len(reader.pages)
        )
        return text


# Singleton instance for convenience
_pdf_service: PDFService | None = None


def get_pdf_service() -> PDFService:
    """Get or create the PDF service singleton."""
    global _pdf_service
    if _pdf_service is None:
        _pdf_service = PDFService()
    return _pdf_service
