"""
Router for EPD extraction endpoints.

Handles:
- PDF upload and EPD data extraction
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from ..models import EPDExtractionResponse, ErrorResponse
from ..services.ai import AIService, AIServiceError, get_ai_service
from ..services.pdf_service import PDFExtractionError, PDFService, get_pdf_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["EPD Extraction"])

DEFAULT_FILE_NAME = "uploaded-epd.pdf"


@router.post(
    "/extract-epd",
    response_model=EPDExtractionResponse,
    responses={
        400: {"description": "Missing, empty or non-PDF upload"},
        422: {"model": ErrorResponse, "description": "PDF text could not be extracted"},
        500: {"model": ErrorResponse, "description": "LLM API key not configured"},
        502: {"model": ErrorResponse, "description": "LLM response was not valid JSON"},
        503: {"model": ErrorResponse, "description": "LLM call failed"},
    },
)
async def extract_epd(
    pdf: Annotated[UploadFile, File(description="PDF file with EPD data")],
    pdf_service: Annotated[PDFService, Depends(get_pdf_service)],
    ai_service: Annotated[AIService, Depends(get_ai_service)],
) -> EPDExtractionResponse:
    """
    Extract Environmental Product Declaration data from an uploaded PDF.

    Extracts the PDF text, asks the LLM for the EPD indicators, normalizes
    them and computes the carbon footprint per kg of material.
    """
    file_name = pdf.filename or DEFAULT_FILE_NAME

    if not file_name.lower().endswith(".pdf"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only PDF files are accepted",
        )

    try:
        file_bytes = await pdf.read()

        if not file_bytes:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Empty file provided",
            )

        logger.info("Processing EPD PDF: %s (%d bytes)", file_name, len(file_bytes))

        document_text = pdf_service.extract_text(file_bytes)
        return await ai_service.extract_epd(document_text, file_name)

    # Rendered by the app-level exception handlers
    except (HTTPException, PDFExtractionError, AIServiceError):
        raise
    except Exception as e:
        logger.exception("Unexpected error processing EPD PDF")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Internal error: {e}",
        )
    finally:
        await pdf.close()
