"""
Services package for the EPD extraction application.

Contains:
- pdf_service: PDF text extraction
- ai: LLM integration for EPD data extraction
- epd: field normalization and carbon intensity calculation
"""

from .ai import AIService
from .pdf_service import PDFService

__all__ = ["PDFService", "AIService"]
