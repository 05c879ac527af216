"""
EPD Extractor Backend Application.

A FastAPI service for extracting Environmental Product Declaration (EPD)
indicators from PDF documents using an LLM, and deriving the carbon
footprint per kilogram of material.
"""

__version__ = "1.2.0"
