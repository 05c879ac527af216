"""
Routers package for FastAPI endpoints.

Organized by domain:
- extract: EPD PDF upload and extraction
"""

from . import extract

__all__ = ["extract"]
