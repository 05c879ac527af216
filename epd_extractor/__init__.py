"""EPD Extractor: Environmental Product Declaration extraction service."""

from .backend import __version__

__all__ = ["__version__"]
