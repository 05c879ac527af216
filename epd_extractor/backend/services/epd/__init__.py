"""
EPD domain logic: field normalization and carbon intensity.

Both modules are pure functions over plain dicts:
- normalization: raw LLM JSON -> labelled value/unit/source record
- carbon: normalized record -> kg CO2-eq per kg of material
"""

from .carbon import (
    CALCULATION_ERROR,
    NOT_CALCULABLE,
    RESULT_UNIT,
    STRATEGIES,
    CarbonInputs,
    CarbonStrategy,
    resolve_carbon_intensity,
)
from .normalization import FIELD_MAPPINGS, NOT_FOUND, RAW_KEYS, coerce, normalize

__all__ = [
    "CALCULATION_ERROR",
    "FIELD_MAPPINGS",
    "NOT_CALCULABLE",
    "NOT_FOUND",
    "RAW_KEYS",
    "RESULT_UNIT",
    "STRATEGIES",
    "CarbonInputs",
    "CarbonStrategy",
    "coerce",
    "normalize",
    "resolve_carbon_intensity",
]
