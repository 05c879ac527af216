"""
Field normalization for raw EPD extractions.

Turns the LLM's parsed JSON object into an ordered record keyed by
human-readable indicator labels, where every entry is a
``{"value", "unit", "source"}`` triple and numeric values are coerced
to floats.
"""

import logging
import re
from typing import Any, Mapping

logger = logging.getLogger(__name__)

NOT_FOUND = "Not found"

# Ordered (raw key, label) pairs. Output field order follows this table.
FIELD_MAPPINGS: tuple[tuple[str, str], ...] = (
    ("product_name", "Product Name"),
    ("functional_unit", "Functional Unit"),
    ("material_density", "Material Density"),
    ("material_weight", "Material Weight"),
    ("gwp", "Global Warming Potential"),
    ("ap", "Acidification Potential"),
    ("ep", "Eutrophication Potential"),
    ("odp", "Ozone Depletion Potential"),
    ("pocp", "Photochemical Ozone Creation Potential"),
    ("adpe", "Abiotic Depletion Potential (Elements)"),
    ("adpf", "Abiotic Depletion Potential (Fossil)"),
    ("ped", "Primary Energy Demand"),
    ("water_use", "Water Use"),
    ("land_use", "Land Use"),
    ("system_boundaries", "System Boundaries"),
    ("epd_program", "EPD Program"),
    ("valid_until", "Valid Until"),
    ("verification_status", "Verification Status"),
)

RAW_KEYS: tuple[str, ...] = tuple(key for key, _ in FIELD_MAPPINGS)

# "1,150" / "1 150" / "1'150" -> "1150"
_THOUSANDS_SEPARATOR = re.compile(r"(?<=\d)[,\s'_](?=\d{3}(?!\d))")
# A float literal not glued to a preceding letter, so "CO2" or "m3" never count.
_FLOAT_LITERAL = re.compile(r"(?<![A-Za-z\d.])[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def is_number(value: Any) -> bool:
    """True for int/float values, excluding booleans."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_missing(value: Any) -> bool:
    """True when a raw or normalized value carries no data."""
    return value is None or value == "" or value == NOT_FOUND


def coerce(value: Any) -> Any:
    """
    Coerce an LLM-provided value to a float where possible.

    Numbers are returned unchanged. From strings, thousands separators are
    dropped and the first float literal (decimal point and scientific
    notation included) is parsed; units and stray symbols around it are
    discarded, and digits belonging to words such as "CO2" are ignored:

        "45.2 kg CO2-eq/kg" -> 45.2
        "1.2e-3"            -> 0.0012
        "1,150 MJ"          -> 1150.0
        "N/A"               -> "N/A"

    Never raises. Anything that cannot be parsed is returned as given.
    """
    if is_number(value):
        return value
    if not isinstance(value, str):
        return value

    cleaned = _THOUSANDS_SEPARATOR.sub("", value)
    match = _FLOAT_LITERAL.search(cleaned)
    if not match:
        return value

    try:
        return float(match.group(0))
    except (ValueError, OverflowError):
        return value


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _empty_field() -> dict[str, Any]:
    return {"value": NOT_FOUND, "unit": "", "source": ""}


def normalize_field(raw_value: Any) -> dict[str, Any]:
    """Normalize a single raw extraction value into a value/unit/source triple."""
    if is_missing(raw_value):
        return _empty_field()

    if isinstance(raw_value, Mapping) and "value" in raw_value:
        return {
            "value": coerce(raw_value["value"]),
            "unit": _text(raw_value.get("unit")),
            "source": _text(raw_value.get("source")),
        }

    return {"value": raw_value, "unit": "", "source": ""}


def normalize(
    raw: Mapping[str, Any],
    mappings: tuple[tuple[str, str], ...] = FIELD_MAPPINGS,
) -> dict[str, dict[str, Any]]:
    """
    Build the normalized record for a raw extraction.

    Args:
        raw: Parsed JSON object returned by the LLM.
        mappings: Ordered (raw key, label) pairs to emit.

    Returns:
        Dict keyed by label, in mapping order, with one entry per mapping.
        Keys missing from ``raw`` become "Not found" entries.
    """
    record = {label: normalize_field(raw.get(key)) for key, label in mappings}

    found = sum(1 for field in record.values() if not is_missing(field["value"]))
    logger.info("Normalized %d/%d EPD fields", found, len(record))
    return record
