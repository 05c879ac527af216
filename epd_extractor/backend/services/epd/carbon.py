"""
Carbon intensity (kg CO2-eq per kg of material) derived from a normalized
EPD record.

GWP in an EPD is declared per functional unit (m³, m², piece...). To get a
per-kilogram figure it is divided by the material density (volume-based
units) or the areal weight (area-based units). The calculation strategies
are tried in order and the first applicable one wins:

1. density, when the density or functional unit is volumetric
2. weight, when the weight or functional unit is areal
3. any positive density
4. any positive weight

Values are rounded to 3 decimals, half away from zero.
"""

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Any, Callable, Mapping

from .normalization import coerce, is_missing, is_number

logger = logging.getLogger(__name__)

RESULT_UNIT = "kg CO2-eq/kg material"
NOT_CALCULABLE = "Not calculable"
CALCULATION_ERROR = "Calculation error"

GWP_LABEL = "Global Warming Potential"
DENSITY_LABEL = "Material Density"
WEIGHT_LABEL = "Material Weight"
FUNCTIONAL_UNIT_LABEL = "Functional Unit"

_VOLUME_MARKERS = ("m³", "m3")
_AREA_MARKERS = ("m²", "m2")
_PRECISION = Decimal("0.001")


@dataclass(frozen=True)
class CarbonInputs:
    """Signals the strategies decide on, read once from the record."""

    gwp: float
    density: Any
    density_unit: str
    weight: Any
    weight_unit: str
    functional_unit: str

    @property
    def density_is_volumetric(self) -> bool:
        return is_number(self.density) and (
            _mentions(self.density_unit, _VOLUME_MARKERS)
            or _mentions(self.functional_unit, _VOLUME_MARKERS)
        )

    @property
    def weight_is_areal(self) -> bool:
        # Density wins when only the functional unit hints at the basis.
        return is_number(self.weight) and (
            _mentions(self.weight_unit, _AREA_MARKERS)
            or (
                not self.density_is_volumetric
                and _mentions(self.functional_unit, _AREA_MARKERS)
            )
        )


@dataclass(frozen=True)
class CarbonStrategy:
    """One entry of the ordered decision list."""

    name: str
    divisor: Callable[[CarbonInputs], Any]
    applies: Callable[[CarbonInputs], bool]
    reason: str
    basis_unit: str  # "m³" or "m²"

    def matches(self, inputs: CarbonInputs) -> bool:
        return self.applies(inputs) and _is_positive(self.divisor(inputs))

    def compute(self, inputs: CarbonInputs) -> dict[str, Any]:
        divisor = self.divisor(inputs)
        quotient = inputs.gwp / divisor
        rounded = round_half_up(quotient)
        return {
            "value": float(rounded),
            "reason": self.reason,
            "unit": RESULT_UNIT,
            "calculation": (
                f"{format_number(inputs.gwp)} kg CO2-eq/{self.basis_unit} ÷ "
                f"{format_number(divisor)} kg/{self.basis_unit} = "
                f"{rounded:f} kg CO2-eq/kg"
            ),
        }


def _mentions(text: str, markers: tuple[str, ...]) -> bool:
    return any(marker in text for marker in markers)


def _is_positive(value: Any) -> bool:
    return is_number(value) and value > 0


def round_half_up(value: float) -> Decimal:
    """Round to 3 decimals, ties away from zero, on the shortest repr of ``value``."""
    exact = Decimal(repr(value))
    with localcontext() as ctx:
        # Room for every integer digit plus the three decimals
        ctx.prec = max(ctx.prec, exact.adjusted() + 5)
        return exact.quantize(_PRECISION, rounding=ROUND_HALF_UP)


def format_number(value: float) -> str:
    """Render a number the way it reads in the source data (``10`` not ``10.0``, ``0.00001`` not ``1e-05``)."""
    text = format(Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


STRATEGIES: tuple[CarbonStrategy, ...] = (
    CarbonStrategy(
        name="density_volumetric",
        divisor=lambda i: i.density,
        applies=lambda i: i.density_is_volumetric,
        reason="Calculated using material density (volume-based)",
        basis_unit="m³",
    ),
    CarbonStrategy(
        name="weight_areal",
        divisor=lambda i: i.weight,
        applies=lambda i: i.weight_is_areal,
        reason="Calculated using material weight (area-based)",
        basis_unit="m²",
    ),
    CarbonStrategy(
        name="density_fallback",
        divisor=lambda i: i.density,
        applies=lambda i: True,
        reason="Calculated using available density data",
        basis_unit="m³",
    ),
    CarbonStrategy(
        name="weight_fallback",
        divisor=lambda i: i.weight,
        applies=lambda i: True,
        reason="Calculated using available weight data",
        basis_unit="m²",
    ),
)


def _not_calculable(reason: str) -> dict[str, Any]:
    return {"value": NOT_CALCULABLE, "reason": reason, "unit": RESULT_UNIT}


def _field(record: Mapping[str, Any], label: str) -> Mapping[str, Any]:
    return record.get(label) or {}


def _field_value(record: Mapping[str, Any], label: str) -> Any:
    value = _field(record, label).get("value")
    return None if is_missing(value) else coerce(value)


def _field_text(record: Mapping[str, Any], label: str, key: str) -> str:
    text = _field(record, label).get(key)
    return "" if text is None else str(text)


def read_inputs(record: Mapping[str, Any], gwp: float) -> CarbonInputs:
    """Collect density, weight and functional unit signals from the record."""
    functional_unit = _field(record, FUNCTIONAL_UNIT_LABEL).get("value")
    return CarbonInputs(
        gwp=gwp,
        density=_field_value(record, DENSITY_LABEL),
        density_unit=_field_text(record, DENSITY_LABEL, "unit"),
        weight=_field_value(record, WEIGHT_LABEL),
        weight_unit=_field_text(record, WEIGHT_LABEL, "unit"),
        functional_unit="" if is_missing(functional_unit) else str(functional_unit).lower(),
    )


def resolve_carbon_intensity(
    record: Mapping[str, Any],
    strategies: tuple[CarbonStrategy, ...] = STRATEGIES,
) -> dict[str, Any]:
    """
    Compute the carbon footprint per kg of material.

    Args:
        record: Normalized EPD record (label -> value/unit/source).
        strategies: Ordered strategies to try; the first match wins.

    Returns:
        Dict with ``value`` (float, "Not calculable" or "Calculation error"),
        ``reason``, ``unit`` and, for computed values, ``calculation``.
        Never raises.
    """
    try:
        raw_gwp = _field(record, GWP_LABEL).get("value")
        if is_missing(raw_gwp):
            logger.info("Carbon intensity not calculable: no GWP")
            return _not_calculable("Global Warming Potential not found")

        gwp = coerce(raw_gwp)
        if not is_number(gwp):
            logger.info("Carbon intensity not calculable: invalid GWP %r", raw_gwp)
            return _not_calculable("Invalid GWP value")

        inputs = read_inputs(record, gwp)
        logger.debug(
            "Carbon inputs: %s (volumetric=%s, areal=%s)",
            inputs,
            inputs.density_is_volumetric,
            inputs.weight_is_areal,
        )

        for strategy in strategies:
            if strategy.matches(inputs):
                result = strategy.compute(inputs)
                logger.info(
                    "Carbon intensity via %s: %s", strategy.name, result["calculation"]
                )
                return result

        logger.info("Carbon intensity not calculable: no density or weight")
        return _not_calculable("No valid material density or weight data found")

    except Exception as e:
        logger.exception("Carbon intensity calculation failed")
        return {"value": CALCULATION_ERROR, "reason": str(e), "unit": RESULT_UNIT}
