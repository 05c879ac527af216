"""
Pydantic models for the EPD extraction API.

Response bodies use camelCase keys (``formattedData``,
``carbonFootprintPerKg``) while Python attributes stay snake_case.
"""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_serializer
from pydantic.alias_generators import to_camel

from . import __version__


class CamelModel(BaseModel):
    """Base model serializing field names as camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class NormalizedField(BaseModel):
    """
    A single normalized EPD indicator.

    Attributes:
        value: Float when the extracted value was numeric, "Not found" when
            missing, otherwise the extracted value as given.
        unit: Unit reported by the LLM, empty if none.
        source: Location in the document the LLM cited, empty if none.
    """

    value: Any = Field(..., description="Numeric value, 'Not found', or raw text")
    unit: str = Field(default="", description="Unit of the value")
    source: str = Field(default="", description="Where in the document it was found")


class CarbonIntensityResult(BaseModel):
    """Carbon footprint per kilogram of material."""

    value: float | str = Field(
        ...,
        description="kg CO2-eq per kg, or 'Not calculable' / 'Calculation error'",
    )
    reason: str = Field(..., description="How the value was derived, or why not")
    unit: str = Field(default="kg CO2-eq/kg material")
    calculation: str | None = Field(
        default=None,
        description="Human-readable division that produced the value",
        examples=["10 kg CO2-eq/m³ ÷ 2 kg/m³ = 5.000 kg CO2-eq/kg"],
    )

    @model_serializer(mode="wrap")
    def _omit_missing_calculation(self, handler):
        data = handler(self)
        if data.get("calculation") is None:
            data.pop("calculation", None)
        return data


class ExtractionMetadata(CamelModel):
    """Request-level metadata attached to every extraction."""

    file_name: str
    extraction_timestamp: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(),
    )
    text_length: int = Field(..., ge=0)
    extraction_method: str = Field(default="single-pass-llm")


class EPDExtractionResponse(CamelModel):
    """Successful response of POST /api/extract-epd."""

    success: bool = True
    data: dict[str, Any] = Field(
        ..., description="Raw JSON object returned by the LLM"
    )
    formatted_data: dict[str, NormalizedField] = Field(
        ..., description="Normalized indicators keyed by label"
    )
    carbon_footprint_per_kg: CarbonIntensityResult
    metadata: ExtractionMetadata


class ErrorResponse(CamelModel):
    """Error body returned for failed extractions."""

    success: bool = False
    error: str
    error_type: str
    timestamp: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(),
    )
    raw_response: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(default="healthy")
    timestamp: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(),
    )
    version: str = Field(default=__version__)
    features: list[str] = Field(default_factory=list)
