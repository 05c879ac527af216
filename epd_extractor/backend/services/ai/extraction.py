"""
EPD data extraction from document text.

Builds the fixed extraction prompt for the PDF text, runs the chat
completion, parses the JSON object out of the reply, and assembles the
response from the normalized indicators and the carbon footprint per kg.
"""

import json
import logging
from typing import Any

from ...models import (
    CarbonIntensityResult,
    EPDExtractionResponse,
    ExtractionMetadata,
    NormalizedField,
)
from ..epd import normalize, resolve_carbon_intensity
from .exceptions import AIServiceError, ResponseParseError

logger = logging.getLogger(__name__)

EXTRACTION_METHOD = "single-pass-llm"


# =============================================================================
# Extraction Prompts
# =============================================================================

EXTRACTION_SYSTEM_PROMPT = (
    "You are an expert EPD analyst. Extract data precisely according to the "
    "specified JSON format. Return only valid JSON."
)

EXTRACTION_PROMPT_TEMPLATE = """You are an expert Environmental Product Declaration (EPD) analyst. Extract ALL environmental impact data from the provided EPD document text.

## Extraction Rules:
1. Extract EXACT numerical values with their units
2. Look for data in tables, charts, and text descriptions
3. Search for alternative names/abbreviations for each indicator
4. If a value appears multiple times, use the most complete/official one
5. Return "Not found" only if absolutely no relevant data exists

## Required EPD Indicators:
- Global Warming Potential (GWP, CO2-eq, Carbon footprint)
- Acidification Potential (AP, SO2-eq, Acid rain potential)
- Eutrophication Potential (EP, PO4-eq, Nutrient enrichment)
- Ozone Depletion Potential (ODP, CFC-11-eq)
- Photochemical Ozone Creation Potential (POCP, C2H4-eq, Smog formation)
- Abiotic Depletion Potential Elements (ADPE, Sb-eq, Mineral depletion)
- Abiotic Depletion Potential Fossil (ADPF, MJ, Fossil fuel depletion)
- Primary Energy Demand (PED, MJ, Energy consumption)
- Water Use (WU, m3, Water consumption)
- Land Use (LU, m2*year, Land occupation)

## Additional Data:
- Product name and description
- Functional unit (what the values are per)
- Material density (kg/m³, g/cm³) if available
- Material weight per unit (kg/m², kg/piece, etc.)
- System boundaries (cradle-to-gate, cradle-to-grave, etc.)
- EPD program operator
- Verification status
- Valid until date

## Response Format:
Return a JSON object with this exact structure:
{{
  "product_name": "extracted name",
  "functional_unit": "per kg, per m2, etc.",
  "material_density": {{"value": number, "unit": "kg/m³", "source": "table/text location"}},
  "material_weight": {{"value": number, "unit": "kg/m²", "source": "table/text location"}},
  "gwp": {{"value": number, "unit": "kg CO2-eq", "source": "table/text location"}},
  "ap": {{"value": number, "unit": "kg SO2-eq", "source": "table/text location"}},
  "ep": {{"value": number, "unit": "kg PO4-eq", "source": "table/text location"}},
  "odp": {{"value": number, "unit": "kg CFC-11-eq", "source": "table/text location"}},
  "pocp": {{"value": number, "unit": "kg C2H4-eq", "source": "table/text location"}},
  "adpe": {{"value": number, "unit": "kg Sb-eq", "source": "table/text location"}},
  "adpf": {{"value": number, "unit": "MJ", "source": "table/text location"}},
  "ped": {{"value": number, "unit": "MJ", "source": "table/text location"}},
  "water_use": {{"value": number, "unit": "m3", "source": "table/text location"}},
  "land_use": {{"value": number, "unit": "m2*year", "source": "table/text location"}},
  "system_boundaries": "extracted boundaries",
  "epd_program": "program name",
  "valid_until": "date",
  "verification_status": "verified/not verified"
}}

Use "Not found" for any indicator that cannot be located in the document.

DOCUMENT TEXT:
{document_text}"""


def build_extraction_prompt(document_text: str) -> str:
    """Build the extraction prompt for a document's text."""
    return EXTRACTION_PROMPT_TEMPLATE.format(document_text=document_text)


# =============================================================================
# Completion and Parsing
# =============================================================================


def complete_chat(
    prompt: str,
    system_message: str,
    client: Any,  # OpenAI or AzureOpenAI client
    model: str = "gpt-4.1-mini",
    max_tokens: int = 4000,
    temperature: float = 0.1,
) -> str:
    """
    Run a single chat completion and return the reply text.

    Raises:
        AIServiceError: On network/API errors, no choices or empty content.
    """
    logger.info("Calling chat completion (model=%s, prompt=%d chars)", model, len(prompt))

    try:
        response = client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": system_message},
                {"role": "user", "content": prompt},
            ],
            max_tokens=max_tokens,
            temperature=temperature,
        )
    except Exception as e:
        logger.error("Chat completion failed: %s", e)
        raise AIServiceError(f"Failed to call LLM: {e}") from e

    if not response.choices:
        raise AIServiceError("No choices returned from LLM")

    content = response.choices[0].message.content
    if not content:
        raise AIServiceError("Empty response from LLM")

    logger.info("Completion received (%d chars)", len(content))
    logger.debug("Completion preview: %s", content[:200])
    return content


def parse_json_object(content: str) -> dict[str, Any]:
    """
    Parse the JSON object embedded in a completion.

    Takes everything from the first ``{`` to the last ``}``, which tolerates
    prose or markdown code fences around the object.

    Raises:
        ResponseParseError: If no JSON object can be parsed. The raw
            completion is kept on the exception.
    """
    start = content.find("{")
    end = content.rfind("}")
    if start == -1 or end < start:
        logger.error("No JSON object in LLM response: %s", content[:500])
        raise ResponseParseError(
            "Failed to parse extracted EPD data: no JSON object found in response",
            raw_response=content,
        )

    try:
        parsed = json.loads(content[start : end + 1])
    except json.JSONDecodeError as e:
        logger.error("Failed to parse extraction response: %s", content[:500])
        raise ResponseParseError(
            f"Failed to parse extracted EPD data: {e}", raw_response=content
        ) from e

    logger.info("Parsed LLM response with keys: %s", list(parsed))
    return parsed


# =============================================================================
# Response Assembly
# =============================================================================


def build_extraction_response(
    raw_data: dict[str, Any],
    file_name: str,
    text_length: int,
) -> EPDExtractionResponse:
    """Normalize the raw extraction and attach the carbon footprint per kg."""
    formatted = normalize(raw_data)
    carbon = resolve_carbon_intensity(formatted)

    return EPDExtractionResponse(
        data=raw_data,
        formatted_data={
            label: NormalizedField(**field) for label, field in formatted.items()
        },
        carbon_footprint_per_kg=CarbonIntensityResult(**carbon),
        metadata=ExtractionMetadata(
            file_name=file_name,
            text_length=text_length,
            extraction_method=EXTRACTION_METHOD,
        ),
    )

