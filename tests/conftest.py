"""Pytest configuration and fixtures."""

import io
import json
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from pypdf import PdfWriter

from epd_extractor.backend.main import app
from epd_extractor.backend.services.ai import AIService, get_ai_service


def _build_text_pdf(text: str) -> bytes:
    """Assemble a one-page PDF with a Helvetica text line and a valid xref table."""
    stream = f"BT /F1 12 Tf 72 720 Td ({text}) Tj ET".encode("latin-1")
    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
        b"/Resources << /Font << /F1 5 0 R >> >> /Contents 4 0 R >>",
        b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]

    buffer = io.BytesIO()
    buffer.write(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(buffer.tell())
        buffer.write(b"%d 0 obj\n" % number + body + b"\nendobj\n")

    xref_offset = buffer.tell()
    buffer.write(b"xref\n0 %d\n" % (len(objects) + 1))
    buffer.write(b"0000000000 65535 f \n")
    for offset in offsets:
        buffer.write(b"%010d 00000 n \n" % offset)
    buffer.write(
        b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n"
        % (len(objects) + 1, xref_offset)
    )
    return buffer.getvalue()


class FakeAIService(AIService):
    """AIService returning a canned completion instead of calling the LLM."""

    def __init__(self, completion: str | Exception):
        super().__init__(api_key="test-key", model="test-model")
        self.completion = completion
        self.calls: list[tuple[str, str]] = []

    async def complete_chat(self, prompt: str, system_message: str) -> str:
        self.calls.append((prompt, system_message))
        if isinstance(self.completion, Exception):
            raise self.completion
        return self.completion


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI application."""
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def use_ai_service():
    """Install an AI service instance for the extraction endpoint."""

    def install(service: AIService) -> AIService:
        app.dependency_overrides[get_ai_service] = lambda: service
        return service

    yield install
    app.dependency_overrides.pop(get_ai_service, None)


@pytest.fixture
def sample_pdf_bytes() -> bytes:
    """A one-page PDF with an EPD-like text line."""
    return _build_text_pdf("GWP 10 kg CO2-eq per m3")


@pytest.fixture
def blank_pdf_bytes() -> bytes:
    """A valid PDF whose only page has no text layer."""
    writer = PdfWriter()
    writer.add_blank_page(width=612, height=792)
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


@pytest.fixture
def invalid_file_bytes() -> bytes:
    """Create invalid (non-PDF) file bytes for testing."""
    return b"This is not a PDF file"


@pytest.fixture
def raw_extraction() -> dict:
    """A complete raw LLM extraction for a concrete product declared per m³."""
    return {
        "product_name": "Ready-mix concrete C30/37",
        "functional_unit": "1 m³ of concrete",
        "material_density": {"value": 2400, "unit": "kg/m³", "source": "Table 1"},
        "material_weight": "Not found",
        "gwp": {"value": "264 kg CO2-eq", "unit": "kg CO2-eq", "source": "Table 5, A1-A3"},
        "ap": {"value": 0.62, "unit": "kg SO2-eq", "source": "Table 5"},
        "ep": {"value": 0.11, "unit": "kg PO4-eq", "source": "Table 5"},
        "odp": {"value": "5.1E-6", "unit": "kg CFC-11-eq", "source": "Table 5"},
        "pocp": {"value": 0.04, "unit": "kg C2H4-eq", "source": "Table 5"},
        "adpe": {"value": 1.2e-4, "unit": "kg Sb-eq", "source": "Table 5"},
        "adpf": {"value": "1,150", "unit": "MJ", "source": "Table 5"},
        "ped": {"value": 1480, "unit": "MJ", "source": "Table 6"},
        "water_use": {"value": 1.9, "unit": "m3", "source": "Table 6"},
        "land_use": "Not found",
        "system_boundaries": "cradle-to-gate with options",
        "epd_program": "IBU",
        "valid_until": "2029-05-31",
        "verification_status": "verified",
    }


@pytest.fixture
def raw_completion(raw_extraction: dict) -> str:
    """An LLM completion wrapping the raw extraction in a code fence."""
    return "Here is the extracted data:\n```json\n" + json.dumps(raw_extraction) + "\n```"


@pytest.fixture
def fake_ai_service_factory():
    """Build FakeAIService instances."""
    return FakeAIService
