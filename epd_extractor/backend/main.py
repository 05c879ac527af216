"""
FastAPI application for the EPD extraction service.

Provides endpoints for:
- Extracting EPD indicators and carbon footprint per kg from a PDF
- Health checks
- OpenAPI documentation under /api/docs
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .config import get_settings
from .models import ErrorResponse, HealthResponse
from .routers import extract
from .services.ai import (
    AIServiceError,
    ConfigurationError,
    ResponseParseError,
    get_ai_service,
)
from .services.pdf_service import PDFExtractionError, get_pdf_service

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

HEALTH_FEATURES = [
    "PDF text extraction",
    "LLM EPD indicator extraction",
    "Field normalization",
    "Carbon footprint per kg calculation",
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    logger.info("Starting EPD Extractor Service...")
    if get_settings().debug:
        logging.getLogger().setLevel(logging.DEBUG)
    # Initialize services on startup
    get_pdf_service()
    get_ai_service()
    logger.info("Services initialized successfully")
    yield
    logger.info("Shutting down EPD Extractor Service...")


# Create FastAPI application
app = FastAPI(
    title="EPD Extractor API",
    description="Extraction of Environmental Product Declaration (EPD) data from PDF documents",
    version=__version__,
    lifespan=lifespan,
    docs_url="/api/docs",
    openapi_url="/api/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


# =============================================================================
# Health Endpoints
# =============================================================================


@app.get("/", response_model=HealthResponse, tags=["Health"])
async def root() -> HealthResponse:
    """Root endpoint - health check."""
    return HealthResponse(features=HEALTH_FEATURES)


@app.get("/health", response_model=HealthResponse, tags=["Health"])
@app.get("/api/health", response_model=HealthResponse, tags=["Health"])
async def health_check() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(features=HEALTH_FEATURES)


# =============================================================================
# Include Routers
# =============================================================================

app.include_router(extract.router)


# =============================================================================
# Exception Handlers
# =============================================================================


def _error_response(
    status_code: int,
    error: str,
    error_type: str,
    raw_response: str | None = None,
) -> JSONResponse:
    body = ErrorResponse(
        error=error,
        error_type=error_type,
        raw_response=raw_response,
    )
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(by_alias=True, exclude_none=True),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render request errors (bad upload, unknown route) in the common error body."""
    logger.warning("Request rejected (%s): %s", exc.status_code, exc.detail)
    response = _error_response(exc.status_code, str(exc.detail), "HTTPException")
    if exc.headers:
        response.headers.update(exc.headers)
    return response


@app.exception_handler(PDFExtractionError)
async def pdf_extraction_error_handler(request: Request, exc: PDFExtractionError):
    """Handle PDF text extraction errors."""
    logger.error("PDF extraction failed: %s", exc)
    return _error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY, str(exc), type(exc).__name__
    )


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    """Handle missing LLM configuration."""
    logger.error("Configuration error: %s", exc)
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc), type(exc).__name__
    )


@app.exception_handler(ResponseParseError)
async def response_parse_error_handler(request: Request, exc: ResponseParseError):
    """Handle LLM responses without a parseable JSON object."""
    logger.error("LLM response parse failed: %s", exc)
    return _error_response(
        status.HTTP_502_BAD_GATEWAY, str(exc), type(exc).__name__, exc.raw_response
    )


@app.exception_handler(AIServiceError)
async def ai_service_error_handler(request: Request, exc: AIServiceError):
    """Handle AI service errors."""
    logger.error("AI service error: %s", exc)
    return _error_response(
        status.HTTP_503_SERVICE_UNAVAILABLE, str(exc), type(exc).__name__
    )
