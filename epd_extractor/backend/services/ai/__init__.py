"""
AI service package for EPD data extraction.

This package provides:
- extraction: prompt construction, chat completion, JSON parsing and
  assembly of the extraction response
- exceptions: error types surfaced to the HTTP layer

The AIService class holds the LLM configuration and lazily creates the
OpenAI (or Azure OpenAI) client.
"""

import logging

from ...config import Settings, get_settings
from ...models import EPDExtractionResponse
from .exceptions import AIServiceError, ConfigurationError, ResponseParseError
from .extraction import (
    EXTRACTION_SYSTEM_PROMPT,
    build_extraction_prompt,
    build_extraction_response,
    complete_chat as _complete_chat,
    parse_json_object,
)

logger = logging.getLogger(__name__)

# Export public functions and classes
__all__ = [
    "AIService",
    "AIServiceError",
    "ConfigurationError",
    "EXTRACTION_SYSTEM_PROMPT",
    "ResponseParseError",
    "build_extraction_prompt",
    "build_extraction_response",
    "get_ai_service",
    "parse_json_object",
]


class AIService:
    """
    Service for LLM-powered EPD extraction.

    Uses an OpenAI chat model, or an Azure OpenAI deployment when an Azure
    endpoint is configured.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        azure_endpoint: str | None = None,
        settings: Settings | None = None,
    ):
        """
        Initialize the AI service.

        Args:
            api_key: OpenAI API key. If None, read from settings.
            model: Model or Azure deployment name. If None, read from settings.
            azure_endpoint: Azure OpenAI endpoint. If None, read from settings.
            settings: Settings to use instead of the cached application settings.
        """
        settings = settings or get_settings()

        self.api_key = api_key if api_key is not None else settings.openai_api_key
        self.model = model or settings.openai_model
        self.azure_endpoint = azure_endpoint or settings.azure_openai_endpoint
        self.api_version = settings.azure_openai_api_version
        self.max_tokens = settings.llm_max_tokens
        self.temperature = settings.llm_temperature
        self._client = None

        if not self.api_key:
            logger.warning(
                "No LLM API key configured. Set OPENAI_API_KEY or AZURE_OPENAI_API_KEY."
            )

    @property
    def client(self):
        """Lazy-load the OpenAI client."""
        if self._client is None:
            if not self.api_key:
                raise ConfigurationError(
                    "LLM API key not configured. Set OPENAI_API_KEY or AZURE_OPENAI_API_KEY."
                )
            if self.azure_endpoint:
                from openai import AzureOpenAI

                self._client = AzureOpenAI(
                    api_key=self.api_key,
                    azure_endpoint=self.azure_endpoint,
                    api_version=self.api_version,
                )
                logger.info("Using Azure OpenAI endpoint %s", self.azure_endpoint)
            else:
                from openai import OpenAI

                self._client = OpenAI(api_key=self.api_key)
        return self._client

    async def complete_chat(self, prompt: str, system_message: str) -> str:
        """
        Run a chat completion.

        Raises:
            ConfigurationError: If no API key is configured.
            AIServiceError: If the completion fails.
        """
        return _complete_chat(
            prompt,
            system_message,
            client=self.client,
            model=self.model,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
        )

    async def extract_epd(
        self, document_text: str, file_name: str
    ) -> EPDExtractionResponse:
        """
        Extract EPD indicators from document text.

        Args:
            document_text: Text extracted from the PDF.
            file_name: Original filename for the result metadata.

        Returns:
            EPDExtractionResponse with raw, normalized and derived data.

        Raises:
            ConfigurationError: If no API key is configured.
            AIServiceError: If the completion fails.
            ResponseParseError: If the completion holds no JSON object.
        """
        logger.info(
            "Extracting EPD data from '%s' (%d chars of text)",
            file_name,
            len(document_text),
        )

        completion = await self.complete_chat(
            build_extraction_prompt(document_text), EXTRACTION_SYSTEM_PROMPT
        )
        raw_data = parse_json_object(completion)
        result = build_extraction_response(raw_data, file_name, len(document_text))

        logger.info(
            "EPD extraction complete for '%s': carbon footprint %s",
            file_name,
            result.carbon_footprint_per_kg.value,
        )
        return result


# =============================================================================
# Singleton Factory
# =============================================================================

_ai_service: AIService | None = None


def get_ai_service() -> AIService:
    """Get or create the AI service singleton."""
    global _ai_service
    if _ai_service is None:
        _ai_service = AIService()
    return _ai_service
