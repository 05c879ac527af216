"""
Shared exceptions for AI service modules.
"""


class AIServiceError(Exception):
    """Raised when AI service operations fail."""

    pass


class ConfigurationError(AIServiceError):
    """Raised when the LLM client cannot be configured (e.g. no API key)."""

    pass


class ResponseParseError(AIServiceError):
    """Raised when the completion does not contain a parseable JSON object."""

    def __init__(self, message: str, raw_response: str = ""):
        super().__init__(message)
        self.raw_response = raw_response
