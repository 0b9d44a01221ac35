"""
Custom Exception Hierarchy

Every failure the orchestration layer can report is one of these types.
Each carries the HTTP status it maps to and renders its own JSON body.
"""
from typing import Optional, Dict, Any


class ImagingAssistantError(Exception):
    """Base exception for all imaging assistant errors."""

    status_code: int = 500
    title: str = "Internal error"

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.title,
            "message": self.message,
        }


class ValidationError(ImagingAssistantError):
    """Required input is missing (no image and no question, empty chat message)."""

    status_code = 400

    def __init__(
        self,
        message: str,
        field: str = "unknown",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            details={"field": field, **(details or {})}
        )
        self.field = field

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message}


class ConfigurationError(ImagingAssistantError):
    """No usable provider credential is available."""

    title = "Gemini AI not configured"

    def __init__(
        self,
        message: str = "Please configure your Gemini API key in the settings",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="CONFIGURATION_ERROR",
            details=details
        )


class ProviderError(ImagingAssistantError):
    """The remote provider call failed (auth, quota, timeout, network)."""

    title = "Provider request failed"

    def __init__(
        self,
        message: str,
        code: str = "PROVIDER_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message=message, code=code, details=details)


class ProviderInitError(ProviderError):
    """The provider SDK rejected the credential while building a client."""

    title = "Failed to initialize Gemini client"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="PROVIDER_INIT_ERROR", details=details)


class AnalysisFailedError(ProviderError):
    """Image or question analysis could not be completed."""

    title = "Analysis failed"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="ANALYSIS_FAILED", details=details)


class ChatFailedError(ProviderError):
    """Chat turn could not be completed."""

    title = "Chat processing failed"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="CHAT_FAILED", details=details)


class ResponseShapeError(ImagingAssistantError):
    """The provider replied but no text could be extracted from the reply."""

    title = "Unexpected provider response"

    def __init__(
        self,
        message: str,
        response_type: str = "unknown",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="RESPONSE_SHAPE_ERROR",
            details={"response_type": response_type, **(details or {})}
        )
        self.response_type = response_type
