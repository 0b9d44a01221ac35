"""
Utilities Package - Logging and Exception Handling
"""
from .logging import get_logger, setup_logging, mask_secret
from .exceptions import (
    ImagingAssistantError,
    ValidationError,
    ConfigurationError,
    ProviderError,
    ProviderInitError,
    AnalysisFailedError,
    ChatFailedError,
    ResponseShapeError,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "mask_secret",
    "ImagingAssistantError",
    "ValidationError",
    "ConfigurationError",
    "ProviderError",
    "ProviderInitError",
    "AnalysisFailedError",
    "ChatFailedError",
    "ResponseShapeError",
]
