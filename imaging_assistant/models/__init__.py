from .imaging import (
    AnalyzeImageRequest,
    ChatTurnModel,
    ChatRequestBody,
    ApiKeyRequest,
    AnalyzeImageResponse,
    ChatResponse,
    ModalityModel,
    ModalitiesResponse,
    UpdateSettingsResponse,
    HealthResponse,
)

__all__ = [
    "AnalyzeImageRequest",
    "ChatTurnModel",
    "ChatRequestBody",
    "ApiKeyRequest",
    "AnalyzeImageResponse",
    "ChatResponse",
    "ModalityModel",
    "ModalitiesResponse",
    "UpdateSettingsResponse",
    "HealthResponse",
]
