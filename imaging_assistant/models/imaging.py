"""
API request/response models.

Field aliases keep the camelCase JSON contract used by the web client.
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class AnalyzeImageRequest(_CamelModel):
    """Image (base64) and/or question to analyze."""
    image_data: Optional[str] = Field(default=None, alias="imageData")
    question: Optional[str] = None
    clinical_context: Optional[str] = Field(default=None, alias="clinicalContext")
    api_key: Optional[str] = Field(default=None, alias="apiKey")


class ChatTurnModel(BaseModel):
    role: str
    content: str


class ChatRequestBody(_CamelModel):
    """Chat message; `message` is checked by the dispatcher so empty input gets a 400."""
    message: Optional[str] = None
    history: List[ChatTurnModel] = Field(default_factory=list)
    api_key: Optional[str] = Field(default=None, alias="apiKey")


class ApiKeyRequest(_CamelModel):
    api_key: Optional[str] = Field(default=None, alias="apiKey")


class AnalyzeImageResponse(BaseModel):
    success: bool
    analysis: str
    timestamp: str
    model: str
    disclaimer: str


class ChatResponse(BaseModel):
    success: bool
    response: str
    timestamp: str


class ModalityModel(BaseModel):
    id: str
    name: str
    description: str
    uses: List[str]
    limitations: List[str]


class ModalitiesResponse(BaseModel):
    modalities: List[ModalityModel]


class UpdateSettingsResponse(_CamelModel):
    success: bool
    message: str
    current_model: str = Field(alias="currentModel")


class HealthResponse(BaseModel):
    status: str
    version: str
    timestamp: str
    uptime_seconds: float
    gemini_configured: bool
    model: str
