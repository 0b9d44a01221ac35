"""
Medical Imaging Assistant - FastAPI Application

API endpoints for:
- Medical image / question analysis (Gemini, multi-modal or text-only)
- Imaging chat
- Imaging modality reference data
- Gemini settings and connection check
"""
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from imaging_assistant import __version__
from imaging_assistant.config import settings
from imaging_assistant.core.llm import (
    AnalysisRequest,
    ChatRequest,
    ChatTurn,
    CredentialStore,
    GeminiClientFactory,
    ImagingAssistant,
)
from imaging_assistant.core.reference import list_modalities
from imaging_assistant.models import (
    AnalyzeImageRequest,
    AnalyzeImageResponse,
    ApiKeyRequest,
    ChatRequestBody,
    ChatResponse,
    HealthResponse,
    ModalitiesResponse,
    UpdateSettingsResponse,
)
from imaging_assistant.utils import (
    get_logger,
    setup_logging,
    AnalysisFailedError,
    ChatFailedError,
    ImagingAssistantError,
    ResponseShapeError,
    ValidationError,
)

setup_logging(settings.log_level, settings.log_file)
logger = get_logger(__name__)

# ---- Orchestrator Singleton ----
_assistant = ImagingAssistant(
    store=CredentialStore(settings.gemini_api_key),
    factory=GeminiClientFactory(),
)
START_TIME = datetime.now()


def get_assistant(request: Request) -> ImagingAssistant:
    """Dependency returning the orchestrator attached to the running app."""
    return request.app.state.assistant


# ---- Application Lifespan ----

@asynccontextmanager
async def lifespan(app: FastAPI):
    assistant: ImagingAssistant = app.state.assistant
    if assistant.is_configured:
        logger.info(f"Gemini configured from environment (model: {assistant.model_name})")
    else:
        logger.warning("No Gemini API key in environment - configure it via /api/update-settings")

    logger.info("API ready to accept requests")
    yield
    logger.info("Medical Imaging Assistant API shut down.")


# ---- FastAPI Application ----

app = FastAPI(
    title="Medical Imaging Assistant API",
    description="Educational medical image interpretation and imaging chat powered by Gemini",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)
app.state.assistant = _assistant

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ImagingAssistantError)
async def imaging_error_handler(request: Request, exc: ImagingAssistantError):
    """Render every orchestration failure as its structured JSON body."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Report malformed JSON bodies with the same 400 `{error}` shape as other input errors."""
    first = exc.errors()[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"{field}: {first.get('msg')}" if field else first.get("msg", "Invalid request body")
    logger.warning(f"Rejected request body on {request.url.path}: {message}")
    error = ValidationError(message, field=field or "body")
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


# ---- API Endpoints ----

def _health(assistant: ImagingAssistant) -> HealthResponse:
    return HealthResponse(
        status="healthy",
        version=__version__,
        timestamp=datetime.now().isoformat(),
        uptime_seconds=(datetime.now() - START_TIME).total_seconds(),
        gemini_configured=assistant.is_configured,
        model=assistant.model_name,
    )


@app.get("/", response_model=HealthResponse, tags=["Health"])
async def root(assistant: ImagingAssistant = Depends(get_assistant)):
    """API root - health check."""
    return _health(assistant)


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check(assistant: ImagingAssistant = Depends(get_assistant)):
    """Health check endpoint."""
    return _health(assistant)


@app.post("/api/analyze-image", response_model=AnalyzeImageResponse, tags=["Analysis"])
async def analyze_image(
    body: Optional[AnalyzeImageRequest] = None,
    assistant: ImagingAssistant = Depends(get_assistant)
):
    """
    Analyze a medical image and/or answer an imaging question.

    At least one of `imageData` (base64 JPEG) or `question` is required.
    """
    body = body or AnalyzeImageRequest()
    try:
        result = await assistant.analyze(AnalysisRequest(
            image_data=body.image_data,
            question=body.question,
            clinical_context=body.clinical_context,
            credential=body.api_key,
        ))
    except ResponseShapeError as e:
        raise AnalysisFailedError(e.message) from e

    return result.to_dict()


@app.post("/api/chat", response_model=ChatResponse, tags=["Chat"])
async def chat(
    body: Optional[ChatRequestBody] = None,
    assistant: ImagingAssistant = Depends(get_assistant)
):
    """Ask the imaging specialist a question."""
    body = body or ChatRequestBody()
    try:
        result = await assistant.chat(ChatRequest(
            message=body.message,
            history=[ChatTurn(role=turn.role, content=turn.content) for turn in body.history],
            credential=body.api_key,
        ))
    except ResponseShapeError as e:
        raise ChatFailedError(e.message) from e

    return result.to_dict()


@app.get("/api/imaging-modalities", response_model=ModalitiesResponse, tags=["Reference"])
async def imaging_modalities():
    """List supported imaging modalities with typical uses and limitations."""
    return {"modalities": list_modalities()}


@app.post("/api/update-settings", response_model=UpdateSettingsResponse, tags=["Settings"])
async def update_settings(
    body: Optional[ApiKeyRequest] = None,
    assistant: ImagingAssistant = Depends(get_assistant)
):
    """Set the process-wide default Gemini API key."""
    body = body or ApiKeyRequest()
    current_model = assistant.update_default_credential(body.api_key)
    return UpdateSettingsResponse(
        success=True,
        message="Settings updated successfully",
        current_model=current_model,
    )


@app.post("/api/test-gemini", tags=["Settings"])
async def test_gemini(
    body: Optional[ApiKeyRequest] = None,
    assistant: ImagingAssistant = Depends(get_assistant)
):
    """Check that a Gemini API key works by sending a fixed check prompt."""
    body = body or ApiKeyRequest()
    result = await assistant.test_connection(body.api_key)
    status_code = 500 if result.error else 200
    return JSONResponse(status_code=status_code, content=result.to_dict())


# ---- Run with uvicorn ----
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.host, port=settings.port)
