"""
Imaging Request Dispatcher

Entry point for image analysis, imaging chat and the Gemini connection
check. Each call validates input, renders a prompt, resolves the client
for the request's credential, makes exactly one provider call and
normalizes the reply.

Provider failures are never retried here. They are reported once as
AnalysisFailedError / ChatFailedError carrying the provider's message.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from imaging_assistant.core.llm.credentials import CredentialStore
from imaging_assistant.core.llm.gemini_client import (
    GeminiClient,
    GeminiClientFactory,
    resolve_client,
)
from imaging_assistant.core.llm.normalizer import (
    AnalysisResult,
    ChatResult,
    extract_text,
    normalize_analysis,
    normalize_chat,
)
from imaging_assistant.core.llm.prompts import (
    CONNECTION_ACK_PHRASE,
    CONNECTION_CHECK_PROMPT,
    build_analysis_prompt,
    build_chat_prompt,
)
from imaging_assistant.utils import (
    get_logger,
    AnalysisFailedError,
    ChatFailedError,
    ProviderError,
    ValidationError,
)

logger = get_logger(__name__)


@dataclass
class ChatTurn:
    """One prior message in a chat conversation."""
    role: str
    content: str


@dataclass
class AnalysisRequest:
    """Image and/or question to analyze. `image_data` is base64 text."""
    image_data: Optional[str] = None
    question: Optional[str] = None
    clinical_context: Optional[str] = None
    credential: Optional[str] = None

    @property
    def has_image(self) -> bool:
        return bool(self.image_data)


@dataclass
class ChatRequest:
    """A chat message with the turns that preceded it, oldest first."""
    message: Optional[str]
    history: List[ChatTurn] = field(default_factory=list)
    credential: Optional[str] = None


@dataclass
class ConnectionTestResult:
    """Outcome of the Gemini connection check."""
    success: bool
    message: str
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"success": self.success, "message": self.message}
        if self.error:
            result["error"] = self.error
        return result


def _provider_message(error: Exception) -> str:
    """The provider's own message, passed through unsanitized."""
    if isinstance(error, ProviderError):
        return error.message
    return str(error) or error.__class__.__name__


class ImagingAssistant:
    """
    Orchestrates Gemini calls for the imaging API.

    Owns the credential store and client factory; both can be injected.
    """

    def __init__(
        self,
        store: Optional[CredentialStore] = None,
        factory: Optional[GeminiClientFactory] = None
    ):
        self.store = store or CredentialStore()
        self.factory = factory or GeminiClientFactory()

    @property
    def model_name(self) -> str:
        return self.factory.model_name

    @property
    def is_configured(self) -> bool:
        return self.store.is_configured

    def _resolve(self, request_credential: Optional[str]) -> GeminiClient:
        return resolve_client(request_credential, self.store.current_credential(), self.factory)

    async def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        """
        Analyze a medical image and/or answer an imaging question.

        With `image_data` the call is multi-modal (prompt + JPEG part),
        otherwise text-only.

        Raises:
            ValidationError: neither image nor question given
            ConfigurationError: no credential available
            AnalysisFailedError: the provider call failed
            ResponseShapeError: the reply had no extractable text
        """
        if not request.has_image and not request.question:
            raise ValidationError("Either image data or question is required", field="imageData")

        prompt = build_analysis_prompt(request.question, request.clinical_context)
        client = self._resolve(request.credential)
        image_data = request.image_data if request.has_image else None

        logger.info(
            f"Dispatching {'multi-modal' if image_data else 'text-only'} analysis to {client.model_name}"
        )
        try:
            response = await client.generate_async(prompt, image_data=image_data)
        except Exception as e:
            logger.error(f"Analysis error: {e}")
            raise AnalysisFailedError(_provider_message(e)) from e

        logger.debug(f"Analysis call metadata: {response.to_dict()}")
        return normalize_analysis(response)

    async def chat(self, request: ChatRequest) -> ChatResult:
        """
        Answer one imaging chat message.

        `history` is accepted but only the latest message reaches the prompt.

        Raises:
            ValidationError: empty message
            ConfigurationError: no credential available
            ChatFailedError: the provider call failed
            ResponseShapeError: the reply had no extractable text
        """
        if not request.message or not request.message.strip():
            raise ValidationError("Message is required", field="message")

        prompt = build_chat_prompt(request.message)
        client = self._resolve(request.credential)

        logger.debug(f"Chat message received with {len(request.history)} prior turns")
        try:
            response = await client.generate_async(prompt)
        except Exception as e:
            logger.error(f"Chat error: {e}")
            raise ChatFailedError(_provider_message(e)) from e

        logger.debug(f"Chat call metadata: {response.to_dict()}")
        return normalize_chat(response)

    async def test_connection(self, credential: Optional[str]) -> ConnectionTestResult:
        """
        Send Gemini a fixed prompt using a fresh client for `credential`.

        Succeeds only if the reply contains the acknowledgment phrase
        (case-insensitive). Failures come back as a result, not an exception.

        Raises:
            ValidationError: no credential given
        """
        if not credential:
            raise ValidationError("API key is required for testing", field="apiKey")

        try:
            client = self.factory.bind(credential)
            response = await client.generate_async(CONNECTION_CHECK_PROMPT)
            text = extract_text(response.message)
        except Exception as e:
            logger.error(f"Connection test error: {e}")
            return ConnectionTestResult(
                success=False,
                message=_provider_message(e),
                error="Failed to connect to Gemini API",
            )

        if CONNECTION_ACK_PHRASE in text.lower():
            return ConnectionTestResult(success=True, message="Gemini API connection successful")

        logger.warning("Connection test got an unexpected reply from Gemini")
        return ConnectionTestResult(success=False, message="Unexpected response from Gemini API")

    def update_default_credential(self, credential: Optional[str]) -> str:
        """
        Make `credential` the process default and warm its client.

        Empty values leave the current default in place. Repeating the same
        key reuses the cached client. Returns the active model name.
        """
        if credential:
            self.factory.default_client(credential)
            self.store.set_default(credential)
        return self.model_name
