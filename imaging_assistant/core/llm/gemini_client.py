"""
Gemini API Client

Wrapper for Google Gemini (via LangChain) bound to a single API key.
Handles text-only and text+image invocation with a hard request timeout.
For educational imaging interpretation ONLY - non-diagnostic.
"""
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional, Tuple, Union
from enum import Enum
import asyncio
from datetime import datetime

from langchain_core.messages import HumanMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from imaging_assistant.config import settings
from imaging_assistant.utils import (
    get_logger,
    mask_secret,
    ConfigurationError,
    ProviderError,
    ProviderInitError,
)

logger = get_logger(__name__)

# Images always go out tagged as JPEG; the caller owns the encoding.
IMAGE_MIME_TYPE = "image/jpeg"


class GeminiModel(str, Enum):
    """Gemini models usable for imaging questions."""
    FLASH_2_0 = "gemini-2.0-flash"  # Default, vision capable
    FLASH_2_5 = "gemini-2.5-flash"
    FLASH_2_5_LITE = "gemini-2.5-flash-lite"
    PRO_2_5 = "gemini-2.5-pro"


@dataclass
class GeminiConfig:
    """Configuration shared by every client the factory binds."""
    model: Union[GeminiModel, str] = field(default_factory=lambda: settings.gemini_model)
    temperature: float = 0.4
    max_output_tokens: int = 2048
    top_p: float = 0.8
    top_k: int = 40

    # One attempt per request; retrying is the caller's decision
    max_retries: int = 0
    request_timeout_seconds: float = field(default_factory=lambda: settings.request_timeout_seconds)

    @property
    def model_name(self) -> str:
        """Resolve model name whether `model` is an enum member or a plain string."""
        m = self.model
        return m.value if hasattr(m, "value") else str(m)


@dataclass
class GeminiResponse:
    """Raw provider reply plus call metadata."""
    message: Any
    model: str
    multimodal: bool = False
    prompt_tokens: int = 0
    completion_tokens: int = 0
    latency_ms: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "model": self.model,
            "multimodal": self.multimodal,
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
            "latency_ms": round(self.latency_ms, 2),
        }


class GeminiClient:
    """
    Client for Google Gemini bound to exactly one API key.

    A client is never rebound: a different key means a different client.
    """

    def __init__(
        self,
        api_key: str,
        config: Optional[GeminiConfig] = None,
        llm: Optional[Any] = None
    ):
        """
        Initialize Gemini client.

        Args:
            api_key: Credential this client is bound to
            config: Optional configuration, uses defaults if not provided
            llm: Pre-built chat model; built from config when omitted

        Raises:
            ProviderInitError: if the SDK refuses the credential up front
        """
        self.config = config or GeminiConfig()
        self._api_key = api_key
        self._llm = llm if llm is not None else self._initialize()

    def _initialize(self) -> ChatGoogleGenerativeAI:
        """Build the LangChain Gemini chat model."""
        try:
            llm = ChatGoogleGenerativeAI(
                model=self.model_name,
                temperature=self.config.temperature,
                max_output_tokens=self.config.max_output_tokens,
                top_p=self.config.top_p,
                top_k=self.config.top_k,
                timeout=self.config.request_timeout_seconds,
                max_retries=self.config.max_retries,
                google_api_key=self._api_key,
            )
        except Exception as e:
            logger.error(f"Failed to initialize LangChain Gemini ({mask_secret(self._api_key)}): {e}")
            raise ProviderInitError(str(e)) from e

        logger.info(f"LangChain Gemini client initialized with model: {self.model_name}")
        return llm

    @property
    def model_name(self) -> str:
        return self.config.model_name

    @property
    def api_key(self) -> str:
        return self._api_key

    @staticmethod
    def build_message(prompt: str, image_data: Optional[str] = None) -> HumanMessage:
        """
        Build the single user turn sent to Gemini.

        Text-only requests carry the prompt as plain content. With an image,
        the content is a text part followed by one inline JPEG part whose
        base64 payload is embedded verbatim.
        """
        if image_data is None:
            return HumanMessage(content=prompt)

        parts: List[Dict[str, Any]] = [
            {"type": "text", "text": prompt},
            {
                "type": "image_url",
                "image_url": {"url": f"data:{IMAGE_MIME_TYPE};base64,{image_data}"},
            },
        ]
        return HumanMessage(content=parts)

    async def generate_async(self, prompt: str, image_data: Optional[str] = None) -> GeminiResponse:
        """
        Send one request to Gemini.

        Uses `ainvoke` so the event loop keeps serving other requests during
        the HTTP round-trip. The call is bounded by `request_timeout_seconds`.

        Raises:
            ProviderError: on timeout
            Exception: whatever the SDK raises, unchanged
        """
        message = self.build_message(prompt, image_data)
        timeout = self.config.request_timeout_seconds
        start_time = datetime.now()

        try:
            response = await asyncio.wait_for(self._llm.ainvoke([message]), timeout=timeout)
        except asyncio.TimeoutError as e:
            logger.warning(f"Gemini request timed out after {timeout}s")
            raise ProviderError(
                f"Gemini request timed out after {timeout:g} seconds",
                code="PROVIDER_TIMEOUT",
            ) from e

        latency = (datetime.now() - start_time).total_seconds() * 1000

        usage = getattr(response, "usage_metadata", None) or {}

        return GeminiResponse(
            message=response,
            model=self.model_name,
            multimodal=image_data is not None,
            prompt_tokens=usage.get("input_tokens", 0),
            completion_tokens=usage.get("output_tokens", 0),
            latency_ms=latency,
        )


class GeminiClientFactory:
    """
    Produces clients bound to a credential.

    `bind` always builds a fresh client. `default_client` keeps one cached
    client for the process-default key and rebuilds it only when that key
    changes; the cache entry is replaced as a whole.
    """

    def __init__(self, config: Optional[GeminiConfig] = None):
        self.config = config or GeminiConfig()
        self._default: Optional[Tuple[str, GeminiClient]] = None

    @property
    def model_name(self) -> str:
        return self.config.model_name

    def bind(self, credential: str) -> GeminiClient:
        return GeminiClient(credential, self.config)

    def default_client(self, credential: str) -> GeminiClient:
        cached = self._default
        if cached is not None and cached[0] == credential:
            return cached[1]

        client = self.bind(credential)
        self._default = (credential, client)
        return client


def resolve_client(
    request_credential: Optional[str],
    default_credential: Optional[str],
    factory: GeminiClientFactory
) -> GeminiClient:
    """
    Pick the client for one request.

    Order:
        1. Per-request key that differs from the default -> fresh client
        2. Default key configured -> cached default client
        3. Neither -> ConfigurationError, factory untouched

    Empty strings count as "no key".
    """
    if request_credential and request_credential != default_credential:
        return factory.bind(request_credential)

    if default_credential:
        return factory.default_client(default_credential)

    raise ConfigurationError()
