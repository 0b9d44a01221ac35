"""
Pytest Configuration and Fixtures

Shared fixtures for imaging assistant tests. No test talks to Gemini:
clients are built around a stub chat model whose `ainvoke` is an AsyncMock.
"""
import base64
import pytest
from pathlib import Path
from typing import List, Optional
from unittest.mock import AsyncMock, Mock
import sys

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from langchain_core.messages import AIMessage

from imaging_assistant.core.llm import (
    CredentialStore,
    GeminiClient,
    GeminiClientFactory,
    GeminiConfig,
    GeminiModel,
    ImagingAssistant,
)
from imaging_assistant.utils import ProviderInitError


class RecordingFactory(GeminiClientFactory):
    """
    Client factory backed by stub chat models.

    Every `bind` is recorded along with the stub it created. `reply`, `error`
    and `init_error` are read at bind time, so tests can change them between
    calls. With `init_error` set, `bind` records the key and then raises it,
    the way the SDK rejects a malformed key before any request is sent.
    """

    def __init__(self, reply: str = "Findings: no acute abnormality.", error: Optional[Exception] = None):
        super().__init__(GeminiConfig(model=GeminiModel.FLASH_2_0, request_timeout_seconds=5))
        self.reply = reply
        self.error = error
        self.init_error: Optional[ProviderInitError] = None
        self.bound: List[str] = []
        self.llms: List[Mock] = []

    def bind(self, credential: str) -> GeminiClient:
        self.bound.append(credential)
        if self.init_error is not None:
            raise self.init_error
        llm = Mock()
        if self.error is not None:
            llm.ainvoke = AsyncMock(side_effect=self.error)
        else:
            llm.ainvoke = AsyncMock(return_value=AIMessage(content=self.reply))
        self.llms.append(llm)
        return GeminiClient(credential, self.config, llm=llm)

    def last_message(self):
        """The HumanMessage sent by the most recent call."""
        llm = self.llms[-1]
        (messages,), _ = llm.ainvoke.call_args
        return messages[0]


@pytest.fixture
def factory() -> RecordingFactory:
    return RecordingFactory()


@pytest.fixture
def assistant(factory) -> ImagingAssistant:
    """Orchestrator configured with a default key."""
    return ImagingAssistant(store=CredentialStore("default-key"), factory=factory)


@pytest.fixture
def unconfigured_assistant(factory) -> ImagingAssistant:
    """Orchestrator started without any key."""
    return ImagingAssistant(store=CredentialStore(), factory=factory)


@pytest.fixture
def sample_image_b64() -> str:
    """Base64 payload of a tiny fake JPEG."""
    return base64.b64encode(b"\xff\xd8\xff\xe0fake-jpeg-bytes\xff\xd9").decode("ascii")
