"""
LLM Orchestration Module

Uses Gemini to interpret medical images and answer imaging questions.
Output is EDUCATIONAL - it explains, it does NOT diagnose.

ARCHITECTURE CONSTRAINTS:
- One inbound request maps to exactly one Gemini call, never retried
- Per-request API keys get their own client and never touch the default
- Disclaimers come from fixed templates, never from the model
- Nothing (images, messages, keys) is persisted
"""
from .credentials import CredentialStore
from .gemini_client import (
    GeminiClient,
    GeminiClientFactory,
    GeminiConfig,
    GeminiModel,
    GeminiResponse,
    resolve_client,
)
from .prompts import build_analysis_prompt, build_chat_prompt
from .normalizer import AnalysisResult, ChatResult
from .dispatcher import (
    ImagingAssistant,
    AnalysisRequest,
    ChatRequest,
    ChatTurn,
    ConnectionTestResult,
)

__all__ = [
    "CredentialStore",
    "GeminiClient",
    "GeminiClientFactory",
    "GeminiConfig",
    "GeminiModel",
    "GeminiResponse",
    "resolve_client",
    "build_analysis_prompt",
    "build_chat_prompt",
    "AnalysisResult",
    "ChatResult",
    "ImagingAssistant",
    "AnalysisRequest",
    "ChatRequest",
    "ChatTurn",
    "ConnectionTestResult",
]
