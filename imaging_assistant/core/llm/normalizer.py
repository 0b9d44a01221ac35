"""
Response Normalizer

Turns a Gemini reply into the service's own result objects. Only text is
taken from the provider; the analysis disclaimer and timestamps are added
here and never depend on what the model returned.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List

from imaging_assistant.core.llm.gemini_client import GeminiResponse
from imaging_assistant.utils import ResponseShapeError

ANALYSIS_DISCLAIMER = "AI analysis for educational purposes only - consult healthcare professionals"


def utc_timestamp() -> str:
    """Current time as ISO-8601 with a `Z` suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class AnalysisResult:
    """Result of an image or question analysis."""
    analysis: str
    model: str
    success: bool = True
    timestamp: str = field(default_factory=utc_timestamp)
    disclaimer: str = ANALYSIS_DISCLAIMER

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "analysis": self.analysis,
            "timestamp": self.timestamp,
            "model": self.model,
            "disclaimer": self.disclaimer,
        }


@dataclass
class ChatResult:
    """Result of one chat turn."""
    response: str
    success: bool = True
    timestamp: str = field(default_factory=utc_timestamp)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "response": self.response,
            "timestamp": self.timestamp,
        }


def extract_text(message: Any) -> str:
    """
    Pull the text payload out of a LangChain chat message.

    `content` is either a string or a list of parts (plain strings or
    dicts with `type == "text"`); non-text parts are skipped.

    Raises:
        ResponseShapeError: no `content`, an unknown content type, or no text at all
    """
    if message is None or not hasattr(message, "content"):
        raise ResponseShapeError(
            "Gemini response has no content",
            response_type=type(message).__name__,
        )

    content = message.content
    if isinstance(content, str):
        text = content
    elif isinstance(content, list):
        chunks: List[str] = []
        for part in content:
            if isinstance(part, str):
                chunks.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                chunks.append(str(part.get("text", "")))
        text = "".join(chunks)
    else:
        raise ResponseShapeError(
            f"Unsupported Gemini content type: {type(content).__name__}",
            response_type=type(message).__name__,
        )

    if not text.strip():
        raise ResponseShapeError(
            "Gemini response contained no text",
            response_type=type(message).__name__,
        )
    return text


def normalize_analysis(response: GeminiResponse) -> AnalysisResult:
    if not response.model:
        raise ResponseShapeError("Gemini response is missing a model identifier")
    return AnalysisResult(analysis=extract_text(response.message), model=response.model)


def normalize_chat(response: GeminiResponse) -> ChatResult:
    return ChatResult(response=extract_text(response.message))
