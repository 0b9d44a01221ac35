"""
Integration Tests for the FastAPI Backend

Tests the HTTP contract: analysis, chat, modalities, settings and the
connection check. Uses async httpx against the ASGI app with the
orchestrator swapped for one backed by stub Gemini models.
"""
import pytest
import httpx

from imaging_assistant.core.llm.normalizer import ANALYSIS_DISCLAIMER
from imaging_assistant.main import app, get_assistant
from imaging_assistant.utils import ProviderInitError


@pytest.fixture
async def async_client(assistant):
    """Create async test client wired to the configured test orchestrator."""
    app.dependency_overrides[get_assistant] = lambda: assistant
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
async def app_client():
    """Create async test client using the app's own orchestrator."""
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client


@pytest.fixture
async def unconfigured_client(unconfigured_assistant):
    """Create async test client wired to an orchestrator with no API key."""
    app.dependency_overrides[get_assistant] = lambda: unconfigured_assistant
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.mark.asyncio
class TestHealthEndpoints:
    """Tests for health check endpoints."""

    async def test_root_endpoint(self, async_client):
        response = await async_client.get("/")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "healthy"
        assert data["gemini_configured"] is True
        assert data["model"] == "gemini-2.0-flash"

    async def test_health_endpoint_unconfigured(self, unconfigured_client):
        response = await unconfigured_client.get("/health")
        assert response.status_code == 200
        assert response.json()["gemini_configured"] is False

    async def test_health_reports_app_orchestrator(self, app_client):
        assistant = app.state.assistant

        response = await app_client.get("/health")
        assert response.status_code == 200

        data = response.json()
        assert data["model"] == assistant.model_name
        assert data["gemini_configured"] is assistant.is_configured


@pytest.mark.asyncio
class TestModalitiesEndpoint:
    """Tests for the static modality catalogue."""

    async def test_list_modalities(self, async_client):
        response = await async_client.get("/api/imaging-modalities")
        assert response.status_code == 200

        modalities = response.json()["modalities"]
        assert [m["id"] for m in modalities] == ["xray", "ct", "mri", "ultrasound"]
        for modality in modalities:
            assert set(modality) == {"id", "name", "description", "uses", "limitations"}
            assert modality["uses"]
            assert modality["limitations"]


@pytest.mark.asyncio
class TestAnalyzeEndpoint:
    """Tests for /api/analyze-image."""

    async def test_missing_image_and_question(self, async_client, factory):
        response = await async_client.post("/api/analyze-image", json={"clinicalContext": "ER visit"})

        assert response.status_code == 400
        assert response.json() == {"error": "Either image data or question is required"}
        assert factory.bound == []

    async def test_no_body(self, async_client, factory):
        response = await async_client.post("/api/analyze-image")

        assert response.status_code == 400
        assert response.json() == {"error": "Either image data or question is required"}
        assert factory.bound == []

    async def test_non_string_question(self, async_client, factory):
        response = await async_client.post("/api/analyze-image", json={"question": ["q"]})

        assert response.status_code == 400
        assert set(response.json()) == {"error"}
        assert response.json()["error"].startswith("question:")
        assert factory.bound == []

    async def test_text_question(self, async_client, factory):
        response = await async_client.post("/api/analyze-image", json={"question": "Describe findings"})
        assert response.status_code == 200

        data = response.json()
        assert data["success"] is True
        assert data["analysis"] == factory.reply
        assert data["model"] == "gemini-2.0-flash"
        assert data["disclaimer"] == ANALYSIS_DISCLAIMER
        assert "timestamp" in data
        assert isinstance(factory.last_message().content, str)

    async def test_image_upload(self, async_client, factory, sample_image_b64):
        response = await async_client.post("/api/analyze-image", json={
            "imageData": sample_image_b64,
            "clinicalContext": "Fall from bicycle, wrist pain",
            "apiKey": "",
        })
        assert response.status_code == 200

        text_part, image_part = factory.last_message().content
        assert "Fall from bicycle, wrist pain" in text_part["text"]
        assert image_part["image_url"]["url"].endswith(sample_image_b64)
        assert factory.bound == ["default-key"]

    async def test_request_key_does_not_replace_default(self, async_client, assistant, factory):
        response = await async_client.post("/api/analyze-image", json={
            "question": "q",
            "apiKey": "browser-key",
        })
        assert response.status_code == 200

        assert factory.bound == ["browser-key"]
        assert assistant.store.current_credential() == "default-key"

    async def test_not_configured(self, unconfigured_client, factory):
        response = await unconfigured_client.post("/api/analyze-image", json={"question": "q"})

        assert response.status_code == 500
        assert response.json() == {
            "error": "Gemini AI not configured",
            "message": "Please configure your Gemini API key in the settings",
        }
        assert factory.bound == []

    async def test_provider_failure(self, async_client, factory):
        factory.error = RuntimeError("quota exceeded")

        response = await async_client.post("/api/analyze-image", json={"question": "q"})

        assert response.status_code == 500
        assert response.json() == {"error": "Analysis failed", "message": "quota exceeded"}

    async def test_unreadable_reply_reported_as_analysis_failure(self, async_client, factory):
        factory.reply = ""

        response = await async_client.post("/api/analyze-image", json={"question": "q"})

        assert response.status_code == 500
        assert response.json()["error"] == "Analysis failed"

    async def test_rejected_request_key(self, async_client, assistant, factory):
        factory.init_error = ProviderInitError("API key format is invalid")

        response = await async_client.post("/api/analyze-image", json={"question": "q", "apiKey": "malformed"})

        assert response.status_code == 500
        assert response.json() == {
            "error": "Failed to initialize Gemini client",
            "message": "API key format is invalid",
        }
        assert assistant.store.current_credential() == "default-key"


@pytest.mark.asyncio
class TestChatEndpoint:
    """Tests for /api/chat."""

    async def test_empty_message(self, async_client):
        response = await async_client.post("/api/chat", json={"message": ""})

        assert response.status_code == 400
        assert response.json() == {"error": "Message is required"}

    async def test_missing_message(self, async_client):
        response = await async_client.post("/api/chat", json={"history": []})

        assert response.status_code == 400
        assert response.json() == {"error": "Message is required"}

    async def test_no_body(self, async_client):
        response = await async_client.post("/api/chat")

        assert response.status_code == 400
        assert response.json() == {"error": "Message is required"}

    async def test_non_string_message(self, async_client, factory):
        response = await async_client.post("/api/chat", json={"message": 123})

        assert response.status_code == 400
        assert set(response.json()) == {"error"}
        assert response.json()["error"].startswith("message:")
        assert factory.bound == []

    async def test_malformed_history(self, async_client, factory):
        response = await async_client.post("/api/chat", json={"message": "hi", "history": [{"role": "user"}]})

        assert response.status_code == 400
        assert response.json()["error"].startswith("history.0.content:")
        assert factory.bound == []

    async def test_chat_success(self, async_client, factory):
        factory.reply = "MRI stands for Magnetic Resonance Imaging."

        response = await async_client.post("/api/chat", json={
            "message": "What is an MRI?",
            "history": [{"role": "user", "content": "Hi"}, {"role": "assistant", "content": "Hello!"}],
        })
        assert response.status_code == 200

        data = response.json()
        assert data["success"] is True
        assert data["response"] == factory.reply
        assert data["timestamp"]

    async def test_chat_failure(self, async_client, factory):
        factory.error = RuntimeError("deadline exceeded")

        response = await async_client.post("/api/chat", json={"message": "hi"})

        assert response.status_code == 500
        assert response.json() == {"error": "Chat processing failed", "message": "deadline exceeded"}

    async def test_rejected_request_key(self, async_client, factory):
        factory.init_error = ProviderInitError("API key format is invalid")

        response = await async_client.post("/api/chat", json={"message": "hi", "apiKey": "malformed"})

        assert response.status_code == 500
        assert response.json()["error"] == "Failed to initialize Gemini client"


@pytest.mark.asyncio
class TestSettingsEndpoints:
    """Tests for /api/update-settings and /api/test-gemini."""

    async def test_update_settings_configures_default(self, unconfigured_client, unconfigured_assistant, factory):
        response = await unconfigured_client.post("/api/update-settings", json={"apiKey": "new-key"})
        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "Settings updated successfully",
            "currentModel": "gemini-2.0-flash",
        }

        analysis = await unconfigured_client.post("/api/analyze-image", json={"question": "q"})
        assert analysis.status_code == 200
        assert unconfigured_assistant.store.current_credential() == "new-key"
        assert factory.bound == ["new-key"]

    async def test_update_settings_twice_is_idempotent(self, unconfigured_client, factory):
        await unconfigured_client.post("/api/update-settings", json={"apiKey": "same"})
        await unconfigured_client.post("/api/update-settings", json={"apiKey": "same"})

        assert factory.bound == ["same"]

    async def test_update_settings_without_key(self, async_client, assistant):
        response = await async_client.post("/api/update-settings", json={})

        assert response.status_code == 200
        assert assistant.store.current_credential() == "default-key"

    async def test_update_settings_without_body(self, async_client, assistant):
        response = await async_client.post("/api/update-settings")

        assert response.status_code == 200
        assert assistant.store.current_credential() == "default-key"

    async def test_update_settings_rejected_key(self, async_client, assistant, factory):
        factory.init_error = ProviderInitError("API key format is invalid")

        response = await async_client.post("/api/update-settings", json={"apiKey": "malformed"})

        assert response.status_code == 500
        assert response.json() == {
            "error": "Failed to initialize Gemini client",
            "message": "API key format is invalid",
        }
        assert assistant.store.current_credential() == "default-key"
        assert assistant.store.snapshot.version == 0

    async def test_test_gemini_requires_key(self, async_client):
        response = await async_client.post("/api/test-gemini", json={})

        assert response.status_code == 400
        assert response.json() == {"error": "API key is required for testing"}

    async def test_test_gemini_without_body(self, async_client, factory):
        response = await async_client.post("/api/test-gemini")

        assert response.status_code == 400
        assert response.json() == {"error": "API key is required for testing"}
        assert factory.bound == []

    async def test_test_gemini_non_string_key(self, async_client):
        response = await async_client.post("/api/test-gemini", json={"apiKey": 42})

        assert response.status_code == 400
        assert response.json()["error"].startswith("apiKey:")

    async def test_test_gemini_success(self, async_client, factory):
        factory.reply = "Connection successful"

        response = await async_client.post("/api/test-gemini", json={"apiKey": "check-key"})

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Gemini API connection successful"}

    async def test_test_gemini_unexpected_reply(self, async_client, factory):
        factory.reply = "I cannot comply"

        response = await async_client.post("/api/test-gemini", json={"apiKey": "check-key"})

        assert response.status_code == 200
        assert response.json() == {"success": False, "message": "Unexpected response from Gemini API"}

    async def test_test_gemini_failure(self, async_client, factory):
        factory.error = RuntimeError("API key not valid")

        response = await async_client.post("/api/test-gemini", json={"apiKey": "bad"})

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "error": "Failed to connect to Gemini API",
            "message": "API key not valid",
        }
