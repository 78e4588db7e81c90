import pytest
from unittest.mock import MagicMock

from fastapi.testclient import TestClient

from resumelens.config import get_settings


# --- Canned provider responses ---

FIREBASE_SIGN_IN = {
    "kind": "identitytoolkit#VerifyPasswordResponse",
    "localId": "uid123",
    "email": "alice@example.com",
    "displayName": "",
    "idToken": "id-token-abc",
    "registered": True,
    "refreshToken": "refresh-xyz",
    "expiresIn": "3600",
}

FIREBASE_CLAIMS = {
    "iss": "https://securetoken.google.com/resumelens-test",
    "aud": "resumelens-test",
    "user_id": "uid123",
    "sub": "uid123",
    "email": "alice@example.com",
}

PDF_BYTES = b"%PDF-1.4\n1 0 obj\n<< /Type /Catalog >>\nendobj\ntrailer\n%%EOF\n"


@pytest.fixture(autouse=True)
def settings(monkeypatch):
    """Known configuration for every test, independent of any local .env."""
    monkeypatch.setenv("GOOGLE_API_KEY", "test-google-key")
    monkeypatch.setenv("MODEL_NAME", "gemini-2.5-flash")
    monkeypatch.setenv("FIREBASE_API_KEY", "test-firebase-key")
    monkeypatch.setenv("FIREBASE_PROJECT_ID", "resumelens-test")
    monkeypatch.setenv("REQUIRE_AUTH", "false")
    monkeypatch.setenv("PORT", "3000")
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


@pytest.fixture
def require_auth(monkeypatch):
    monkeypatch.setenv("REQUIRE_AUTH", "true")
    get_settings.cache_clear()


@pytest.fixture
def mock_genai_client(mocker):
    """Mocked google-genai client whose model always answers 'Looks great.'."""
    client = MagicMock()
    client.models.generate_content.return_value.text = "Looks great."
    mocker.patch("resumelens.services.gemini._get_client", return_value=client)
    return client


@pytest.fixture
def mock_http_session(mocker):
    session = MagicMock()
    mocker.patch("resumelens.services.firebase.get_session", return_value=session)
    return session


@pytest.fixture
def api_client():
    """FastAPI TestClient for router tests."""
    from resumelens.main import api
    return TestClient(api)
