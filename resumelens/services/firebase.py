"""Firebase Authentication client: Identity Toolkit REST calls and ID-token checks."""

import logging

import requests
from google.auth import exceptions as google_auth_exceptions
from google.auth.transport.requests import Request
from google.oauth2 import id_token as google_id_token

from resumelens.config import get_settings
from resumelens.exceptions import (
    AuthenticationError,
    IntegrationError,
    InvalidRequestError,
    RateLimitError,
)
from resumelens.http_client import get_session
from resumelens.models.auth import AuthSession, UserSession

logger = logging.getLogger(__name__)

IDENTITY_TOOLKIT_BASE = "https://identitytoolkit.googleapis.com/v1"

CREDENTIAL_ERRORS = {
    "EMAIL_NOT_FOUND",
    "INVALID_PASSWORD",
    "INVALID_LOGIN_CREDENTIALS",
    "USER_DISABLED",
    "INVALID_IDP_RESPONSE",
    "INVALID_ID_TOKEN",
}
INPUT_ERRORS = {
    "EMAIL_EXISTS",
    "INVALID_EMAIL",
    "MISSING_EMAIL",
    "MISSING_PASSWORD",
    "WEAK_PASSWORD",
    "OPERATION_NOT_ALLOWED",
}
OPERATION_NOT_ALLOWED_MESSAGE = "Email/Password sign-in is not enabled in Firebase Console."


def _get_api_key() -> str:
    api_key = get_settings().firebase_api_key
    if not api_key:
        raise AuthenticationError(
            "Firebase API key not configured. Copy the Web API key from the "
            "Firebase Console project settings and set FIREBASE_API_KEY in .env"
        )
    return api_key


def humanize_error(raw: str) -> str:
    """Turn 'EMAIL_EXISTS' or 'WEAK_PASSWORD : Password should be...' into a sentence."""
    code, _, explanation = raw.partition(" : ")
    code = code.strip()
    if code == "OPERATION_NOT_ALLOWED":
        return OPERATION_NOT_ALLOWED_MESSAGE
    if explanation:
        return explanation.strip()
    text = code.replace("_", " ").lower()
    return text[:1].upper() + text[1:]


def _handle_api_error(resp: requests.Response):
    try:
        raw = resp.json()["error"]["message"]
    except (ValueError, KeyError, TypeError):
        raw = resp.text[:200]
    code = raw.split(" ", 1)[0]
    message = humanize_error(raw)
    logger.warning("Firebase auth error (%s): %s", resp.status_code, raw)
    if code.startswith("TOO_MANY_ATTEMPTS"):
        raise RateLimitError(message, details=raw)
    if code in CREDENTIAL_ERRORS:
        raise AuthenticationError(message, details=raw)
    if code in INPUT_ERRORS:
        raise InvalidRequestError(message, details=raw)
    raise IntegrationError(f"Firebase Auth error ({resp.status_code}): {message}", details=raw)


def _post(endpoint: str, payload: dict) -> dict:
    try:
        resp = get_session().post(
            f"{IDENTITY_TOOLKIT_BASE}/{endpoint}",
            params={"key": _get_api_key()},
            json=payload,
        )
    except requests.RequestException as e:
        raise IntegrationError(f"Firebase Auth request failed: {e}") from e
    if resp.status_code >= 400:
        _handle_api_error(resp)
    return resp.json()


def _parse_session(data: dict) -> AuthSession:
    return AuthSession(
        id_token=data["idToken"],
        refresh_token=data.get("refreshToken", ""),
        email=data.get("email", ""),
        uid=data["localId"],
        expires_in=int(data.get("expiresIn", 3600)),
    )


def sign_up(email: str, password: str) -> AuthSession:
    """Create an email/password account and return its first session."""
    data = _post("accounts:signUp", {"email": email, "password": password, "returnSecureToken": True})
    logger.info("Created account for %s", email)
    return _parse_session(data)


def sign_in_with_password(email: str, password: str) -> AuthSession:
    data = _post(
        "accounts:signInWithPassword",
        {"email": email, "password": password, "returnSecureToken": True},
    )
    logger.info("Signed in %s", email)
    return _parse_session(data)


def sign_in_with_google(google_token: str) -> AuthSession:
    """Exchange a Google ID token (from Google Sign-In on the client) for a Firebase session."""
    data = _post(
        "accounts:signInWithIdp",
        {
            "postBody": f"id_token={google_token}&providerId=google.com",
            "requestUri": "http://localhost",
            "returnSecureToken": True,
            "returnIdpCredential": True,
        },
    )
    logger.info("Signed in %s with Google", data.get("email"))
    return _parse_session(data)


def verify_session(token: str) -> UserSession:
    """Verify a Firebase ID token and return who it belongs to.

    Raises AuthenticationError for expired, forged or foreign-project tokens.
    """
    project_id = get_settings().firebase_project_id
    if not project_id:
        raise AuthenticationError(
            "Firebase project not configured. Set FIREBASE_PROJECT_ID in .env"
        )
    try:
        claims = google_id_token.verify_firebase_token(
            token, Request(session=get_session()), audience=project_id
        )
    except google_auth_exceptions.TransportError as e:
        raise IntegrationError(f"Could not fetch Firebase signing keys: {e}") from e
    except ValueError as e:
        raise AuthenticationError(f"Invalid or expired session: {e}") from e
    if not claims:
        raise AuthenticationError("Invalid or expired session")
    return UserSession(
        authenticated=True,
        email=claims.get("email"),
        uid=claims.get("user_id") or claims.get("sub"),
    )
