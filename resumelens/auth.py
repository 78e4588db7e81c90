from fastapi import APIRouter, Request, Response

from resumelens.config import get_settings
from resumelens.exceptions import AuthenticationError, InvalidRequestError, ResumeLensError
from resumelens.models.auth import (
    AuthSession,
    GoogleSignInRequest,
    SignInRequest,
    SignUpRequest,
    UserSession,
)
from resumelens.services import firebase as firebase_service

MIN_PASSWORD_LENGTH = 6
GOOGLE_SIGN_IN_FAILED = "Google Sign-In failed. Please try again."


def _token_from_request(request: Request) -> str | None:
    """Read the ID token from 'Authorization: Bearer ...' or the session cookie."""
    header = request.headers.get("authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() == "bearer" and token.strip():
        return token.strip()
    return request.cookies.get(get_settings().session_cookie_name)


def get_user_session(request: Request) -> UserSession:
    """Resolve the caller's session. Raises AuthenticationError if there is none."""
    token = _token_from_request(request)
    if not token:
        raise AuthenticationError("Not signed in. Sign in via POST /auth/login.")
    return firebase_service.verify_session(token)


def require_session(request: Request) -> UserSession | None:
    """Route dependency: enforce a signed-in user only when REQUIRE_AUTH is on."""
    if not get_settings().require_auth:
        return None
    return get_user_session(request)


def _set_session_cookie(response: Response, session: AuthSession) -> None:
    response.set_cookie(
        key=get_settings().session_cookie_name,
        value=session.id_token,
        max_age=session.expires_in,
        httponly=True,
        samesite="lax",
    )


# --- Auth router ---

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signup")
def sign_up(req: SignUpRequest, response: Response) -> AuthSession:
    """Create an email/password account and start a session."""
    if req.password != req.confirm_password:
        raise InvalidRequestError("Passwords do not match.")
    if len(req.password) < MIN_PASSWORD_LENGTH:
        raise InvalidRequestError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")
    session = firebase_service.sign_up(req.email, req.password)
    _set_session_cookie(response, session)
    return session


@router.post("/login")
def login(req: SignInRequest, response: Response) -> AuthSession:
    session = firebase_service.sign_in_with_password(req.email, req.password)
    _set_session_cookie(response, session)
    return session


@router.post("/google")
def google_login(req: GoogleSignInRequest, response: Response) -> AuthSession:
    try:
        session = firebase_service.sign_in_with_google(req.id_token)
    except ResumeLensError as e:
        raise AuthenticationError(GOOGLE_SIGN_IN_FAILED, details=str(e)) from e
    _set_session_cookie(response, session)
    return session


@router.post("/logout")
def logout(response: Response) -> dict:
    """End the session. Firebase keeps no server-side session, so only the cookie goes."""
    response.delete_cookie(get_settings().session_cookie_name)
    return {"success": True}


@router.get("/session")
def session_status(request: Request) -> UserSession:
    """Report whether the caller is signed in, and as whom."""
    try:
        return get_user_session(request)
    except ResumeLensError:
        return UserSession(authenticated=False)
