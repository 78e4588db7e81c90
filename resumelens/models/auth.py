from pydantic import BaseModel

from resumelens.models.common import CamelModel


class SignInRequest(BaseModel):
    email: str
    password: str


class SignUpRequest(CamelModel):
    email: str
    password: str
    confirm_password: str


class GoogleSignInRequest(CamelModel):
    id_token: str


class AuthSession(CamelModel):
    id_token: str
    refresh_token: str
    email: str
    uid: str
    expires_in: int


class UserSession(BaseModel):
    authenticated: bool
    email: str | None = None
    uid: str | None = None
