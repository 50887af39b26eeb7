# session_auth/entities/session.py
from dataclasses import dataclass

from session_auth.entities.user import Principal


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


@dataclass(frozen=True)
class AuthResult:
    user: Principal
    access_token: str
    refresh_token: str
