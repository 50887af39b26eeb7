# session_auth/api/schemas/auth_schema.py
from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, EmailStr, Field

from session_auth.entities.session import AuthResult, TokenPair
from session_auth.entities.user import Principal, Role


def _fits_bcrypt(v: str) -> str:
    # bcrypt only accepts 72 bytes of input
    if len(v.encode("utf-8")) > 72:
        raise ValueError("password is too long")
    return v


Password = Annotated[str, Field(min_length=8, max_length=72), AfterValidator(_fits_bcrypt)]


class SignupRequest(BaseModel):
    full_name: str = Field(min_length=2, max_length=100)
    email: EmailStr
    password: Password


class CreateUserRequest(SignupRequest):
    role: Role = Role.USER


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=200)


class RefreshRequest(BaseModel):
    refresh_token: str = Field(min_length=1)


class LogoutRequest(BaseModel):
    refresh_token: str | None = None  # without it, every session of the user ends


class UserResponse(BaseModel):
    id: str
    full_name: str
    email: str
    role: Role
    created_at: datetime
    last_login: datetime | None = None

    @classmethod
    def from_principal(cls, principal: Principal) -> "UserResponse":
        return cls(
            id=principal.id,
            full_name=principal.full_name,
            email=principal.email,
            role=principal.role,
            created_at=principal.created_at,
            last_login=principal.last_login,
        )


class TokenPairResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "Bearer"

    @classmethod
    def from_pair(cls, pair: TokenPair) -> "TokenPairResponse":
        return cls(access_token=pair.access_token, refresh_token=pair.refresh_token)


class AuthResponse(TokenPairResponse):
    user: UserResponse

    @classmethod
    def from_result(cls, result: AuthResult) -> "AuthResponse":
        return cls(
            user=UserResponse.from_principal(result.user),
            access_token=result.access_token,
            refresh_token=result.refresh_token,
        )


class UpdateUserRequest(BaseModel):
    full_name: str | None = Field(default=None, min_length=2, max_length=100)
    email: EmailStr | None = None
    password: Password | None = None
    role: Role | None = None
