# session_auth/infrastructure/security/jwt_provider.py

from dataclasses import dataclass
from datetime import datetime, timezone
from uuid import uuid4

import jwt

from session_auth.config.settings import Settings
from session_auth.core.duration import Duration
from session_auth.core.exceptions import ExpiredTokenError, InvalidTokenError


@dataclass(frozen=True)
class TokenContext:
    secret: str
    ttl: Duration


@dataclass(frozen=True)
class TokenClaims:
    subject: str
    email: str
    generation: int
    expires_at: datetime


class JwtProvider:
    """Signs and verifies access and refresh tokens.

    The two contexts use different secrets, so a token minted under one
    never verifies under the other. Every token carries a random ``jti``,
    which keeps two tokens issued in the same second distinct.
    """

    def __init__(self, *, access: TokenContext, refresh: TokenContext, issuer: str = "session-auth") -> None:
        self._access = access
        self._refresh = refresh
        self._issuer = issuer
        self._algorithm = "HS256"

    @classmethod
    def from_settings(cls, settings: Settings) -> "JwtProvider":
        return cls(
            access=TokenContext(secret=settings.jwt_access_secret, ttl=settings.access_ttl),
            refresh=TokenContext(secret=settings.jwt_refresh_secret, ttl=settings.refresh_ttl),
            issuer=settings.jwt_issuer,
        )

    @property
    def access_context(self) -> TokenContext:
        return self._access

    @property
    def refresh_context(self) -> TokenContext:
        return self._refresh

    def issue_token(
        self,
        context: TokenContext,
        *,
        subject: str,
        email: str,
        payload: dict | None = None,
        now: datetime | None = None,
    ) -> str:
        now = _aware(now) if now is not None else datetime.now(tz=timezone.utc)
        exp = now + context.ttl.as_timedelta()

        claims = {
            "iss": self._issuer,
            "sub": str(subject),
            "email": email,
            "iat": int(now.timestamp()),
            "exp": int(exp.timestamp()),
            "jti": uuid4().hex,
        }
        if payload:
            claims.update(payload)
        return jwt.encode(claims, context.secret, algorithm=self._algorithm)

    def issue_access_token(self, *, subject: str, email: str, now: datetime | None = None) -> str:
        return self.issue_token(self._access, subject=subject, email=email, now=now)

    def issue_refresh_token(
        self, *, subject: str, email: str, generation: int = 0, now: datetime | None = None
    ) -> str:
        return self.issue_token(
            self._refresh, subject=subject, email=email, payload={"gen": int(generation)}, now=now
        )

    def decode(self, token: str, context: TokenContext) -> dict:
        try:
            return jwt.decode(
                token,
                context.secret,
                algorithms=[self._algorithm],
                issuer=self._issuer,
                options={"require": ["exp", "iat", "sub", "jti"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise ExpiredTokenError("Token expired") from e
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError("Invalid token") from e

    def verify(self, token: str, context: TokenContext) -> TokenClaims:
        claims = self.decode(token, context)
        try:
            return TokenClaims(
                subject=str(claims["sub"]),
                email=str(claims.get("email", "")),
                generation=int(claims.get("gen", 0)),
                expires_at=datetime.fromtimestamp(int(claims["exp"]), tz=timezone.utc).replace(tzinfo=None),
            )
        except (TypeError, ValueError) as e:
            raise InvalidTokenError("Invalid token") from e

    def verify_access_token(self, token: str) -> TokenClaims:
        return self.verify(token, self._access)

    def verify_refresh_token(self, token: str) -> TokenClaims:
        return self.verify(token, self._refresh)


def _aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
