from functools import wraps
from typing import Any, Callable, TypeVar

from flask import g, request
from pydantic import ValidationError

from session_auth.api.runtime import db_session, runtime, session_service
from session_auth.api.schemas.auth_schema import RefreshRequest
from session_auth.core.exceptions import ForbiddenError, UnauthorizedError

F = TypeVar("F", bound=Callable[..., Any])


def _get_bearer_token() -> str:
    auth = request.headers.get("Authorization", "")
    parts = auth.split()
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1]
    raise UnauthorizedError("Token not provided")


def require_auth(fn: F) -> F:
    """Verify the bearer access token and resolve it to ``g.principal``."""

    @wraps(fn)
    def wrapper(*args, **kwargs):
        token = _get_bearer_token()
        claims = runtime().jwt_provider.verify_access_token(token)

        with db_session() as session:
            g.principal = session_service(session).get_profile(claims.subject)

        g.access_claims = claims
        return fn(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def require_refresh_token(fn: F) -> F:
    """Admit a request only if it carries a live refresh token.

    The token comes from the ``refresh_token`` body field. Its signature and
    expiry are checked against the refresh context, then the ledger must
    still hold it unrevoked and unexpired.
    """

    @wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            token = RefreshRequest.model_validate(request.get_json(silent=True) or {}).refresh_token
        except ValidationError:
            raise UnauthorizedError("Refresh token not provided") from None

        claims = runtime().jwt_provider.verify_refresh_token(token)

        # the session commits so an expiry tombstone sticks even when we reject
        with db_session() as session:
            valid = session_service(session).validate_refresh_token(
                claims.subject, token, generation=claims.generation
            )

        if not valid:
            raise UnauthorizedError("Invalid refresh token")

        g.refresh_claims = claims
        g.refresh_token = token
        return fn(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def require_roles(*allowed_roles: str):
    def decorator(fn: F) -> F:
        @wraps(fn)
        def wrapper(*args, **kwargs):
            principal = getattr(g, "principal", None)
            if principal is None:
                raise UnauthorizedError("Token not provided")

            if principal.role.value not in set(allowed_roles):
                raise ForbiddenError("Access denied")

            return fn(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator
