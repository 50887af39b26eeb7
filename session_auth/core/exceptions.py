# session_auth/core/exceptions.py

class AppError(Exception):
    def __init__(self, message: str, *, status_code: int = 400) -> None:
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(AppError):
    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message, status_code=404)


class ConflictError(AppError):
    def __init__(self, message: str = "Conflict") -> None:
        super().__init__(message, status_code=409)


class UnauthorizedError(AppError):
    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message, status_code=401)


class InvalidTokenError(UnauthorizedError):
    def __init__(self, message: str = "Invalid token") -> None:
        super().__init__(message)


class ExpiredTokenError(UnauthorizedError):
    def __init__(self, message: str = "Token expired") -> None:
        super().__init__(message)


class ForbiddenError(AppError):
    def __init__(self, message: str = "Forbidden") -> None:
        super().__init__(message, status_code=403)


class LedgerError(AppError):
    """Opaque failure of the refresh-token store."""

    def __init__(self, message: str = "Internal server error") -> None:
        super().__init__(message, status_code=500)


class RefreshTokenInsertError(LedgerError):
    pass


class RefreshTokenRevokeError(LedgerError):
    pass


class ConstraintViolationError(RefreshTokenInsertError):
    """A refresh token value collided with an existing record.

    Never retried: a collision means the signer produced a duplicate token.
    """
