# session_auth/repositories/refresh_token_repository.py

import hashlib
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from session_auth.core.base_repository import BaseRepository
from session_auth.core.clock import utcnow
from session_auth.core.exceptions import (
    ConstraintViolationError,
    LedgerError,
    RefreshTokenInsertError,
    RefreshTokenRevokeError,
)
from session_auth.infrastructure.database.models.refresh_token_model import RefreshTokenModel


def token_digest(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class RefreshTokenRepository(BaseRepository[RefreshTokenModel]):
    """Ledger of issued refresh tokens.

    Records are only ever soft-revoked. Lookups take the raw signed token and
    match on its digest.
    """

    def __init__(self, session: Session) -> None:
        super().__init__(session)

    def insert(self, *, subject_id: str, token: str, expires_at: datetime) -> RefreshTokenModel:
        model = RefreshTokenModel(
            subject_id=subject_id,
            token=token_digest(token),
            expires_at=expires_at,
            created_at=utcnow(),
            is_revoked=False,
            revoked_at=None,
            reason=None,
        )
        try:
            self._session.add(model)
            self._session.flush()
        except IntegrityError as e:
            raise ConstraintViolationError("Refresh token already exists.") from e
        except SQLAlchemyError as e:
            raise RefreshTokenInsertError("Could not store refresh token.") from e
        return model

    def find_active(self, *, subject_id: str, token: str) -> RefreshTokenModel | None:
        # expiry is deliberately not filtered here; the caller tombstones
        stmt = select(RefreshTokenModel).where(
            RefreshTokenModel.token == token_digest(token),
            RefreshTokenModel.subject_id == subject_id,
            RefreshTokenModel.is_revoked.is_(False),
        )
        try:
            return self._session.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise LedgerError() from e

    def get_by_token(self, token: str) -> RefreshTokenModel | None:
        stmt = select(RefreshTokenModel).where(RefreshTokenModel.token == token_digest(token))
        try:
            return self._session.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise LedgerError() from e

    def revoke(self, *, token: str, subject_id: str, reason: str = "logout") -> int:
        stmt = (
            update(RefreshTokenModel)
            .where(
                RefreshTokenModel.token == token_digest(token),
                RefreshTokenModel.subject_id == subject_id,
                RefreshTokenModel.is_revoked.is_(False),
            )
            .values(is_revoked=True, revoked_at=utcnow(), reason=reason)
        )
        return self._execute_revoke(stmt)

    def revoke_all_for_subject(self, subject_id: str, *, reason: str = "logout") -> int:
        stmt = (
            update(RefreshTokenModel)
            .where(
                RefreshTokenModel.subject_id == subject_id,
                RefreshTokenModel.is_revoked.is_(False),
            )
            .values(is_revoked=True, revoked_at=utcnow(), reason=reason)
        )
        return self._execute_revoke(stmt)

    def tombstone(self, record_id: int) -> int:
        stmt = (
            update(RefreshTokenModel)
            .where(RefreshTokenModel.id == record_id, RefreshTokenModel.is_revoked.is_(False))
            .values(is_revoked=True, revoked_at=utcnow(), reason="expired")
        )
        return self._execute_revoke(stmt)

    def revoke_expired(self, *, now: datetime) -> int:
        stmt = (
            update(RefreshTokenModel)
            .where(RefreshTokenModel.expires_at <= now, RefreshTokenModel.is_revoked.is_(False))
            .values(is_revoked=True, revoked_at=now, reason="expired")
        )
        return self._execute_revoke(stmt)

    def _execute_revoke(self, stmt) -> int:
        try:
            result = self._session.execute(stmt)
        except SQLAlchemyError as e:
            raise RefreshTokenRevokeError("Could not revoke refresh token.") from e
        return int(result.rowcount or 0)
