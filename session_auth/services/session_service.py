# session_auth/services/session_service.py

import logging
from datetime import datetime
from functools import lru_cache

from session_auth.core.clock import Clock, utcnow
from session_auth.core.exceptions import (
    ConstraintViolationError,
    RefreshTokenRevokeError,
    UnauthorizedError,
)
from session_auth.entities.session import AuthResult, TokenPair
from session_auth.entities.user import Principal, Role
from session_auth.infrastructure.database.models.user_model import UserModel
from session_auth.infrastructure.security.jwt_provider import JwtProvider
from session_auth.infrastructure.security.password_hasher import PasswordHasher
from session_auth.repositories.refresh_token_repository import RefreshTokenRepository
from session_auth.repositories.user_repository import UserRepository
from session_auth.services.user_service import UserService

logger = logging.getLogger("session_auth.session")

INVALID_CREDENTIALS = "Invalid credentials"


@lru_cache(maxsize=None)
def _dummy_hash(rounds: int) -> str:
    # verified against when the email is unknown, so both failures cost one bcrypt check
    return PasswordHasher(rounds).hash_password("session-auth-timing-dummy")


class SessionService:
    """Signup, login, refresh-token rotation and revocation.

    Every method works inside the caller's unit of work: the repositories
    share one SQLAlchemy session, and the caller commits or rolls back. A
    failure anywhere in ``refresh`` therefore undoes the revocations made
    earlier in the same call.
    """

    def __init__(
        self,
        *,
        users: UserRepository,
        ledger: RefreshTokenRepository,
        jwt_provider: JwtProvider,
        hasher: PasswordHasher,
        clock: Clock = utcnow,
    ) -> None:
        self._users = users
        self._ledger = ledger
        self._jwt = jwt_provider
        self._hasher = hasher
        self._clock = clock
        self._user_service = UserService(users, hasher, clock=clock)

    def signup(self, *, email: str, password: str, full_name: str, role: Role = Role.USER) -> AuthResult:
        user = self._user_service.create_user(full_name=full_name, email=email, password=password, role=role)
        now = self._clock()

        pair = self._open_session(user, now=now)
        logger.info("signup user_id=%s role=%s", user.id, user.role)
        return AuthResult(user=Principal.from_model(user), access_token=pair.access_token, refresh_token=pair.refresh_token)

    def login(self, *, email: str, password: str) -> AuthResult:
        user = self._users.get_by_email(email)
        if user is None:
            self._hasher.verify_password(password, _dummy_hash(self._hasher.rounds))
            logger.info("login failed: unknown email")
            raise UnauthorizedError(INVALID_CREDENTIALS)

        if not self._hasher.verify_password(password, user.password_hash):
            logger.info("login failed user_id=%s", user.id)
            raise UnauthorizedError(INVALID_CREDENTIALS)

        now = self._clock()
        user.last_login = now

        pair = self._open_session(user, now=now)
        logger.info("login user_id=%s", user.id)
        return AuthResult(user=Principal.from_model(user), access_token=pair.access_token, refresh_token=pair.refresh_token)

    def refresh(self, subject_id: str, *, generation: int | None = None) -> TokenPair:
        """Rotate the subject's session.

        The caller must already have verified the presented refresh token
        and checked it with :meth:`validate_refresh_token`. ``generation`` is
        the ``gen`` claim of that token; only one refresh per generation can
        win, and the losers get ``UnauthorizedError``.
        """
        user = self._users.get_by_id(subject_id)
        if user is None:
            raise UnauthorizedError("User not found")

        expected = user.session_generation if generation is None else int(generation)
        if not self._users.advance_generation(user_id=user.id, expected=expected):
            logger.info("refresh rejected user_id=%s: stale generation %s", user.id, expected)
            raise UnauthorizedError("Stale session")

        now = self._clock()
        pair = self._issue_pair(user, generation=expected + 1, now=now)

        # revoke first: a crash before the insert leaves no live token rather than two
        revoked = self._ledger.revoke_all_for_subject(user.id, reason="rotated")
        self._store(user.id, pair.refresh_token, now=now)

        logger.info("refresh user_id=%s generation=%s revoked=%s", user.id, expected + 1, revoked)
        return pair

    def logout(self, subject_id: str, token: str | None = None) -> None:
        if token:
            revoked = self._ledger.revoke(token=token, subject_id=subject_id, reason="logout")
        else:
            revoked = self._ledger.revoke_all_for_subject(subject_id, reason="logout")
        logger.info("logout user_id=%s single=%s revoked=%s", subject_id, bool(token), revoked)

    def validate_refresh_token(self, subject_id: str, token: str, *, generation: int | None = None) -> bool:
        """Whether ``token`` is a live ledger record of ``subject_id``.

        With ``generation`` (the token's ``gen`` claim) a token minted before
        the subject's latest rotation is rejected too, since :meth:`refresh`
        could never accept it.
        """
        record = self._ledger.find_active(subject_id=subject_id, token=token)
        if record is None:
            return False

        if not record.is_valid(self._clock()):
            try:
                self._ledger.tombstone(record.id)
            except RefreshTokenRevokeError:
                logger.warning("could not tombstone expired refresh token id=%s", record.id, exc_info=True)
            return False

        if generation is not None:
            user = self._users.get_by_id(subject_id)
            if user is None or int(generation) < user.session_generation:
                logger.info("refresh token of superseded generation %s user_id=%s", generation, subject_id)
                return False

        return True

    def get_profile(self, subject_id: str) -> Principal:
        user = self._users.get_by_id(subject_id)
        if user is None:
            raise UnauthorizedError("User not found")
        return Principal.from_model(user)

    def sweep_expired(self) -> int:
        count = self._ledger.revoke_expired(now=self._clock())
        logger.info("tombstoned %s expired refresh tokens", count)
        return count

    def _open_session(self, user: UserModel, *, now: datetime) -> TokenPair:
        pair = self._issue_pair(user, generation=user.session_generation, now=now)
        self._store(user.id, pair.refresh_token, now=now)
        return pair

    def _issue_pair(self, user: UserModel, *, generation: int, now: datetime) -> TokenPair:
        access = self._jwt.issue_access_token(subject=user.id, email=user.email, now=now)
        refresh = self._jwt.issue_refresh_token(
            subject=user.id, email=user.email, generation=generation, now=now
        )
        return TokenPair(access_token=access, refresh_token=refresh)

    def _store(self, subject_id: str, refresh_token: str, *, now: datetime) -> None:
        expires_at = now + self._jwt.refresh_context.ttl.as_timedelta()
        try:
            self._ledger.insert(subject_id=subject_id, token=refresh_token, expires_at=expires_at)
        except ConstraintViolationError:
            logger.error("refresh token collision for user_id=%s", subject_id)
            raise
