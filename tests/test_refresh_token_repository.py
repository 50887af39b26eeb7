"""Unit tests for the refresh-token ledger (RefreshTokenRepository)."""

from datetime import datetime, timedelta
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from session_auth.core.clock import utcnow
from session_auth.core.exceptions import (
    ConstraintViolationError,
    RefreshTokenInsertError,
    RefreshTokenRevokeError,
)
from session_auth.infrastructure.database.models.user_model import UserModel
from session_auth.repositories.refresh_token_repository import RefreshTokenRepository, token_digest


def _user(session: Session, email: str = "a@x.com") -> UserModel:
    user = UserModel(full_name="A", email=email, password_hash="x", role="user", created_at=utcnow())
    session.add(user)
    session.flush()
    return user


def _later() -> datetime:
    return utcnow() + timedelta(days=1)


def test_insert_stores_digest_not_raw_token(session: Session, ledger: RefreshTokenRepository) -> None:
    user = _user(session)
    record = ledger.insert(subject_id=user.id, token="raw-token", expires_at=_later())

    assert record.id is not None
    assert record.token == token_digest("raw-token")
    assert record.token != "raw-token"
    assert record.is_revoked is False


def test_duplicate_token_is_constraint_violation(session: Session, ledger: RefreshTokenRepository) -> None:
    user = _user(session)
    ledger.insert(subject_id=user.id, token="dup", expires_at=_later())

    with pytest.raises(ConstraintViolationError):
        ledger.insert(subject_id=user.id, token="dup", expires_at=_later())


def test_find_active_matches_token_and_subject(session: Session, ledger: RefreshTokenRepository) -> None:
    alice = _user(session, "alice@x.com")
    bob = _user(session, "bob@x.com")
    ledger.insert(subject_id=alice.id, token="t1", expires_at=_later())

    assert ledger.find_active(subject_id=alice.id, token="t1") is not None
    assert ledger.find_active(subject_id=bob.id, token="t1") is None
    assert ledger.find_active(subject_id=alice.id, token="other") is None


def test_find_active_ignores_expiry(session: Session, ledger: RefreshTokenRepository) -> None:
    user = _user(session)
    ledger.insert(subject_id=user.id, token="old", expires_at=utcnow() - timedelta(seconds=1))

    assert ledger.find_active(subject_id=user.id, token="old") is not None


def test_revoke_single_token(session: Session, ledger: RefreshTokenRepository) -> None:
    user = _user(session)
    ledger.insert(subject_id=user.id, token="t1", expires_at=_later())
    ledger.insert(subject_id=user.id, token="t2", expires_at=_later())

    assert ledger.revoke(token="t1", subject_id=user.id) == 1

    assert ledger.find_active(subject_id=user.id, token="t1") is None
    assert ledger.find_active(subject_id=user.id, token="t2") is not None
    record = ledger.get_by_token("t1")
    assert record.is_revoked is True
    assert record.reason == "logout"
    assert record.revoked_at is not None


def test_revoke_unknown_token_is_noop(session: Session, ledger: RefreshTokenRepository) -> None:
    user = _user(session)
    assert ledger.revoke(token="missing", subject_id=user.id) == 0


def test_revoke_requires_matching_subject(session: Session, ledger: RefreshTokenRepository) -> None:
    alice = _user(session, "alice@x.com")
    bob = _user(session, "bob@x.com")
    ledger.insert(subject_id=alice.id, token="t1", expires_at=_later())

    assert ledger.revoke(token="t1", subject_id=bob.id) == 0
    assert ledger.find_active(subject_id=alice.id, token="t1") is not None


def test_revoke_all_for_subject(session: Session, ledger: RefreshTokenRepository) -> None:
    alice = _user(session, "alice@x.com")
    bob = _user(session, "bob@x.com")
    for token in ("a1", "a2", "a3"):
        ledger.insert(subject_id=alice.id, token=token, expires_at=_later())
    ledger.insert(subject_id=bob.id, token="b1", expires_at=_later())

    assert ledger.revoke_all_for_subject(alice.id, reason="rotated") == 3

    for token in ("a1", "a2", "a3"):
        assert ledger.find_active(subject_id=alice.id, token=token) is None
        assert ledger.get_by_token(token).reason == "rotated"
    assert ledger.find_active(subject_id=bob.id, token="b1") is not None


def test_revoke_all_skips_already_revoked(session: Session, ledger: RefreshTokenRepository) -> None:
    user = _user(session)
    ledger.insert(subject_id=user.id, token="t1", expires_at=_later())
    ledger.revoke(token="t1", subject_id=user.id)

    assert ledger.revoke_all_for_subject(user.id) == 0
    assert ledger.get_by_token("t1").reason == "logout"


def test_tombstone_marks_expired(session: Session, ledger: RefreshTokenRepository) -> None:
    user = _user(session)
    record = ledger.insert(subject_id=user.id, token="t1", expires_at=utcnow() - timedelta(minutes=1))

    assert ledger.tombstone(record.id) == 1

    stored = ledger.get_by_token("t1")
    assert stored.is_revoked is True
    assert stored.reason == "expired"


def test_revoke_expired_sweeps_only_expired(session: Session, ledger: RefreshTokenRepository) -> None:
    user = _user(session)
    now = utcnow()
    ledger.insert(subject_id=user.id, token="old", expires_at=now - timedelta(hours=1))
    ledger.insert(subject_id=user.id, token="fresh", expires_at=now + timedelta(hours=1))

    assert ledger.revoke_expired(now=now) == 1
    assert ledger.get_by_token("old").is_revoked is True
    assert ledger.get_by_token("fresh").is_revoked is False


def test_store_failures_are_distinguishable() -> None:
    broken = MagicMock(spec=Session)
    broken.execute.side_effect = OperationalError("UPDATE", {}, Exception("timeout"))
    broken.flush.side_effect = OperationalError("INSERT", {}, Exception("timeout"))
    ledger = RefreshTokenRepository(broken)

    with pytest.raises(RefreshTokenRevokeError):
        ledger.revoke_all_for_subject("user-1")

    with pytest.raises(RefreshTokenInsertError) as exc_info:
        ledger.insert(subject_id="user-1", token="t", expires_at=_later())
    assert not isinstance(exc_info.value, ConstraintViolationError)
