"""Unit tests for UserService: account creation and whitelisted updates."""

import pytest
from sqlalchemy.orm import Session

from session_auth.core.exceptions import ConflictError, NotFoundError
from session_auth.entities.user import Role
from session_auth.infrastructure.security.password_hasher import PasswordHasher
from session_auth.repositories.user_repository import UserRepository
from session_auth.services.user_service import UserService


@pytest.fixture
def users(session: Session, hasher: PasswordHasher) -> UserService:
    return UserService(UserRepository(session), hasher)


def test_create_user_defaults(users: UserService, hasher: PasswordHasher) -> None:
    user = users.create_user(full_name="  Alice  ", email="a@x.com", password="Password1")

    assert user.id
    assert user.full_name == "Alice"
    assert user.role == Role.USER.value
    assert user.session_generation == 0
    assert hasher.verify_password("Password1", user.password_hash)


def test_create_user_duplicate_email(users: UserService) -> None:
    users.create_user(full_name="Alice", email="a@x.com", password="Password1")
    with pytest.raises(ConflictError):
        users.create_user(full_name="Other", email="a@x.com", password="Password1")


def test_update_user_changes_whitelisted_fields(users: UserService, hasher: PasswordHasher) -> None:
    user = users.create_user(full_name="Alice", email="a@x.com", password="Password1")

    updated = users.update_user(user_id=user.id, full_name="Alice B", email="b@x.com", password="NewPassword1")

    assert updated.full_name == "Alice B"
    assert updated.email == "b@x.com"
    assert hasher.verify_password("NewPassword1", updated.password_hash)
    assert updated.updated_at is not None


def test_update_user_never_touches_identity_or_role(users: UserService) -> None:
    user = users.create_user(full_name="Alice", email="a@x.com", password="Password1")
    original_id, original_role, original_created = user.id, user.role, user.created_at

    updated = users.update_user(user_id=user.id, full_name="Renamed")

    assert updated.id == original_id
    assert updated.role == original_role
    assert updated.created_at == original_created
    assert updated.email == "a@x.com"


def test_update_user_rejects_taken_email(users: UserService) -> None:
    users.create_user(full_name="Alice", email="a@x.com", password="Password1")
    bob = users.create_user(full_name="Bob", email="b@x.com", password="Password1")

    with pytest.raises(ConflictError):
        users.update_user(user_id=bob.id, email="a@x.com")


def test_update_missing_user(users: UserService) -> None:
    with pytest.raises(NotFoundError):
        users.update_user(user_id="missing", full_name="X")


def test_change_role(users: UserService) -> None:
    user = users.create_user(full_name="Alice", email="a@x.com", password="Password1")
    assert users.change_role(user_id=user.id, role=Role.ADMIN).role == "admin"


def test_create_moderator(users: UserService) -> None:
    user = users.create_user(full_name="Mo", email="mo@x.com", password="Password1", role=Role.MODERATOR)
    assert user.role == "moderator"


def test_role_values() -> None:
    assert {r.value for r in Role} == {"admin", "moderator", "user"}
