# session_auth/services/user_service.py

from session_auth.core.clock import Clock, utcnow
from session_auth.core.exceptions import ConflictError, NotFoundError
from session_auth.entities.user import Role
from session_auth.infrastructure.database.models.user_model import UserModel
from session_auth.infrastructure.security.password_hasher import PasswordHasher
from session_auth.repositories.user_repository import UserRepository


class UserService:
    def __init__(self, user_repository: UserRepository, hasher: PasswordHasher, *, clock: Clock = utcnow) -> None:
        self._user_repository = user_repository
        self._hasher = hasher
        self._clock = clock

    def create_user(self, *, full_name: str, email: str, password: str, role: Role = Role.USER) -> UserModel:
        # emails are compared exactly as given
        existing = self._user_repository.get_by_email(email)
        if existing is not None:
            raise ConflictError("User with this email already exists")

        model = UserModel(
            full_name=full_name.strip(),
            email=email,
            password_hash=self._hasher.hash_password(password),
            role=Role(role).value,
            session_generation=0,
            created_at=self._clock(),
            updated_at=None,
            last_login=None,
        )
        return self._user_repository.add(model)

    def get_user(self, *, user_id: str) -> UserModel:
        user = self._user_repository.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def update_user(
        self,
        *,
        user_id: str,
        full_name: str | None = None,
        email: str | None = None,
        password: str | None = None,
    ) -> UserModel:
        """Apply self-service profile changes.

        Only ``full_name``, ``email`` and ``password`` can change here; id,
        role and session state are never touched. Role changes go through
        :meth:`change_role`.
        """
        user = self.get_user(user_id=user_id)

        if email is not None and email != user.email:
            if self._user_repository.get_by_email(email) is not None:
                raise ConflictError("User with this email already exists")
            user.email = email

        if full_name is not None:
            user.full_name = full_name.strip()
        if password is not None:
            user.password_hash = self._hasher.hash_password(password)

        user.updated_at = self._clock()
        return user

    def change_role(self, *, user_id: str, role: Role) -> UserModel:
        user = self.get_user(user_id=user_id)
        user.role = Role(role).value
        user.updated_at = self._clock()
        return user
