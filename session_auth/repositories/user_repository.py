# session_auth/repositories/user_repository.py

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from session_auth.core.base_repository import BaseRepository
from session_auth.core.exceptions import ConflictError
from session_auth.infrastructure.database.models.user_model import UserModel


class UserRepository(BaseRepository[UserModel]):
    def __init__(self, session: Session) -> None:
        super().__init__(session)

    def get_by_email(self, email: str) -> UserModel | None:
        stmt = select(UserModel).where(UserModel.email == email)
        return self._session.execute(stmt).scalar_one_or_none()

    def get_by_id(self, user_id: str) -> UserModel | None:
        stmt = select(UserModel).where(UserModel.id == user_id)
        return self._session.execute(stmt).scalar_one_or_none()

    def add(self, model: UserModel) -> UserModel:
        try:
            self._session.add(model)
            self._session.flush()
        except IntegrityError as e:
            # lost a race with a concurrent signup for the same email
            raise ConflictError("User with this email already exists") from e
        return model

    def advance_generation(self, *, user_id: str, expected: int) -> bool:
        """Compare-and-swap ``session_generation`` from ``expected`` to ``expected + 1``."""
        stmt = (
            update(UserModel)
            .where(UserModel.id == user_id, UserModel.session_generation == expected)
            .values(session_generation=expected + 1)
            .execution_options(synchronize_session="fetch")
        )
        result = self._session.execute(stmt)
        return (result.rowcount or 0) > 0

