# session_auth/entities/user.py
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class Role(str, Enum):
    ADMIN = "admin"
    MODERATOR = "moderator"
    USER = "user"


@dataclass(frozen=True)
class Principal:
    id: str
    full_name: str
    email: str
    role: Role
    created_at: datetime
    last_login: Optional[datetime] = None

    @classmethod
    def from_model(cls, model) -> "Principal":
        return cls(
            id=model.id,
            full_name=model.full_name,
            email=model.email,
            role=Role(model.role),
            created_at=model.created_at,
            last_login=model.last_login,
        )
