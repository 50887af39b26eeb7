# session_auth/infrastructure/database/models/refresh_token_model.py

from datetime import datetime

from sqlalchemy import BigInteger, Boolean, CHAR, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from session_auth.infrastructure.database.base_model import BaseModel


class RefreshTokenModel(BaseModel):
    __tablename__ = "tbRefreshTokens"
    __table_args__ = (
        Index("ix_refresh_tokens_subject_revoked", "subject_id", "is_revoked"),
    )

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True
    )

    subject_id: Mapped[str] = mapped_column(String(36), ForeignKey("tbUsers.id"), nullable=False)

    # sha256 hex of the signed token; the raw token is never stored
    token: Mapped[str] = mapped_column(CHAR(64), nullable=False, unique=True)

    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    is_revoked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    revoked_at: Mapped[datetime] = mapped_column(DateTime, nullable=True)
    reason: Mapped[str] = mapped_column(String(20), nullable=True)

    def is_valid(self, now: datetime) -> bool:
        return not self.is_revoked and now < self.expires_at
