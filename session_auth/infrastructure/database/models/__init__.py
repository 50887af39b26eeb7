from session_auth.infrastructure.database.models.refresh_token_model import RefreshTokenModel
from session_auth.infrastructure.database.models.user_model import UserModel

__all__ = ["RefreshTokenModel", "UserModel"]
