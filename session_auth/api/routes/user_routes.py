from flask import Blueprint, jsonify, request

from session_auth.api.middlewares.auth_middleware import require_auth, require_roles
from session_auth.api.runtime import db_session, user_service
from session_auth.api.schemas.auth_schema import UpdateUserRequest, UserResponse
from session_auth.entities.user import Principal, Role

bp_users = Blueprint("users", __name__, url_prefix="/users")


@bp_users.get("/<user_id>")
@require_auth
@require_roles(Role.ADMIN.value, Role.MODERATOR.value)
def get_user(user_id: str):
    with db_session() as session:
        principal = Principal.from_model(user_service(session).get_user(user_id=user_id))

    return jsonify(UserResponse.from_principal(principal).model_dump(mode="json")), 200


@bp_users.put("/<user_id>")
@require_auth
@require_roles(Role.ADMIN.value)
def update_user(user_id: str):
    payload = UpdateUserRequest.model_validate(request.get_json(force=True))

    with db_session() as session:
        service = user_service(session)
        user = service.update_user(
            user_id=user_id,
            full_name=payload.full_name,
            email=payload.email,
            password=payload.password,
        )
        if payload.role is not None:
            user = service.change_role(user_id=user_id, role=payload.role)
        principal = Principal.from_model(user)

    return jsonify(UserResponse.from_principal(principal).model_dump(mode="json")), 200
