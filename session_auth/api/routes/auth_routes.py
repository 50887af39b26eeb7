from flask import Blueprint, g, jsonify, request

from session_auth.api.middlewares.auth_middleware import require_auth, require_refresh_token, require_roles
from session_auth.api.runtime import db_session, session_service, user_service
from session_auth.api.schemas.auth_schema import (
    AuthResponse,
    CreateUserRequest,
    LoginRequest,
    LogoutRequest,
    SignupRequest,
    TokenPairResponse,
    UserResponse,
)
from session_auth.entities.user import Principal, Role

bp_auth = Blueprint("auth", __name__, url_prefix="/auth")


@bp_auth.post("/signup")
def signup():
    payload = SignupRequest.model_validate(request.get_json(force=True))

    with db_session() as session:
        result = session_service(session).signup(
            email=payload.email,
            password=payload.password,
            full_name=payload.full_name,
        )

    return jsonify(AuthResponse.from_result(result).model_dump(mode="json")), 201


@bp_auth.post("/login")
def login():
    payload = LoginRequest.model_validate(request.get_json(force=True))

    with db_session() as session:
        result = session_service(session).login(email=payload.email, password=payload.password)

    return jsonify(AuthResponse.from_result(result).model_dump(mode="json")), 200


@bp_auth.post("/refresh")
@require_refresh_token
def refresh():
    claims = g.refresh_claims

    with db_session() as session:
        pair = session_service(session).refresh(claims.subject, generation=claims.generation)

    return jsonify(TokenPairResponse.from_pair(pair).model_dump(mode="json")), 200


@bp_auth.post("/logout")
@require_auth
def logout():
    # without a refresh_token in the body every session of the user ends
    payload = LogoutRequest.model_validate(request.get_json(silent=True) or {})

    with db_session() as session:
        session_service(session).logout(g.principal.id, payload.refresh_token)

    return ("", 204)


@bp_auth.get("/me")
@require_auth
def me():
    return jsonify(UserResponse.from_principal(g.principal).model_dump(mode="json")), 200


@bp_auth.post("/admin/signup")
def admin_signup():
    payload = CreateUserRequest.model_validate(request.get_json(force=True))

    with db_session() as session:
        result = session_service(session).signup(
            email=payload.email,
            password=payload.password,
            full_name=payload.full_name,
            role=payload.role,
        )

    return jsonify(AuthResponse.from_result(result).model_dump(mode="json")), 201


@bp_auth.post("/admin/users")
@require_auth
@require_roles(Role.ADMIN.value)
def create_user():
    payload = CreateUserRequest.model_validate(request.get_json(force=True))

    with db_session() as session:
        user = user_service(session).create_user(
            full_name=payload.full_name,
            email=payload.email,
            password=payload.password,
            role=payload.role,
        )
        principal = Principal.from_model(user)

    return jsonify(UserResponse.from_principal(principal).model_dump(mode="json")), 201
