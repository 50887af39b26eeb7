from flask import Blueprint, jsonify
from sqlalchemy import text

from session_auth.api.runtime import db_session, runtime

bp_health = Blueprint("health", __name__, url_prefix="/health")


@bp_health.get("")
def health():
    return jsonify({"status": "ok"}), 200


@bp_health.get("/db")
def health_db():
    with db_session() as session:
        session.execute(text("select 1"))
    return jsonify({"db": "ok", "backend": runtime().engine.dialect.name}), 200
