from __future__ import annotations

import logging
from datetime import datetime

from flask import jsonify, request
from flask_login import current_user, login_required, login_user, logout_user

from ...errors import ValidationError
from ...extensions import db
from ...models.core import User, UserRole
from ...security import require_roles
from . import bp

auth_logger = logging.getLogger("siscont.auth")


@bp.route("/login", methods=["POST"])
def login():
    payload = request.get_json(silent=True) or request.form
    username = (payload.get("username") or "").strip()
    password = payload.get("password") or ""
    if not username or not password:
        raise ValidationError("Usuario y contraseña son requeridos")

    user = User.query.filter_by(username=username).first()
    if not user or not user.check_password(password):
        auth_logger.warning("event=auth.login.failed username=%s", username)
        return jsonify({"error": "Credenciales inválidas"}), 401

    login_user(user)
    user.last_login_at = datetime.utcnow()
    db.session.commit()
    auth_logger.info("event=auth.login.success user_id=%s role=%s", user.id, user.role)
    return jsonify(user.to_dict())


@bp.route("/logout", methods=["POST"])
@login_required
def logout():
    auth_logger.info("event=auth.logout user_id=%s", current_user.id)
    logout_user()
    return jsonify({"message": "Sesión cerrada"})


@bp.route("/user", methods=["GET"])
@login_required
def me():
    return jsonify(current_user.to_dict())


@bp.route("/users", methods=["GET"])
@login_required
@require_roles(UserRole.ADMIN)
def list_users():
    users = User.query.order_by(User.username.asc()).all()
    return jsonify([u.to_dict() for u in users])
