from __future__ import annotations

import logging
import os
import time
import uuid

from flask import Flask, g, jsonify, request
from flask_login import current_user

from .config import DevConfig, ProdConfig
from .errors import register_error_handlers
from .extensions import csrf, db, login_manager, migrate
from .models.core import User

api_logger = logging.getLogger("siscont.api")


def _configure_logging(app: Flask) -> None:
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    root = logging.getLogger("siscont")
    root.setLevel(level)
    if not logging.getLogger().handlers and not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
        root.addHandler(handler)


def _is_api() -> bool:
    return request.path.startswith("/api/")


def _request_context() -> dict:
    return {
        "request_id": getattr(g, "api_request_id", None),
        "user_id": getattr(current_user, "id", None) if getattr(current_user, "is_authenticated", False) else None,
        "endpoint": request.endpoint,
        "method": request.method,
        "path": request.path,
    }


def _register_request_logging(app: Flask) -> None:
    @app.before_request
    def _api_log_request_start() -> None:
        if not _is_api():
            return
        g.api_request_started = time.perf_counter()
        g.api_request_id = request.headers.get("X-Request-Id") or uuid.uuid4().hex[:12]
        ctx = _request_context()
        api_logger.info(
            "event=api.request.start request_id=%s user_id=%s endpoint=%s method=%s path=%s",
            ctx["request_id"],
            ctx["user_id"],
            ctx["endpoint"],
            ctx["method"],
            ctx["path"],
        )

    @app.after_request
    def _api_log_request_end(response):
        if not _is_api():
            return response
        started = getattr(g, "api_request_started", None)
        duration_ms = ((time.perf_counter() - started) * 1000.0) if started is not None else 0.0
        ctx = _request_context()
        msg = "event=api.request.end request_id=%s user_id=%s endpoint=%s method=%s path=%s status=%s duration_ms=%.2f"
        args = (
            ctx["request_id"],
            ctx["user_id"],
            ctx["endpoint"],
            ctx["method"],
            ctx["path"],
            response.status_code,
            duration_ms,
        )
        if response.status_code >= 500:
            api_logger.error(msg, *args)
        elif response.status_code >= 400:
            api_logger.warning(msg, *args)
        else:
            api_logger.info(msg, *args)
        if ctx["request_id"]:
            response.headers["X-Request-Id"] = ctx["request_id"]
        return response


def create_app(test_config: dict | None = None) -> Flask:
    package_dir = os.path.dirname(__file__)
    project_root = os.path.abspath(os.path.join(package_dir, ".."))

    app = Flask(__name__, instance_path=os.path.join(project_root, "instance"))

    # Ensure instance folder exists (SQLite, uploads)
    try:
        os.makedirs(app.instance_path, exist_ok=True)
    except OSError:
        # Read-only filesystem: fine as long as DATABASE_URL/UPLOAD_FOLDER point elsewhere.
        pass

    env = os.environ.get("FLASK_ENV", "development").lower()
    app.config.from_object(DevConfig if env != "production" else ProdConfig)
    # Overrides must land before db.init_app reads the database URI.
    if test_config:
        app.config.update(test_config)

    _configure_logging(app)

    # Extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    csrf.init_app(app)

    @login_manager.user_loader
    def load_user(user_id: str):
        try:
            return db.session.get(User, int(user_id))
        except (TypeError, ValueError):
            return None

    @login_manager.unauthorized_handler
    def _unauthorized():
        return jsonify({"error": "No autenticado"}), 401

    _register_request_logging(app)
    register_error_handlers(app)

    # Blueprints (JSON API: session cookie + SameSite, no form tokens)
    from .blueprints.auth import bp as auth_bp
    from .blueprints.importacion import bp as importacion_bp
    from .blueprints.registry import bp as registry_bp
    from .blueprints.reportes import bp as reportes_bp

    for bp in (auth_bp, registry_bp, importacion_bp, reportes_bp):
        csrf.exempt(bp)
        app.register_blueprint(bp)

    from .commands.siscont_cli import siscont as siscont_cli

    app.cli.add_command(siscont_cli)

    # DEV: ensure tables exist (use Alembic migrations in production)
    if app.config.get("AUTO_CREATE_DB", False):
        with app.app_context():
            db.create_all()

    return app
