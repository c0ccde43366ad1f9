"""moodjournal application factory and bootstrap."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping, Optional

from flask import Flask

from moodjournal.config import config_by_name, engine_options_from_uri
from moodjournal.extensions import init_extensions, jwt


def create_app(
    config_name: Optional[str] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> Flask:
    """Create and configure the moodjournal Flask application."""
    env_name = (config_name or os.environ.get("APP_ENV") or "development").lower()
    project_root = Path(__file__).resolve().parent.parent
    instance_root = project_root / "instance"

    app = Flask(
        __name__,
        instance_path=str(instance_root),
        instance_relative_config=True,
    )
    config_cls = config_by_name.get(env_name, config_by_name["development"])
    app.config.from_object(config_cls)
    if overrides:
        app.config.update(overrides)
        if "SQLALCHEMY_DATABASE_URI" in overrides and "SQLALCHEMY_ENGINE_OPTIONS" not in overrides:
            app.config["SQLALCHEMY_ENGINE_OPTIONS"] = engine_options_from_uri(
                overrides["SQLALCHEMY_DATABASE_URI"]
            )

    # Normalize sqlite path to absolute to avoid "unable to open database file"
    db_uri = app.config.get("SQLALCHEMY_DATABASE_URI") or ""
    if db_uri.startswith("sqlite:///") and not db_uri.startswith("sqlite:////"):
        db_path = db_uri.replace("sqlite:///", "", 1)
        abs_path = project_root / db_path
        abs_path.parent.mkdir(parents=True, exist_ok=True)
        app.config["SQLALCHEMY_DATABASE_URI"] = f"sqlite:///{abs_path}"

    init_extensions(app)
    _register_blueprints(app)
    _register_error_handlers(app)
    _register_auth_handlers(app)

    # The summarizer is injected here so business logic never reads provider env vars.
    from moodjournal.domains.insights.summarizer import build_summarizer

    app.extensions["insight_summarizer"] = build_summarizer(app.config)

    @app.get("/health")
    def health():
        return {"ok": True}, 200

    @app.get("/api/ping")
    def ping():
        """Lightweight endpoint for load-balancer health checks."""
        return {"pong": True}, 200

    from moodjournal.scripts.generate_insights import register_commands

    register_commands(app)

    return app


def _register_blueprints(app: Flask) -> None:
    """Lazy import and register all controllers."""
    from moodjournal.core.admin.controllers import admin_api_bp
    from moodjournal.core.auth.controllers import auth_bp  # local import to avoid circulars
    from moodjournal.domains.insights.controllers.cron_api import cron_api_bp
    from moodjournal.domains.insights.controllers.insight_api import insights_api_bp
    from moodjournal.domains.journal.controllers.journal_api import journal_api_bp
    from moodjournal.domains.stats.controllers.stats_api import stats_api_bp

    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(journal_api_bp, url_prefix="/api/entries")
    app.register_blueprint(stats_api_bp, url_prefix="/api/stats")
    app.register_blueprint(insights_api_bp, url_prefix="/api/insights")
    app.register_blueprint(cron_api_bp, url_prefix="/api/cron")
    app.register_blueprint(admin_api_bp, url_prefix="/api/admin")


def _register_error_handlers(app: Flask) -> None:
    """Basic JSON error responses."""
    from werkzeug.exceptions import HTTPException

    from moodjournal.core.errors import JournalError
    from moodjournal.core.utils.validation import RequestValidationFailed

    @app.errorhandler(RequestValidationFailed)
    def _validation_error(exc: RequestValidationFailed):
        return exc.response()

    @app.errorhandler(JournalError)
    def _journal_error(exc: JournalError):
        body = {"ok": False, "error": exc.code, "message": exc.message}
        if getattr(exc, "retryable", False):
            body["retryable"] = True
        return body, exc.status

    @app.errorhandler(HTTPException)
    def _http_error(exc: HTTPException):
        return {"ok": False, "error": exc.description}, exc.code

    @app.errorhandler(Exception)
    def _generic_error(exc: Exception):
        app.logger.exception("Unhandled error: %s", exc)
        # In debug/testing, surface the exception message to speed up diagnosis
        if app.debug or app.testing:
            return {"ok": False, "error": str(exc)}, 500
        return {"ok": False, "error": "unexpected_error"}, 500


def _register_auth_handlers(app: Flask) -> None:
    """JWT hooks: tokens only resolve for users that still exist and are active."""

    @jwt.user_lookup_loader
    def _load_user(_jwt_header, jwt_data):
        from moodjournal.core.users.models import User
        from moodjournal.extensions import db

        identity = jwt_data.get("sub")
        if not identity:
            return None
        user = db.session.get(User, int(identity))
        if not user or not user.is_active:
            return None
        return user

    @jwt.user_lookup_error_loader
    def _user_lookup_error(_jwt_header, _jwt_data):
        return {"ok": False, "error": "unauthorized"}, 401

    @jwt.unauthorized_loader
    def _missing_token(reason: str):
        return {"ok": False, "error": "unauthorized", "message": reason}, 401

    @jwt.invalid_token_loader
    def _invalid_token(reason: str):
        return {"ok": False, "error": "invalid_token", "message": reason}, 401

    @jwt.expired_token_loader
    def _expired_token(_jwt_header, _jwt_data):
        return {"ok": False, "error": "token_expired"}, 401
