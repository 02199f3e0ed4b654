import logging

from flask import Flask, render_template, request
from dotenv import load_dotenv

from app.measurebook.config import load_config
from app.measurebook.models import Base  # noqa: F401  (registers module tables before anything imports them)
from app.measurebook.db import init_db, teardown_db_session
from app.measurebook.routes import bp as routes_bp
from app.measurebook.modules.customers.routes import bp as customers_bp
from app.measurebook.modules.customers.store import store_from_config


def create_app() -> Flask:
    load_dotenv()
    app = Flask(__name__, template_folder="templates", static_folder="static")
    app.config.from_mapping(load_config())

    level = app.config.get("LOG_LEVEL") or "INFO"
    app.logger.setLevel(level)
    logging.getLogger("app.measurebook").setLevel(level)

    from app.measurebook.security import ensure_csrf_token, validate_csrf

    @app.context_processor
    def _inject_csrf() -> dict:
        return {"csrf_token": ensure_csrf_token()}

    @app.before_request
    def _csrf_guard():
        if request.path.startswith(("/static/", "/health", "/healthz")):
            return None
        ensure_csrf_token()
        if request.method in ("POST", "PUT", "PATCH", "DELETE"):
            if not validate_csrf(request):
                return render_template("errors/400.html", message="CSRF token missing or invalid."), 400

    # Production guardrails (fail fast with clear logs)
    env = (app.config.get("ENV") or "").strip().lower()
    if env in ("prod", "production"):
        if not app.config.get("SECRET_KEY") or str(app.config["SECRET_KEY"]) in ("", "change-me"):
            raise RuntimeError("SECRET_KEY must be set to a strong value in production (not default).")
        if app.config.get("STORE_BACKEND") == "rest":
            if not app.config.get("STORE_REST_URL") or not app.config.get("STORE_REST_KEY"):
                raise RuntimeError("STORE_REST_URL and STORE_REST_KEY are required in production.")
        else:
            if not app.config.get("DATABASE_URL"):
                raise RuntimeError("DATABASE_URL is required in production.")
            if str(app.config["DATABASE_URL"]).startswith("sqlite"):
                raise RuntimeError("DATABASE_URL must be Postgres in production (not sqlite).")

    init_db(app)
    app.extensions["customer_store"] = store_from_config(app.config)
    app.logger.info("Customer store backend: %s", type(app.extensions["customer_store"]).__name__)

    app.register_blueprint(routes_bp)
    app.register_blueprint(customers_bp)

    app.teardown_appcontext(teardown_db_session)

    @app.errorhandler(404)
    def _err_404(e):  # type: ignore[no-redef]
        return render_template("errors/404.html"), 404

    @app.errorhandler(500)
    def _err_500(e):  # type: ignore[no-redef]
        app.logger.exception("Unhandled 500 on %s %s", request.method, request.path)
        return render_template("errors/500.html"), 500

    logging.getLogger(__name__).info("create_app() complete; app ready to serve")

    return app
