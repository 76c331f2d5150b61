# backend/backoffice/__init__.py
import logging
import os

from flask import Flask, request

from .config import Config
from .extensions import db, migrate
from .json_provider import BackofficeJSONProvider
from backoffice.time_utils import parse_iso_time

MIGRATIONS_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "migrations")


def create_app(config_overrides: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    app.json = BackofficeJSONProvider(app)
    app.logger.setLevel(getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO))

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db, directory=MIGRATIONS_DIR)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register blueprints
    from .routes.system import system_bp
    from .routes.attendances import attendances_bp
    from .routes.sales import sales_bp
    from .routes.items import items_bp
    from .routes.reports import reports_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(attendances_bp)
    app.register_blueprint(sales_bp)
    app.register_blueprint(items_bp)
    app.register_blueprint(reports_bp)

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        allowed_origins = {
            "http://localhost:3000",
            "http://127.0.0.1:3000",
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        }
        if origin in allowed_origins:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,PATCH,OPTIONS"
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    if app.config.get("ATTENDANCE_AUTO_CLOSE_ENABLED") and not app.config.get("TESTING"):
        from .scheduler import EndOfDayScheduler
        scheduler = EndOfDayScheduler(app, at=parse_iso_time(app.config["ATTENDANCE_AUTO_CLOSE_TIME"]))
        app.extensions["attendance_scheduler"] = scheduler
        scheduler.start()

    return app
