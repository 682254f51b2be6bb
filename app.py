"""Flask application for the EPG SKU allocator."""

from __future__ import annotations

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

import config
from config import configure_logging
from db import SessionLocal, init_db
from routes import bp as routes_bp
from routes.equipment_routes import bp as equipment_bp
from routes.sku_admin_routes import bp as sku_admin_bp
from services.errors import SkuError
from utils.catalog import ensure_default_catalog


def create_app() -> Flask:
    """Application factory: logging, schema, default catalog and blueprints."""
    configure_logging()
    init_db()
    ensure_default_catalog()
    app = Flask(__name__)
    app.config.update(SECRET_KEY=config.SECRET_KEY)

    @app.errorhandler(SkuError)
    def sku_error(exc: SkuError):
        app.logger.warning("%s: %s", type(exc).__name__, exc)
        return jsonify({"error": str(exc)}), exc.status_code

    @app.errorhandler(HTTPException)
    def http_error(exc: HTTPException):
        return jsonify({"error": exc.description}), exc.code

    @app.errorhandler(500)
    def server_error(_e):
        return jsonify({"error": "internal server error"}), 500

    @app.teardown_appcontext
    def remove_session(_exc) -> None:
        SessionLocal.remove()

    app.register_blueprint(routes_bp)
    app.register_blueprint(sku_admin_bp)
    app.register_blueprint(equipment_bp)
    return app


app = create_app()
