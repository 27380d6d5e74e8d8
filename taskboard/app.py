import logging
import os

from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException


def configure_logging(app):
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=level,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
    logging.getLogger("taskboard").setLevel(level)
    app.logger.setLevel(level)


def create_app(config_overrides=None, gateway=None):
    app = Flask(__name__)
    app.config.from_object("taskboard.config.Config")
    if config_overrides:
        app.config.update(config_overrides)

    configure_logging(app)

    # Core extensions
    CORS(app, resources={r"/*": {"origins": app.config["CORS_ORIGINS"]}})

    # Storage gateway and services; the Mongo client is created on first use
    from taskboard.utils.db import get_gateway, init_app as init_db
    from taskboard.services.task_service import TaskService
    from taskboard.routes.task_routes import SERVICE_KEY, tasks_bp

    gateway = init_db(app, gateway)
    app.extensions[SERVICE_KEY] = TaskService(gateway, app.config["TASKS_COLLECTION"])

    app.register_blueprint(tasks_bp, url_prefix="/tasks")

    @app.get("/")
    def index():
        return "Hello World", 200

    @app.get("/health")
    def health():
        database = "connected" if get_gateway().connected else "idle"
        return jsonify(status="ok", service="Taskboard API", database=database), 200

    @app.errorhandler(404)
    def not_found(_):
        return jsonify(message="Not Found"), 404

    @app.errorhandler(405)
    def method_not_allowed(_):
        return jsonify(message="Method Not Allowed"), 405

    @app.errorhandler(Exception)
    def server_error(exc):
        if isinstance(exc, HTTPException):
            return jsonify(message=exc.description), exc.code
        app.logger.exception("Unhandled error: %s", exc)
        return jsonify(message="Internal server error"), 500

    return app


if __name__ == "__main__":
    # Direct run support: python -m taskboard.app
    create_app().run(
        host=os.environ.get("HOST", "127.0.0.1"),
        port=int(os.environ.get("PORT", "5000")),
        debug=os.environ.get("FLASK_DEBUG", "1") == "1",
    )
