from flask import Flask, jsonify

from electora.cli import register_cli
from electora.config import Config
from electora.extensions import db, login_manager, migrate
from electora.models import User
from electora.routes import register_routes
from electora.services.signals import register_event_logging


def create_app(test_config=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    app.logger.setLevel(app.config["LOG_LEVEL"])

    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({"ok": False, "error": "Login required."}), 401

    register_routes(app)
    register_cli(app)
    register_event_logging(app)
    return app


__all__ = ["create_app", "db", "migrate"]
