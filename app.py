"""
Todo backend application factory.

Wires Flask-SQLAlchemy, Flask-Login and Flask-SocketIO together and
registers the auth, todos REST and todos WebSocket handlers.
"""

import os
import logging

from dotenv import load_dotenv
from flask import Flask, jsonify
from flask_login import LoginManager
from flask_socketio import SocketIO

from models import db, User
from utils.startup_validation import run_startup_validation

load_dotenv()

logger = logging.getLogger(__name__)

socketio = SocketIO()
login_manager = LoginManager()


@login_manager.user_loader
def load_user(user_id):
    try:
        return db.session.get(User, int(user_id))
    except (TypeError, ValueError):
        return None


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify({'success': False, 'message': 'Authentication required'}), 401


def create_app(config_overrides=None):
    """
    Build the Flask application.

    Args:
        config_overrides: Optional mapping applied on top of the
            environment-derived configuration (used by tests).

    Returns:
        Configured Flask app with tables created.
    """
    report = run_startup_validation()

    app = Flask(__name__)
    app.config.update(
        SECRET_KEY=os.getenv('SESSION_SECRET', 'dev-secret-change-me'),
        SQLALCHEMY_DATABASE_URI=os.getenv('DATABASE_URL', 'sqlite:///todos.db'),
        SQLALCHEMY_ENGINE_OPTIONS={'pool_pre_ping': True},
        SESSION_COOKIE_HTTPONLY=True,
        SESSION_COOKIE_SAMESITE='Lax',
    )
    if config_overrides:
        app.config.update(config_overrides)

    db.init_app(app)
    login_manager.init_app(app)

    cors_origins = os.getenv('CORS_ALLOWED_ORIGINS', '*')
    socketio.init_app(
        app,
        async_mode=os.getenv('SOCKETIO_ASYNC_MODE', 'threading'),
        cors_allowed_origins=cors_origins if cors_origins == '*' else cors_origins.split(','),
        manage_session=False,
    )

    from routes.auth import auth_bp
    from routes.api_todos import api_todos_bp
    from routes.todos_websocket import register_todos_namespace

    app.register_blueprint(auth_bp)
    app.register_blueprint(api_todos_bp)
    register_todos_namespace(socketio)

    with app.app_context():
        db.create_all()

    logger.info(
        f"Todo backend ready (environment={report.environment}, "
        f"database={app.config['SQLALCHEMY_DATABASE_URI'].split('://')[0]})"
    )
    return app
