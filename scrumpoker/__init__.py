from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from scrumpoker.config import Config

socketio = SocketIO(async_mode=None)


def _allowed_origins(value):
    if not value or value == '*':
        return '*'
    return [origin.strip() for origin in value.split(',') if origin.strip()]


def create_app(config_class=Config, clock=None):
    """Build the Flask app, its Socket.IO server and the room services.

    ``clock`` replaces ``time.time`` for every timestamp and timer; tests
    pass a fake one. With TESTING set no background task is started.
    """
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    origins = _allowed_origins(flask_app.config.get('CORS_ALLOWED_ORIGINS'))
    CORS(flask_app, origins=origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=origins)

    testing = bool(flask_app.config.get('TESTING'))
    from scrumpoker.services.rooms import build_services
    services = build_services(
        socketio,
        flask_app.config,
        flask_app.logger,
        clock=clock,
        background=not testing,
    )
    flask_app.extensions['scrumpoker'] = services

    from scrumpoker.main import main
    flask_app.register_blueprint(main)

    from scrumpoker.api.admin import admin
    flask_app.register_blueprint(admin, url_prefix='/api/admin')

    # Register Socket.IO event handlers against the initialized socketio instance
    from scrumpoker.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=flask_app.config.get('SOCKETIO_NAMESPACE', '/'))

    services.janitor.start()
    flask_app.logger.info(
        f"[startup] max_players={services.players.max_players} grace={services.session.grace_period_sec}s"
    )
    return flask_app
