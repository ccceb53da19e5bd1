from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

socketio = SocketIO(async_mode=None)


def parse_allowed_origins(value):
    if not value or value.strip() == '*':
        return '*'
    return [origin.strip() for origin in value.split(',') if origin.strip()]


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = parse_allowed_origins(flask_app.config.get('ALLOWED_ORIGINS', '*'))
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(
        flask_app,
        cors_allowed_origins=allowed_origins,
        ping_interval=flask_app.config.get('SOCKETIO_PING_INTERVAL', 25),
        ping_timeout=flask_app.config.get('SOCKETIO_PING_TIMEOUT', 60),
    )

    from quizbuzz.main import main
    flask_app.register_blueprint(main)

    # Room state lives for the life of the process only
    from quizbuzz.connections import ConnectionGateway
    from quizbuzz.services.rooms import Broadcaster, CleanupSweeper, RoomRegistry

    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/')
    broadcaster = Broadcaster(socketio, namespace)
    registry = RoomRegistry(broadcaster)
    gateway = ConnectionGateway(
        registry,
        broadcaster,
        rate_limit=flask_app.config.get('RATE_LIMIT', 100),
        rate_limit_window=flask_app.config.get('RATE_LIMIT_WINDOW_SEC', 60),
        heartbeat_interval=flask_app.config.get('HEARTBEAT_INTERVAL_SEC', 30),
    )
    sweeper = CleanupSweeper(registry, flask_app.config.get('CLEANUP_INTERVAL_SEC', 300))
    flask_app.extensions['quizbuzz'] = {
        'broadcaster': broadcaster,
        'registry': registry,
        'gateway': gateway,
        'sweeper': sweeper,
    }

    from quizbuzz.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=namespace)

    if not flask_app.config.get('TESTING'):
        sweeper.start()

    return flask_app


def shutdown(flask_app):
    """Refuse new connections and stop all repeating work."""
    services = flask_app.extensions['quizbuzz']
    services['gateway'].shutdown()
    services['sweeper'].cancel()
    flask_app.logger.info('Room services stopped')
