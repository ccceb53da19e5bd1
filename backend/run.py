import signal
import sys

from quizbuzz import create_app, shutdown, socketio

app = create_app()


def _handle_shutdown(signum, frame):
    app.logger.info(f"Signal {signum} received: closing server")
    shutdown(app)
    # Unwinds socketio.run(), which closes the listening socket
    sys.exit(0)


if __name__ == '__main__':
    signal.signal(signal.SIGTERM, _handle_shutdown)
    signal.signal(signal.SIGINT, _handle_shutdown)
    app.logger.info(f"Server is running on port: {app.config['PORT']}")
    socketio.run(app, host=app.config['HOST'], port=app.config['PORT'], allow_unsafe_werkzeug=True)
