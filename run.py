"""
Todo backend development server - WebSocket-enabled.
Serves the REST API and the /todos change stream from one process.
"""
import os
import logging

from app import create_app, socketio

logging.basicConfig(
    level=os.getenv('LOG_LEVEL', 'INFO').upper(),
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
)

app = create_app()

if __name__ == "__main__":
    logging.getLogger(__name__).info("Starting todo backend with WebSocket support...")
    socketio.run(
        app,
        host=os.getenv('HOST', '0.0.0.0'),
        port=int(os.getenv('PORT', '5000')),
        debug=os.getenv('FLASK_ENV') == 'development',
        use_reloader=False,
        log_output=True,
        allow_unsafe_werkzeug=True,
    )
