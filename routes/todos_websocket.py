"""
Todos WebSocket Namespace - realtime change stream

Clients connect to ``/todos`` with their session cookie. Authenticated
sockets join their own ``user_<id>`` room and then receive ``todo_change``
events published by ``services.change_broadcaster``.
"""

import logging
from flask import request
from flask_socketio import emit, join_room, leave_room
from flask_login import current_user

from services.change_broadcaster import TODOS_NAMESPACE
from utils.auth import user_room

logger = logging.getLogger(__name__)


# Flask-SocketIO adds 'sid' to the request object at runtime
def get_socket_sid() -> str:
    """Get Socket.IO session ID from request context."""
    return request.sid  # type: ignore[attr-defined]


def register_todos_namespace(socketio):
    """
    Register Todos WebSocket namespace handlers.

    Namespace: /todos
    Events:
    - connect: Authenticated client connects and joins its user room
    - disconnect: Client disconnects
    """

    @socketio.on('connect', namespace=TODOS_NAMESPACE)
    def handle_todos_connect(auth=None):
        """Reject anonymous sockets; join the owner room otherwise."""
        if not current_user.is_authenticated:
            logger.warning(f"Rejected anonymous todos socket: {get_socket_sid()}")
            return False

        room = user_room(current_user.id)
        join_room(room)
        logger.info(f"Todos client connected: {get_socket_sid()} (room {room})")

        emit('connected', {
            'message': 'Connected to todos namespace',
            'client_id': get_socket_sid(),
            'namespace': TODOS_NAMESPACE,
            'room': room,
        })
        return None

    @socketio.on('disconnect', namespace=TODOS_NAMESPACE)
    def handle_todos_disconnect(*args):
        """Handle client disconnection from todos namespace."""
        try:
            if current_user.is_authenticated:
                leave_room(user_room(current_user.id))
            logger.info(f"Todos client disconnected: {get_socket_sid()}")
        except Exception as e:
            logger.error(f"Todos disconnect error: {e}", exc_info=True)
