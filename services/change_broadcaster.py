"""
Todo change stream publisher.

Every confirmed insert/update/delete on the ``todos`` table is pushed to the
owner's Socket.IO room on the ``/todos`` namespace as a ``todo_change``
event. Payload shape::

    {
        "table": "todos",
        "eventType": "INSERT" | "UPDATE" | "DELETE",
        "new": {row image} | {},
        "old": {"id": ..., "user_id": ...} | {},
        "commit_timestamp": "2025-01-01T00:00:00"
    }
"""

import logging
from datetime import datetime
from typing import Optional, Dict, Any

from utils.auth import user_room

logger = logging.getLogger(__name__)

TODOS_NAMESPACE = '/todos'
CHANGE_EVENT = 'todo_change'

INSERT = 'INSERT'
UPDATE = 'UPDATE'
DELETE = 'DELETE'


class TodoChangeBroadcaster:
    """
    Publishes row changes to the owning user's room only, so other users'
    sockets never see them.
    """

    def __init__(self, socketio=None):
        self._socketio = socketio
        self.metrics = {
            'broadcasts_sent': 0,
            'broadcasts_failed': 0,
        }

    @property
    def socketio(self):
        if self._socketio is None:
            from app import socketio
            return socketio
        return self._socketio

    @staticmethod
    def build_payload(event_type: str, new_row: Optional[Dict[str, Any]] = None,
                      old_row: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return {
            'table': 'todos',
            'eventType': event_type,
            'new': dict(new_row or {}),
            'old': dict(old_row or {}),
            'commit_timestamp': datetime.utcnow().isoformat(),
        }

    def broadcast_change(self, event_type: str, user_id: int,
                         new_row: Optional[Dict[str, Any]] = None,
                         old_row: Optional[Dict[str, Any]] = None) -> bool:
        """
        Emit one change event to ``user_id``'s room.

        Returns:
            True if the emit succeeded. Failures are logged, never raised,
            so a committed mutation is not reported as failed.
        """
        payload = self.build_payload(event_type, new_row, old_row)
        try:
            self.socketio.emit(CHANGE_EVENT, payload, namespace=TODOS_NAMESPACE, to=user_room(user_id))
            self.metrics['broadcasts_sent'] += 1
            row_id = (new_row or old_row or {}).get('id')
            logger.debug(f"Broadcast {event_type} for todo {row_id} to user {user_id}")
            return True
        except Exception as e:
            self.metrics['broadcasts_failed'] += 1
            logger.error(f"Failed to broadcast {event_type} for user {user_id}: {e}", exc_info=True)
            return False

    def get_metrics(self) -> Dict[str, Any]:
        """
        Get broadcast counters.

        Returns:
            Dictionary with sent and failed totals
        """
        return dict(self.metrics)


change_broadcaster = TodoChangeBroadcaster()
