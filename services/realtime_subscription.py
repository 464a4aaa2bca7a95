"""
Realtime subscription to the ``todos`` change stream.

The Socket.IO client delivers events on its own thread; handlers only put
parsed ``ChangeEvent`` objects on a queue. The owner of the subscription
drains that queue on its own thread, so state is never touched from the
socket thread.
"""

import logging
import queue
from typing import Callable, List, Optional

import socketio
from socketio.exceptions import ConnectionError as SocketConnectionError

from services.change_event import ChangeEvent
from services.errors import RemoteStoreError

logger = logging.getLogger(__name__)

TODOS_NAMESPACE = '/todos'
CHANGE_EVENT = 'todo_change'


class RealtimeSubscription:

    def __init__(self, base_url: str, cookie_header: str = '',
                 client: Optional[socketio.Client] = None,
                 channel: Optional[queue.Queue] = None,
                 wait_timeout: float = 5,
                 cookie_source: Optional[Callable[[], str]] = None):
        self.base_url = base_url.rstrip('/')
        self._cookie_header = cookie_header
        # Called on every subscribe; takes precedence over cookie_header
        self._cookie_source = cookie_source
        self.wait_timeout = wait_timeout
        self.channel = channel if channel is not None else queue.Queue()
        self._subscribed = False

        self._sio = client or socketio.Client(reconnection=True)
        self._sio.on('connect', self._on_connect, namespace=TODOS_NAMESPACE)
        self._sio.on('disconnect', self._on_disconnect, namespace=TODOS_NAMESPACE)
        self._sio.on(CHANGE_EVENT, self._on_change, namespace=TODOS_NAMESPACE)

    @classmethod
    def for_client(cls, store_client, **kwargs) -> "RealtimeSubscription":
        """Subscription that follows a store client's current session cookie."""
        return cls(store_client.base_url, cookie_source=lambda: store_client.cookie_header, **kwargs)

    @property
    def cookie_header(self) -> str:
        if self._cookie_source is not None:
            return self._cookie_source() or ''
        return self._cookie_header

    @property
    def subscribed(self) -> bool:
        return self._subscribed

    def subscribe(self) -> None:
        """Open the connection. Calling it again while subscribed is a no-op."""
        if self._subscribed:
            return
        cookie_header = self.cookie_header
        headers = {'Cookie': cookie_header} if cookie_header else {}
        try:
            self._sio.connect(
                self.base_url,
                headers=headers,
                namespaces=[TODOS_NAMESPACE],
                wait_timeout=self.wait_timeout,
            )
        except SocketConnectionError as e:
            raise RemoteStoreError(f"Realtime subscription failed: {e}")
        self._subscribed = True
        logger.info(f"Subscribed to todo changes at {self.base_url}{TODOS_NAMESPACE}")

    def unsubscribe(self) -> None:
        """Close the connection and drop undelivered events. Safe to repeat."""
        if not self._subscribed:
            return
        self._subscribed = False
        try:
            self._sio.disconnect()
        finally:
            self.discard_pending()
        logger.info("Unsubscribed from todo changes")

    def drain(self) -> List[ChangeEvent]:
        """All queued events in arrival order, without blocking."""
        events = []
        while True:
            try:
                events.append(self.channel.get_nowait())
            except queue.Empty:
                return events

    def discard_pending(self) -> int:
        return len(self.drain())

    def _on_connect(self):
        logger.debug("Todos namespace connected")

    def _on_disconnect(self, *args):
        logger.debug("Todos namespace disconnected")

    def _on_change(self, payload):
        try:
            event = ChangeEvent.from_payload(payload)
        except ValueError as e:
            logger.warning(f"Ignoring malformed change event: {e}")
            return
        self.channel.put(event)
