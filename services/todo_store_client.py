"""
HTTP client for the remote todo store and its auth endpoints.

Wraps a ``requests.Session`` so the login cookie set by ``sign_in`` is
reused by every table call and can be handed to the realtime subscription.
"""

import logging
from typing import Any, Dict, List, Optional

import requests

from services.client_config import ClientConfig, DEFAULT_TIMEOUT_SECONDS
from services.errors import RemoteStoreError, AuthenticationError

logger = logging.getLogger(__name__)


class TodoStoreClient:
    """
    Table operations:
    - select_todos: all rows of the signed-in user, newest first
    - insert_todo: insert one row and return it
    - update_completed: set ``completed`` by id
    - delete_todo: delete by id
    """

    def __init__(self, base_url: str, timeout: float = DEFAULT_TIMEOUT_SECONDS,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.setdefault('Accept', 'application/json')
        self._user: Optional[Dict[str, Any]] = None

    @classmethod
    def from_config(cls, config: ClientConfig) -> "TodoStoreClient":
        return cls(config.api_url, timeout=config.timeout)

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise RemoteStoreError(f"{method} {path} failed: {e}")

        try:
            data = resp.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if resp.status_code == 401:
            raise AuthenticationError(data.get('message') or 'Authentication required', resp.status_code)
        if not resp.ok:
            message = data.get('message') or resp.reason or 'Request failed'
            raise RemoteStoreError(message, resp.status_code)
        return data

    # Auth

    def sign_up(self, email: str, password: str) -> Dict[str, Any]:
        data = self._request('POST', '/auth/register', json={'email': email, 'password': password})
        self._user = data.get('user')
        logger.info(f"Signed up as {email}")
        return self._user

    def sign_in(self, email: str, password: str) -> Dict[str, Any]:
        data = self._request('POST', '/auth/login', json={'email': email, 'password': password})
        self._user = data.get('user')
        logger.info(f"Signed in as {email}")
        return self._user

    def sign_out(self) -> None:
        self._request('POST', '/auth/logout')
        self._user = None
        self.session.cookies.clear()
        logger.info("Signed out")

    def current_user(self) -> Optional[Dict[str, Any]]:
        """Identity cached from the last sign-in, or None."""
        return self._user

    def fetch_current_user(self) -> Optional[Dict[str, Any]]:
        """Ask the server who the session belongs to; None if anonymous."""
        try:
            data = self._request('GET', '/auth/api/user')
        except AuthenticationError:
            self._user = None
            return None
        self._user = data.get('user')
        return self._user

    @property
    def cookie_header(self) -> str:
        return '; '.join(f"{name}={value}" for name, value in self.session.cookies.items())

    # Table

    def select_todos(self) -> List[Dict[str, Any]]:
        data = self._request('GET', '/api/todos/')
        return list(data.get('todos') or [])

    def insert_todo(self, text: str, user_id) -> Dict[str, Any]:
        data = self._request('POST', '/api/todos/', json={'text': text, 'user_id': user_id})
        row = data.get('todo')
        if not row:
            raise RemoteStoreError('Insert returned no row')
        return row

    def update_completed(self, todo_id, completed: bool) -> Dict[str, Any]:
        data = self._request('PATCH', f'/api/todos/{todo_id}', json={'completed': completed})
        return data.get('todo') or {}

    def delete_todo(self, todo_id) -> None:
        self._request('DELETE', f'/api/todos/{todo_id}')
