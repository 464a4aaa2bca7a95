"""
Root pytest configuration and fixtures for unit and integration tests.
"""
import os
import sys
import uuid
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Test configuration
os.environ['FLASK_ENV'] = 'testing'
os.environ['DATABASE_URL'] = 'sqlite:///:memory:'
os.environ['SESSION_SECRET'] = 'test-secret-key-for-testing-only-0123456789'
os.environ['SOCKETIO_ASYNC_MODE'] = 'threading'

TEST_PASSWORD = 'testpassword123'


@pytest.fixture(scope='session')
def app():
    """Create and configure a test Flask application."""
    from app import create_app
    from models import db

    test_app = create_app({'TESTING': True})

    yield test_app

    with test_app.app_context():
        db.drop_all()


def _truncate(app):
    from sqlalchemy import delete
    from models import db, Todo, User

    with app.app_context():
        db.session.execute(delete(Todo))
        db.session.execute(delete(User))
        db.session.commit()
        db.session.remove()


@pytest.fixture(scope='function')
def client(app):
    """Create a test client for the Flask application; tables are emptied afterwards."""
    yield app.test_client()
    _truncate(app)


@pytest.fixture(scope='function')
def make_client(app):
    """
    Factory for extra signed-in test clients.

    ``make_client()`` registers a fresh user; ``make_client(email=...)``
    signs in an existing one.
    """
    created = []

    def _make(email=None, register=True):
        test_client = app.test_client()
        if email is None:
            email = f'user_{uuid.uuid4().hex[:8]}@example.com'
        if register:
            resp = test_client.post('/auth/register', json={'email': email, 'password': TEST_PASSWORD})
            assert resp.status_code == 201, resp.get_json()
        else:
            resp = test_client.post('/auth/login', json={'email': email, 'password': TEST_PASSWORD})
            assert resp.status_code == 200, resp.get_json()
        test_client.user = resp.get_json()['user']
        created.append(test_client)
        return test_client

    yield _make
    _truncate(app)


@pytest.fixture(scope='function')
def authenticated_client(make_client):
    """Create an authenticated test client."""
    return make_client()


@pytest.fixture(scope='function')
def socket_client_factory(app):
    """Flask-SocketIO test clients bound to a Flask test client's cookies."""
    from app import socketio

    clients = []

    def _connect(flask_client):
        sio_client = socketio.test_client(app, namespace='/todos', flask_test_client=flask_client)
        clients.append(sio_client)
        return sio_client

    yield _connect

    for sio_client in clients:
        if sio_client.is_connected('/todos'):
            sio_client.disconnect(namespace='/todos')
