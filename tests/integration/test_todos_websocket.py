"""
Integration tests for the /todos change stream namespace.
"""


def changes(sio_client):
    return [p['args'][0] for p in sio_client.get_received('/todos') if p['name'] == 'todo_change']


class TestTodosWebSocket:

    def test_anonymous_socket_rejected(self, client, socket_client_factory):
        sio_client = socket_client_factory(client)
        assert not sio_client.is_connected('/todos')

    def test_connect_joins_user_room(self, authenticated_client, socket_client_factory):
        sio_client = socket_client_factory(authenticated_client)
        assert sio_client.is_connected('/todos')

        received = sio_client.get_received('/todos')
        connected = [p for p in received if p['name'] == 'connected']
        assert connected[0]['args'][0]['room'] == f"user_{authenticated_client.user['id']}"

    def test_insert_delivered_to_owner_only(self, authenticated_client, make_client, socket_client_factory):
        other = make_client()
        mine = socket_client_factory(authenticated_client)
        theirs = socket_client_factory(other)
        mine.get_received('/todos')
        theirs.get_received('/todos')

        row = authenticated_client.post('/api/todos/', json={'text': 'Buy milk'}).get_json()['todo']

        events = changes(mine)
        assert len(events) == 1
        assert events[0]['eventType'] == 'INSERT'
        assert events[0]['table'] == 'todos'
        assert events[0]['new'] == row
        assert changes(theirs) == []

    def test_every_session_of_the_owner_receives_updates(self, authenticated_client, make_client,
                                                         socket_client_factory):
        second_session = make_client(email=authenticated_client.user['email'], register=False)
        first_socket = socket_client_factory(authenticated_client)
        second_socket = socket_client_factory(second_session)

        row = authenticated_client.post('/api/todos/', json={'text': 'A'}).get_json()['todo']
        authenticated_client.patch(f"/api/todos/{row['id']}", json={'completed': True})
        authenticated_client.delete(f"/api/todos/{row['id']}")

        for sio_client in (first_socket, second_socket):
            events = changes(sio_client)
            assert [e['eventType'] for e in events] == ['INSERT', 'UPDATE', 'DELETE']
            assert events[1]['new']['completed'] is True
            assert events[2]['old']['id'] == row['id']
            assert events[2]['new'] == {}

    def test_disconnect_stops_delivery(self, authenticated_client, socket_client_factory):
        sio_client = socket_client_factory(authenticated_client)
        sio_client.disconnect(namespace='/todos')
        assert not sio_client.is_connected('/todos')

        authenticated_client.post('/api/todos/', json={'text': 'A'})
        assert authenticated_client.get('/api/todos/').status_code == 200
