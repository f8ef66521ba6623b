def test_index(client):
    res = client.get('/')
    assert res.status_code == 200
    assert 'message' in res.get_json()


def test_rooms_empty(client):
    res = client.get('/api/rooms')
    assert res.status_code == 200
    assert res.get_json() == {'rooms': []}


def test_rooms_reflect_socket_state(client, duo):
    a, b = duo
    a.emit('setReadyState', {'ready': True})
    data = client.get('/api/rooms').get_json()
    assert data['rooms'] == [{'id': 'arena1', 'playerCount': 2, 'readyCount': 1, 'capacity': 2}]
