def test_socket_connect_and_join(sio_client):
    # Ensure we are connected to /ws
    if not sio_client.is_connected('/ws'):
        sio_client.connect(namespace='/ws')
    assert sio_client.is_connected('/ws')

    # Flush any initial events
    try:
        sio_client.get_received('/ws')
    except Exception:
        pass

    # Join a round room and expect a joined ack
    sio_client.emit('join_round', {'round_id': 'abc'}, namespace='/ws')
    received = sio_client.get_received('/ws')
    assert any(pkt['name'] == 'joined' for pkt in received)


def test_join_round_requires_id(sio_client):
    sio_client.get_received('/ws')
    sio_client.emit('join_round', {}, namespace='/ws')
    received = sio_client.get_received('/ws')
    assert any(pkt['name'] == 'error' for pkt in received)


def test_round_updates_and_ticks_are_pushed(sio_client, client, clock):
    state = client.post('/api/rounds', json={'name': 'Holly', 'difficulty': 'low', 'device_id': 'd9'}).get_json()
    round_id = state['round_id']
    sio_client.emit('join_round', {'round_id': round_id}, namespace='/ws')
    received = sio_client.get_received('/ws')
    # Late joiner gets the current state
    assert any(p['name'] == 'round_update' and p['args'][0]['status'] == 'active' for p in received)

    clock.advance(0.5)
    ticks = [p for p in sio_client.get_received('/ws') if p['name'] == 'timer_tick']
    assert len(ticks) == 5
    assert ticks[-1]['args'][0]['round_id'] == round_id
    assert ticks[-1]['args'][0]['display'] == 4

    client.post(f'/api/rounds/{round_id}/answer', json={'option_index': 1})
    updates = [p['args'][0] for p in sio_client.get_received('/ws') if p['name'] == 'round_update']
    assert updates[-1]['status'] == 'evaluating'
    assert updates[-1]['mood'] == 'happy'


def test_leaderboard_update_pushed_on_insert(sio_client, client, clock):
    sio_client.emit('join_leaderboard', {}, namespace='/ws')
    sio_client.get_received('/ws')
    round_id = client.post('/api/rounds', json={'name': 'Holly', 'difficulty': 'low', 'device_id': 'd9'}).get_json()['round_id']
    clock.advance(10 * 6.0)
    assert client.get(f'/api/rounds/{round_id}').get_json()['status'] == 'finished'
    received = sio_client.get_received('/ws')
    assert any(p['name'] == 'leaderboard_update' for p in received)


def test_ping(sio_client):
    sio_client.get_received('/ws')
    sio_client.emit('ping', {'n': 1}, namespace='/ws')
    received = sio_client.get_received('/ws')
    assert any(p['name'] == 'pong' and p['args'][0] == {'n': 1} for p in received)
