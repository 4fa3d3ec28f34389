def drain(sio_client):
    return sio_client.get_received('/ws')


def event_names(packets):
    return [pkt['name'] for pkt in packets]


def test_socket_connect(sio_client):
    assert sio_client.is_connected('/ws')
    assert 'connected' in event_names(drain(sio_client))


def test_subscribe_sends_current_state(sio_client, client):
    client.post('/api/join', json={'name': 'Alice', 'team': 'teamA'})
    drain(sio_client)

    sio_client.emit('subscribe', namespace='/ws')
    received = drain(sio_client)
    states = [pkt for pkt in received if pkt['name'] == 'state']
    assert len(states) == 1
    state = states[0]['args'][0]
    assert state['phase'] == 'waiting'
    assert state['teamSizes'] == {'teamA': 1, 'teamB': 0}


def test_mutations_broadcast_state_updates(sio_client, client):
    sio_client.emit('subscribe', namespace='/ws')
    drain(sio_client)

    alice = client.post('/api/join', json={'name': 'Alice', 'team': 'teamA'}).get_json()['playerId']
    client.post('/api/click', json={'playerId': alice})
    updates = [pkt['args'][0] for pkt in drain(sio_client) if pkt['name'] == 'state_update']
    assert len(updates) == 2
    assert updates[-1]['scores']['teamA'] == 1.0

    client.post('/api/reset')
    updates = [pkt['args'][0] for pkt in drain(sio_client) if pkt['name'] == 'state_update']
    assert updates[-1]['phase'] == 'waiting'
    assert updates[-1]['teamSizes'] == {'teamA': 0, 'teamB': 0}


def test_rejected_requests_do_not_broadcast(sio_client, client):
    sio_client.emit('subscribe', namespace='/ws')
    drain(sio_client)

    client.post('/api/join', json={'name': '', 'team': 'teamA'})
    client.post('/api/click', json={'playerId': 'ghost'})
    assert 'state_update' not in event_names(drain(sio_client))


def test_unsubscribed_clients_stop_receiving_updates(sio_client, client):
    sio_client.emit('subscribe', namespace='/ws')
    sio_client.emit('unsubscribe', namespace='/ws')
    assert 'left' in event_names(drain(sio_client))

    client.post('/api/join', json={'name': 'Alice', 'team': 'teamA'})
    assert 'state_update' not in event_names(drain(sio_client))


def test_ping_pong(sio_client):
    drain(sio_client)
    sio_client.emit('ping', {'n': 1}, namespace='/ws')
    received = drain(sio_client)
    pongs = [pkt for pkt in received if pkt['name'] == 'pong']
    assert pongs and pongs[0]['args'][0] == {'n': 1}
