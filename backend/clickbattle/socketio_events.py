from flask import current_app
from flask_socketio import join_room, leave_room, emit
from clickbattle import socketio

NAMESPACE = '/ws'
GAME_ROOM = 'game'


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_subscribe(data=None):
    # Clients subscribe once and then receive state_update pushes
    join_room(GAME_ROOM)
    result = current_app.extensions['game_service'].get_state()
    emit('state', result.value)


def handle_unsubscribe(data=None):
    leave_room(GAME_ROOM)
    emit('left', {'room': GAME_ROOM})


def handle_ping(data=None):
    emit('pong', data or {})


def broadcast_state(service) -> None:
    """Push the current read-model to every subscribed client."""
    result = service.get_state()
    socketio.emit('state_update', result.value, to=GAME_ROOM, namespace=NAMESPACE)


def register_socketio_handlers() -> None:
    """Register Socket.IO event handlers on the '/ws' namespace."""
    socketio.on_event('connect', handle_connect, namespace=NAMESPACE)
    socketio.on_event('subscribe', handle_subscribe, namespace=NAMESPACE)
    socketio.on_event('unsubscribe', handle_unsubscribe, namespace=NAMESPACE)
    socketio.on_event('ping', handle_ping, namespace=NAMESPACE)
