import os
import sys
import pytest

# Ensure the backend root (containing the `clickbattle` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from clickbattle import create_app, socketio
from clickbattle.services.game import GameService
from clickbattle.services.game.models import Phase


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ORIGINS = ['http://localhost:3000']


class FakeClock:
    """Millisecond clock that only moves when a test says so."""

    def __init__(self, start=1_000_000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def service(clock):
    return GameService(clock=clock)


@pytest.fixture()
def keep_alive(service, clock):
    """Advance time in small steps, heartbeating every player so nobody idles out."""
    def _keep_alive(total_ms, step_ms=1000):
        elapsed = 0
        while elapsed < total_ms:
            step = min(step_ms, total_ms - elapsed)
            clock.advance(step)
            elapsed += step
            for player_id in list(service.state.players):
                service.heartbeat(player_id)
    return _keep_alive


@pytest.fixture()
def start_game(service, keep_alive):
    """Join the given players and run the warmup out; returns name -> player id."""
    def _start(team_a=('Alice',), team_b=('Bob',)):
        ids = {}
        for name in team_a:
            ids[name] = service.join(name, 'teamA').value['playerId']
        for name in team_b:
            ids[name] = service.join(name, 'teamB').value['playerId']
        keep_alive(service.warmup_duration_ms)
        assert service.state.phase == Phase.ACTIVE
        return ids
    return _start


@pytest.fixture()
def flask_app(clock):
    application = create_app(TestConfig, clock=clock)
    with application.app_context():
        yield application


@pytest.fixture()
def app_service(flask_app):
    return flask_app.extensions['game_service']


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except RuntimeError:
        pass
