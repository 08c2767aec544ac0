import os
import sys
import pytest

# Ensure the backend root (containing the `liarsdice` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from liarsdice import create_app, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ORIGINS = ['*']
    SOCKETIO_NAMESPACE = '/'
    STARTING_DICE = 4
    MIN_PLAYERS = 2
    MAX_NAME_LENGTH = 24
    REVEAL_DURATION_SEC = 0
    GAME_OVER_DURATION_SEC = 0


class OneDieConfig(TestConfig):
    STARTING_DICE = 1


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def one_die_app():
    application = create_app(OneDieConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def gateway(flask_app):
    return flask_app.extensions['liarsdice']


@pytest.fixture()
def make_sio_client(flask_app):
    created = []

    def _make():
        test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        created.append(test_client)
        return test_client

    yield _make
    for test_client in created:
        try:
            if test_client.is_connected():
                test_client.disconnect()
        except Exception:
            pass


class RecordingSocketIO:
    """Stands in for the Socket.IO server: background tasks are queued, not run."""

    def __init__(self):
        self.tasks = []
        self.slept = []

    def start_background_task(self, target, *args):
        self.tasks.append((target, args))

    def sleep(self, seconds):
        self.slept.append(seconds)

    def run_pending(self):
        tasks, self.tasks = self.tasks, []
        for target, args in tasks:
            target(*args)


@pytest.fixture()
def recording_sio():
    return RecordingSocketIO()


@pytest.fixture()
def deferred_timers(gateway, recording_sio):
    """Hold the gateway's timers until ``run_pending`` is called."""
    gateway.scheduler.socketio = recording_sio
    gateway.scheduler.inline = False
    return recording_sio
