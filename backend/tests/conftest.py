import os
import sys
import pytest

# Ensure the backend root (containing the `boardgame` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from boardgame import create_app, db
from boardgame.services.games import expiry


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    BCRYPT_LOG_ROUNDS = 4
    DEFAULT_TIME_LIMIT_SEC = 300
    FALLBACK_TIME_LIMIT_SEC = 10
    MAX_PLAYERS = 4
    CHAT_HISTORY_LIMIT = 50
    CHAT_MAX_LENGTH = 280
    PRIZE_CARD_SEED = None
    CORS_ORIGINS = ['http://localhost:5173']


class ScriptedRng:
    """Randomness source returning preset draw-pool indexes in order."""

    def __init__(self, *picks):
        self.picks = list(picks)
        self.calls = []

    def randrange(self, n):
        self.calls.append(n)
        return self.picks.pop(0)


class FakeClock:
    def __init__(self, start=1_700_000_000_000):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import boardgame.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def clock(monkeypatch):
    fake = FakeClock()
    monkeypatch.setattr(expiry, 'now_ms', fake)
    return fake


@pytest.fixture()
def make_user(flask_app):
    from boardgame.models import User

    def _make(username, role='PLAYER'):
        user = User(username=username, role=role)
        user.set_password('password')
        db.session.add(user)
        db.session.commit()
        return user
    return _make


@pytest.fixture()
def make_questions(flask_app):
    from boardgame.models import Question

    def _make(*answers):
        created = []
        for i, answer in enumerate(answers):
            q = Question(content=f'Question {i + 1}?', correct_answer=answer, level=1)
            db.session.add(q)
            created.append(q)
        db.session.commit()
        return created
    return _make
