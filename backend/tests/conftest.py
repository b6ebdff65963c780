import os
import sys
import pytest

# Ensure the backend root (containing the `santa_quiz` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from santa_quiz import create_app, db, socketio
from santa_quiz.services.quiz.errors import TransientFetchError
from santa_quiz.services.quiz.round_state import Question


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    QUESTION_SOURCE_URL = 'http://question-source.test/generate-question'
    QUESTION_SOURCE_API_KEY = None
    QUESTION_SOURCE_TIMEOUT_SEC = None
    TOTAL_QUESTIONS = 10
    TICK_INTERVAL_SEC = 0.1
    REVEAL_DELAY_SEC = 1.5
    ADVANCE_DELAY_SEC = 2.0
    LEADERBOARD_LIMIT = 50
    ALLOW_REPLAY_FROM_DEVICE = False
    ROUND_RETENTION_SEC = 300.0


def make_question(correct_index=1, topic='Arrays'):
    return Question(
        text='What is the index of the first element of a Java array?',
        options=('1', '0', '-1', 'It depends'),
        correct_index=correct_index,
        explanation='Java arrays are zero-indexed.',
        topic=topic,
    )


class FakeQuestionSource:
    """Returns the same question every time and records each request."""

    def __init__(self, question=None):
        self.question = question or make_question()
        self.calls = []

    def fetch(self, difficulty, question_number):
        self.calls.append((difficulty, question_number))
        return self.question


class FailingQuestionSource:
    def __init__(self):
        self.calls = []

    def fetch(self, difficulty, question_number):
        self.calls.append((difficulty, question_number))
        raise TransientFetchError('question source returned HTTP 500')


class RecordingStore:
    def __init__(self, error=None):
        self.inserted = []
        self.error = error

    def insert(self, attempt):
        self.inserted.append(attempt)
        if self.error is not None:
            raise self.error
        return attempt


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    application.extensions['question_source'] = FakeQuestionSource()
    with application.app_context():
        # Ensure models are imported so tables are created
        import santa_quiz.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()
    from santa_quiz.api.rounds import _rounds
    _rounds.clear()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def clock(flask_app):
    return flask_app.extensions['quiz_scheduler']


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
    except Exception:
        pass
