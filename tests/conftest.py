import os
import sys
import pytest

# Ensure the project root (containing the `guessage` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from guessage import create_app, db
from guessage.services.age_oracle import age_oracle
from guessage.services.names import FileNamePool

AGES = {
    'Ann': 64,
    'Bob': 30,
    'Cleo': 25,
    'Dan': 45,
    'Eve': 18,
}


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    AGE_API_URL = 'https://agify.test'
    AGE_API_COUNTRY = None
    AGE_API_TIMEOUT_SEC = 1
    NAME_SOURCE = 'file'
    NAMES_FILE = os.path.join(PROJECT_ROOT, 'guessage', 'static', 'valid_names.txt')
    NAME_RETRY_LIMIT = 5
    LEADERBOARD_SIZE = 5
    LOG_LEVEL = 'DEBUG'


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import guessage.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


class StubAges:
    def __init__(self, table):
        self.table = dict(table)
        self.calls = []

    def lookup(self, name):
        self.calls.append(name)
        return self.table.get(name)


@pytest.fixture()
def ages(monkeypatch):
    """Stub the age API with a name -> age table; unknown names have no age."""
    stub = StubAges(AGES)
    monkeypatch.setattr(age_oracle, 'lookup', stub.lookup)
    return stub


@pytest.fixture()
def names_file(tmp_path):
    path = tmp_path / 'names.txt'
    path.write_text('\n'.join(n for n in AGES) + '\n', encoding='utf-8')
    return path


@pytest.fixture()
def known_names(flask_app, names_file):
    """Serve games built from the five names in AGES."""
    flask_app.extensions['name_source'] = FileNamePool(str(names_file))
    return list(AGES)
