import pytest

from ultrascore import create_app
from ultrascore.state import MatchStore


@pytest.fixture
def store():
    return MatchStore()


@pytest.fixture
def app(store):
    app = create_app(store)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()
