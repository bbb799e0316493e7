import os

# Must be set before app modules build the engine
os.environ["ENV"] = "test"
os.environ.setdefault("TEST_DATABASE_URL", "sqlite+pysqlite:///:memory:")

from unittest.mock import MagicMock  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

import app.models  # noqa: E402,F401
from app.adapters.base import BaseNotifier, NotifyResult  # noqa: E402
from app.db import Base, SessionLocal, engine, get_db  # noqa: E402
from app.main import create_app  # noqa: E402
from app.routers.utils.dependencies import get_notifier  # noqa: E402

pytest_plugins = [
    "tests.fixtures.bot_fixtures",
    "tests.fixtures.flow_fixtures",
    "tests.fixtures.menu_fixtures",
]


@pytest.fixture(scope="function")
def db():
    """Fresh schema per test on the test database."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def notifier():
    """Notifier double that records calls and always reports delivery."""
    mock = MagicMock(spec=BaseNotifier)
    mock.notify.return_value = NotifyResult(delivered=True)
    return mock


@pytest.fixture
def client(db, notifier):
    """Client with db and notifier overrides."""
    app = create_app(testing=True)

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
