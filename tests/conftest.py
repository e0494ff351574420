"""Shared fixtures."""

import pytest

from pitchmatch.domain.models import AuthContext
from pitchmatch.logging import clear_log_context
from pitchmatch.persistence import close_database, get_session, init_database

from tests.helpers import USER_ID


@pytest.fixture(autouse=True)
def clean_log_context():
    clear_log_context()
    yield
    clear_log_context()


@pytest.fixture
def db_url(tmp_path):
    return f"sqlite:///{tmp_path / 'pitchmatch.db'}"


@pytest.fixture
def db(db_url):
    """Initialized file-backed SQLite database, closed after the test."""
    init_database(db_url)
    yield db_url
    close_database()


@pytest.fixture
def session(db):
    with get_session() as session:
        yield session


@pytest.fixture
def auth():
    return AuthContext(user_id=USER_ID, email="owner@example.com")
