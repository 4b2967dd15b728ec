"""Shared pytest fixtures for Swiss Coin tests."""

import pytest

from swiss_coin.config import Settings
from swiss_coin.db import Database
from swiss_coin.people import PeopleService
from swiss_coin.service import TransactionService


@pytest.fixture
def settings(tmp_path):
    """Create settings pointing at a temporary database."""
    return Settings(database_path=tmp_path / "test.db")


@pytest.fixture
def db(settings):
    """Create a temporary database."""
    db = Database(settings.database_path)
    yield db
    db.close()


@pytest.fixture
def people(db):
    """Create a PeopleService instance."""
    return PeopleService(db)


@pytest.fixture
def service(settings, db):
    """Create a TransactionService instance."""
    return TransactionService(settings, db)


@pytest.fixture
def me(service):
    """The current user's Person record."""
    return service.identity.get_or_create()


@pytest.fixture
def alice(people):
    return people.add_person("Alice")


@pytest.fixture
def bob(people):
    return people.add_person("Bob", phone_number="+41 79 000 00 00")
