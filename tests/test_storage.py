"""Tests for DBStorage's refresh token store on in-memory SQLite."""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from models import DBStorage
from models.user import User
from utils.exceptions import DuplicateToken, NotFound, StoreUnavailable


@pytest.fixture
def storage():
    storage = DBStorage("sqlite:///:memory:")
    storage.reload()
    yield storage
    storage.close()


@pytest.fixture
def user(storage):
    user = User(email="walt@example.com", hashed_password="x")
    storage.new(user)
    storage.save()
    return user


def test_get_user_by_email(storage, user):
    assert storage.get_user_by_email("walt@example.com").id == user.id
    with pytest.raises(NotFound):
        storage.get_user_by_email("jesse@example.com")


def test_insert_and_lookup(storage, user):
    expires = datetime(2030, 1, 1, tzinfo=timezone.utc)
    storage.insert_refresh_token("a" * 64, user.id, expires)
    record = storage.get_refresh_token("a" * 64)
    assert record.user_id == user.id
    assert record.expires_at == expires
    assert record.revoked_at is None


def test_duplicate_token(storage, user):
    expires = datetime.now(timezone.utc) + timedelta(hours=1)
    storage.insert_refresh_token("a" * 64, user.id, expires)
    with pytest.raises(DuplicateToken):
        storage.insert_refresh_token("a" * 64, user.id, expires)


def test_missing_user_is_not_a_duplicate(storage):
    expires = datetime.now(timezone.utc) + timedelta(hours=1)
    with pytest.raises(IntegrityError):
        storage.insert_refresh_token("a" * 64, "00000000-0000-0000-0000-000000000000", expires)


def test_lookup_unknown(storage):
    with pytest.raises(NotFound):
        storage.get_refresh_token("b" * 64)


def test_revoke_is_idempotent(storage, user):
    storage.insert_refresh_token("a" * 64, user.id, datetime.now(timezone.utc) + timedelta(hours=1))
    storage.revoke_refresh_token("a" * 64)
    first = storage.get_refresh_token("a" * 64).revoked_at
    assert first is not None
    assert first.tzinfo is not None

    storage.revoke_refresh_token("a" * 64)
    assert storage.get_refresh_token("a" * 64).revoked_at == first


def test_revoke_unknown_is_noop(storage):
    storage.revoke_refresh_token("c" * 64)


def test_connectivity_errors_become_store_unavailable(storage):
    session = storage.get_session()
    error = OperationalError("SELECT 1", {}, Exception("connection refused"))
    with patch.object(session, "query", side_effect=error):
        with pytest.raises(StoreUnavailable):
            storage.get_user_by_email("walt@example.com")
