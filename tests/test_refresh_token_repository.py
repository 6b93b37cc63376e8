"""Durable refresh-token store."""
from datetime import datetime, timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from family_auth.models.refresh_token import RefreshToken


def _later(**kwargs):
    return datetime.utcnow() + timedelta(**kwargs)


def test_create_and_find(refresh_token_repository, make_user):
    user = make_user()
    created = refresh_token_repository.create(user.id, "a" * 64, _later(days=1), "Mozilla/5.0")

    found = refresh_token_repository.find_by_user_id_and_token_hash(user.id, "a" * 64)
    assert found is not None
    assert found.id == created.id
    assert found.device_info == "Mozilla/5.0"
    assert refresh_token_repository.find_by_user_id_and_token_hash(user.id, "b" * 64) is None


def test_duplicate_user_and_hash_is_rejected(refresh_token_repository, make_user):
    user = make_user()
    refresh_token_repository.create(user.id, "a" * 64, _later(days=1))

    with pytest.raises(IntegrityError):
        refresh_token_repository.create(user.id, "a" * 64, _later(days=1))


def test_find_by_user_id_lists_only_that_user(refresh_token_repository, make_user):
    alice = make_user("alice@example.com")
    bob = make_user("bob@example.com")
    refresh_token_repository.create(alice.id, "a" * 64, _later(days=1))
    refresh_token_repository.create(alice.id, "b" * 64, _later(days=1))
    refresh_token_repository.create(bob.id, "c" * 64, _later(days=1))

    hashes = {r.token_hash for r in refresh_token_repository.find_by_user_id(alice.id)}
    assert hashes == {"a" * 64, "b" * 64}


def test_delete_by_user_id_and_token_hash(refresh_token_repository, make_user):
    user = make_user()
    refresh_token_repository.create(user.id, "a" * 64, _later(days=1))
    refresh_token_repository.create(user.id, "b" * 64, _later(days=1))

    refresh_token_repository.delete_by_user_id_and_token_hash(user.id, "a" * 64)
    # Deleting something already gone is a no-op
    refresh_token_repository.delete_by_user_id_and_token_hash(user.id, "a" * 64)

    remaining = refresh_token_repository.find_by_user_id(user.id)
    assert [r.token_hash for r in remaining] == ["b" * 64]


def test_delete_all_by_user_id(refresh_token_repository, make_user):
    alice = make_user("alice@example.com")
    bob = make_user("bob@example.com")
    refresh_token_repository.create(alice.id, "a" * 64, _later(days=1))
    refresh_token_repository.create(alice.id, "b" * 64, _later(days=1))
    refresh_token_repository.create(bob.id, "c" * 64, _later(days=1))

    assert refresh_token_repository.delete_all_by_user_id(alice.id) == 2
    assert refresh_token_repository.delete_all_by_user_id(alice.id) == 0
    assert len(refresh_token_repository.find_by_user_id(bob.id)) == 1


def test_delete_expired(refresh_token_repository, db_session, make_user):
    user = make_user()
    refresh_token_repository.create(user.id, "a" * 64, _later(days=-1))
    refresh_token_repository.create(user.id, "b" * 64, _later(seconds=-1))
    refresh_token_repository.create(user.id, "c" * 64, _later(days=1))

    assert refresh_token_repository.delete_expired() == 2
    assert [r.token_hash for r in db_session.query(RefreshToken).all()] == ["c" * 64]
