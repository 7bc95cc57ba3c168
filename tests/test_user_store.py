"""
Tests for the user store (credential persistence).

These verify the storage-level invariants directly against the database:
  - The stored hash is never the plaintext and verifies against it
  - Username and email collisions raise DuplicateError and write nothing
  - Usernames are case-sensitive
  - Only update_password() produces a new hash
  - Listing is newest-first; deletion is immediate
"""

import uuid

import pytest

from book_api.exceptions import DuplicateError, NotFoundError
from book_api.models.user import Role
from book_api.services import user_store


async def _create(db, hasher, **overrides):
    fields = {
        "username": "alice",
        "email": "a@x.com",
        "password": "Abc123!",
        "full_name": "Alice",
    }
    fields.update(overrides)
    user = await user_store.create_user(db, hasher, **fields)
    await db.commit()
    return user


class TestCreateUser:

    async def test_stores_hash_not_plaintext(self, db_session, hasher):
        user = await _create(db_session, hasher)

        assert user.password_hash != "Abc123!"
        assert hasher.verify("Abc123!", user.password_hash)
        assert user.role == Role.USER
        assert user.created_at is not None
        assert user.updated_at is not None

    async def test_duplicate_username_rejected(self, db_session, hasher):
        await _create(db_session, hasher)

        with pytest.raises(DuplicateError) as exc_info:
            await user_store.create_user(
                db_session, hasher,
                username="alice", email="other@x.com",
                password="Abc123!", full_name="Other",
            )
        assert exc_info.value.detail == "Username or email already exists"
        assert await user_store.count_users(db_session) == 1

    async def test_duplicate_email_rejected(self, db_session, hasher):
        await _create(db_session, hasher)

        with pytest.raises(DuplicateError):
            await user_store.create_user(
                db_session, hasher,
                username="bob", email="a@x.com",
                password="Abc123!", full_name="Bob",
            )
        assert await user_store.find_by_username(db_session, "bob") is None
        assert await user_store.count_users(db_session) == 1

    async def test_usernames_are_case_sensitive(self, db_session, hasher):
        await _create(db_session, hasher)
        await _create(db_session, hasher, username="Alice", email="A@x.com")

        assert await user_store.count_users(db_session) == 2
        found = await user_store.find_by_username(db_session, "Alice")
        assert found.email == "A@x.com"


class TestLookups:

    async def test_find_by_username_and_id(self, db_session, hasher):
        user = await _create(db_session, hasher)

        assert (await user_store.find_by_username(db_session, "alice")).id == user.id
        assert (await user_store.find_by_id(db_session, user.id)).username == "alice"

    async def test_unknown_user_returns_none(self, db_session):
        assert await user_store.find_by_username(db_session, "nobody") is None
        assert await user_store.find_by_id(db_session, uuid.uuid4()) is None

    async def test_list_is_newest_first(self, db_session, hasher):
        await _create(db_session, hasher, username="first", email="1@x.com")
        await _create(db_session, hasher, username="second", email="2@x.com")
        await _create(db_session, hasher, username="third", email="3@x.com")

        users = await user_store.list_users(db_session)
        assert [u.username for u in users] == ["third", "second", "first"]


class TestUpdates:

    async def test_update_profile_keeps_password_hash(self, db_session, hasher):
        user = await _create(db_session, hasher)
        original_hash = user.password_hash

        await user_store.update_profile(db_session, user, role=Role.ADMIN, full_name="Alice A.")

        assert user.role == Role.ADMIN
        assert user.full_name == "Alice A."
        assert user.password_hash == original_hash

    async def test_update_profile_rejects_password_field(self, db_session, hasher):
        user = await _create(db_session, hasher)

        with pytest.raises(ValueError):
            await user_store.update_profile(db_session, user, password_hash="plaintext")

    async def test_update_profile_email_collision(self, db_session, hasher):
        await _create(db_session, hasher)
        bob = await _create(db_session, hasher, username="bob", email="b@x.com")

        with pytest.raises(DuplicateError):
            await user_store.update_profile(db_session, bob, email="a@x.com")

    async def test_update_password_rehashes(self, db_session, hasher):
        user = await _create(db_session, hasher)
        original_hash = user.password_hash

        await user_store.update_password(db_session, hasher, user, "N3w-secret!")

        assert user.password_hash != original_hash
        assert hasher.verify("N3w-secret!", user.password_hash)
        assert not hasher.verify("Abc123!", user.password_hash)

    async def test_update_profile_touches_updated_at(self, db_session, hasher):
        user = await _create(db_session, hasher)
        created_at, original = user.created_at, user.updated_at

        await user_store.update_profile(db_session, user, full_name="Alice A.")
        await db_session.commit()

        assert user.updated_at > original
        assert user.created_at == created_at

    async def test_update_password_touches_updated_at(self, db_session, hasher):
        user = await _create(db_session, hasher)
        original = user.updated_at

        await user_store.update_password(db_session, hasher, user, "N3w-secret!")
        await db_session.commit()

        assert user.updated_at > original


class TestDelete:

    async def test_delete_removes_user(self, db_session, hasher):
        user = await _create(db_session, hasher)

        await user_store.delete_user(db_session, user.id)

        assert await user_store.find_by_id(db_session, user.id) is None

    async def test_delete_unknown_user(self, db_session):
        with pytest.raises(NotFoundError):
            await user_store.delete_user(db_session, uuid.uuid4())
