"""
East Village Everything — User Service Tests
==============================================

What we test:
    ✅ Passwords are stored hashed and verified by authenticate()
    ✅ Emails are case-insensitive
    ✅ Duplicate emails are rejected on create and update
    ✅ Password change, delete, not-found reporting
"""

from uuid import uuid4

import pytest

from app.exceptions import ValidationError
from app.models.user import User
from app.schemas.user import UserCreate, UserUpdate
from app.services.user_service import UserService, hash_password, verify_password


def test_hash_roundtrip():
    hashed = hash_password("changeme123")
    assert hashed != "changeme123"
    assert verify_password(hashed, "changeme123")
    assert not verify_password(hashed, "changeme124")


class TestUserService:

    def setup_method(self):
        self.service = UserService()

    async def _create(self, db, email="Owner@Example.com", password="s3cret-pass"):
        return await self.service.create(
            db, UserCreate(email=email, password=password, name="Owner")
        )

    @pytest.mark.asyncio
    async def test_create_lowercases_email_and_hides_hash(self, db_session):
        user = await self._create(db_session)

        assert user.email == "owner@example.com"
        assert not hasattr(user, "password_hash")
        row = await self.service.find_by_email(db_session, "OWNER@example.com")
        assert isinstance(row, User)
        assert row.password_hash != "s3cret-pass"

    @pytest.mark.asyncio
    async def test_duplicate_email(self, db_session):
        await self._create(db_session)
        with pytest.raises(ValidationError):
            await self._create(db_session, email="owner@example.com")

    @pytest.mark.asyncio
    async def test_authenticate(self, db_session):
        user = await self._create(db_session)

        ok = await self.service.authenticate(db_session, " Owner@example.com ", "s3cret-pass")
        wrong = await self.service.authenticate(db_session, "owner@example.com", "nope")
        unknown = await self.service.authenticate(db_session, "who@example.com", "s3cret-pass")

        assert ok.id == user.id
        assert wrong is None
        assert unknown is None

    @pytest.mark.asyncio
    async def test_update_profile(self, db_session):
        user = await self._create(db_session)
        other = await self._create(db_session, email="other@example.com")

        renamed = await self.service.update(db_session, user.id, UserUpdate(name="Manager"))
        assert renamed.name == "Manager"
        assert renamed.email == user.email

        with pytest.raises(ValidationError):
            await self.service.update(db_session, other.id, UserUpdate(email="owner@example.com"))

        assert await self.service.update(db_session, uuid4(), UserUpdate(name="X")) is None

    @pytest.mark.asyncio
    async def test_update_password(self, db_session):
        user = await self._create(db_session)

        assert await self.service.update_password(db_session, user.id, "new-password-1")

        assert await self.service.authenticate(db_session, user.email, "new-password-1")
        assert await self.service.authenticate(db_session, user.email, "s3cret-pass") is None
        assert await self.service.update_password(db_session, uuid4(), "whatever1") is False

    @pytest.mark.asyncio
    async def test_list_and_delete(self, db_session):
        user = await self._create(db_session)

        assert [u.email for u in await self.service.list(db_session)] == [user.email]
        assert await self.service.delete(db_session, user.id) is True
        assert await self.service.get(db_session, user.id) is None
        assert await self.service.delete(db_session, user.id) is False
