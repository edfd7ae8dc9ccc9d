"""
East Village Everything — Unit of Work Tests
==============================================

What we test:
    ✅ session_scope commits on success
    ✅ session_scope rolls back everything when the block raises
    ✅ SQLite engines enforce foreign keys
"""

import pytest
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from app import database
from app.schemas.tag import TagCreate
from app.services.tag_service import tag_service


@pytest.fixture
def scoped_to_test_db(monkeypatch, session_factory):
    monkeypatch.setattr(database, "async_session_factory", session_factory)


class TestSessionScope:

    @pytest.mark.asyncio
    async def test_commits(self, scoped_to_test_db, session_factory):
        async with database.session_scope() as db:
            await tag_service.create(db, TagCreate(value="bars", display="Bars"))

        async with session_factory() as other:
            assert await tag_service.find_by_value(other, "bars") is not None

    @pytest.mark.asyncio
    async def test_rolls_back(self, scoped_to_test_db, session_factory):
        with pytest.raises(RuntimeError):
            async with database.session_scope() as db:
                food = await tag_service.create(db, TagCreate(value="food", display="Food"))
                await tag_service.create(
                    db, TagCreate(value="pizza", display="Pizza", parent_tag_id=food.id)
                )
                raise RuntimeError("abort")

        async with session_factory() as other:
            assert await tag_service.list(other) == []


@pytest.mark.asyncio
async def test_sqlite_foreign_keys_enforced(db_engine):
    async with db_engine.connect() as conn:
        with pytest.raises(IntegrityError):
            await conn.execute(
                text(
                    "INSERT INTO place_tags (place_id, tag_id) "
                    "VALUES ('00000000000000000000000000000001', '00000000000000000000000000000002')"
                )
            )
