"""
East Village Everything — Place Service Tests
===============================================

What we test:
    ✅ Field normalization on create and update (phone, <br/>, empty → NULL)
    ✅ Tag associations: replaced only when `tags` is sent, unknown values ignored
    ✅ Partial updates touch only the supplied columns
    ✅ Listing by tag, admin sorting, edit-form view
    ✅ Delete and not-found reporting
"""

import asyncio
from uuid import uuid4

import pytest
from sqlalchemy.exc import OperationalError

from app.exceptions import DatabaseError
from app.schemas.place import PlaceCreate, PlaceUpdate
from app.schemas.tag import TagCreate
from app.services.place_service import PlaceService
from app.services.tag_service import tag_service


@pytest.fixture
def sample_place_data():
    return {
        "name": "Sophie's",
        "address": "509 E 5th St",
        "phone": "(212) 228-5680",
        "url": "",
        "specials": "Mon-Fri 4-8\r\n$4 drafts",
        "categories": "Bars",
        "notes": None,
        "tags": ["bars", "happy-hour"],
    }


async def seed_tags(db, *values):
    for i, value in enumerate(values):
        await tag_service.create(db, TagCreate(value=value, display=value.title(), sort_order=i))


class TestPlaceCreate:

    def setup_method(self):
        self.service = PlaceService()

    @pytest.mark.asyncio
    async def test_normalizes_fields(self, db_session, sample_place_data):
        await seed_tags(db_session, "bars", "happy-hour")

        place = await self.service.create(db_session, PlaceCreate(**sample_place_data))

        assert place.name == "Sophie's"
        assert place.phone == "2122285680"
        assert place.url is None
        assert place.specials == "Mon-Fri 4-8<br/>$4 drafts"
        assert place.notes is None
        assert place.tags == ["bars", "happy-hour"]

    @pytest.mark.asyncio
    async def test_bad_phone_is_dropped(self, db_session):
        place = await self.service.create(db_session, PlaceCreate(name="X", phone="555-1234"))
        assert place.phone is None

    @pytest.mark.asyncio
    async def test_unknown_tags_ignored(self, db_session):
        await seed_tags(db_session, "bars")

        place = await self.service.create(
            db_session, PlaceCreate(name="Lucy's", tags=["bars", "no-such-tag"])
        )

        assert place.tags == ["bars"]

    @pytest.mark.asyncio
    async def test_tags_follow_tag_sort_order(self, db_session):
        await seed_tags(db_session, "music", "bars")

        place = await self.service.create(
            db_session, PlaceCreate(name="Nublu", tags=["bars", "music"])
        )

        assert place.tags == ["music", "bars"]

    @pytest.mark.asyncio
    async def test_database_failure_is_wrapped(self, mock_db_session):
        mock_db_session.flush.side_effect = OperationalError("INSERT", {}, Exception("locked"))

        with pytest.raises(DatabaseError):
            await self.service.create(mock_db_session, PlaceCreate(name="Anyway Cafe"))


class TestPlaceUpdate:

    def setup_method(self):
        self.service = PlaceService()

    @pytest.mark.asyncio
    async def test_missing_place_returns_none(self, db_session):
        assert await self.service.update(db_session, uuid4(), PlaceUpdate(name="X")) is None
        assert await self.service.update(db_session, uuid4(), PlaceUpdate()) is None

    @pytest.mark.asyncio
    async def test_name_only(self, db_session, sample_place_data):
        await seed_tags(db_session, "bars", "happy-hour")
        place = await self.service.create(db_session, PlaceCreate(**sample_place_data))

        updated = await self.service.update(
            db_session, place.id, PlaceUpdate(name="Sophie's Bar")
        )

        assert updated.name == "Sophie's Bar"
        assert updated.phone == place.phone
        assert updated.specials == place.specials
        assert updated.tags == place.tags
        assert updated.updated_at >= place.updated_at

    @pytest.mark.asyncio
    async def test_update_normalizes_like_create(self, db_session):
        place = await self.service.create(db_session, PlaceCreate(name="X"))

        updated = await self.service.update(
            db_session,
            place.id,
            PlaceUpdate(phone="212.555.0100", notes="cash only\nno reservations", url=""),
        )

        assert updated.phone == "2125550100"
        assert updated.notes == "cash only<br/>no reservations"
        assert updated.url is None

    @pytest.mark.asyncio
    async def test_empty_patch_leaves_row_alone(self, db_session):
        place = await self.service.create(db_session, PlaceCreate(name="X"))
        await asyncio.sleep(0.01)

        same = await self.service.update(db_session, place.id, PlaceUpdate())

        assert same.updated_at == place.updated_at

    @pytest.mark.asyncio
    async def test_tags_replaced_only_when_sent(self, db_session):
        await seed_tags(db_session, "bars", "music")
        place = await self.service.create(db_session, PlaceCreate(name="X", tags=["bars"]))

        kept = await self.service.update(db_session, place.id, PlaceUpdate(name="Y"))
        replaced = await self.service.update(db_session, place.id, PlaceUpdate(tags=["music"]))
        cleared = await self.service.update(db_session, place.id, PlaceUpdate(tags=[]))

        assert kept.tags == ["bars"]
        assert replaced.tags == ["music"]
        assert cleared.tags == []

    @pytest.mark.asyncio
    async def test_tags_only_keeps_timestamp(self, db_session):
        await seed_tags(db_session, "bars")
        place = await self.service.create(db_session, PlaceCreate(name="X"))
        await asyncio.sleep(0.01)

        updated = await self.service.update(db_session, place.id, PlaceUpdate(tags=["bars"]))

        assert updated.tags == ["bars"]
        assert updated.updated_at == place.updated_at


class TestPlaceReads:

    def setup_method(self):
        self.service = PlaceService()

    @pytest.mark.asyncio
    async def test_list_sorted_by_name(self, db_session):
        for name in ("Veselka", "Ace Bar", "Mona's"):
            await self.service.create(db_session, PlaceCreate(name=name))

        places = await self.service.list(db_session)

        assert [p.name for p in places] == ["Ace Bar", "Mona's", "Veselka"]

    @pytest.mark.asyncio
    async def test_list_by_tag(self, db_session):
        await seed_tags(db_session, "bars", "food")
        await self.service.create(db_session, PlaceCreate(name="Ace Bar", tags=["bars"]))
        await self.service.create(db_session, PlaceCreate(name="Veselka", tags=["food"]))
        await self.service.create(db_session, PlaceCreate(name="Mona's", tags=["bars", "food"]))

        bars = await self.service.list(db_session, tag="bars")
        nothing = await self.service.list(db_session, tag="no-such-tag")

        assert [p.name for p in bars] == ["Ace Bar", "Mona's"]
        assert [p.tags for p in bars] == [["bars"], ["bars", "food"]]
        assert nothing == []

    @pytest.mark.asyncio
    async def test_list_sorted_admin(self, db_session):
        for name in ("b place", "A place", "c place"):
            await self.service.create(db_session, PlaceCreate(name=name))

        asc = await self.service.list_sorted(db_session)
        desc = await self.service.list_sorted(db_session, sort_by="name", sort_order="desc")
        fallback = await self.service.list_sorted(db_session, sort_by="bogus")

        assert [p.name for p in asc] == ["A place", "b place", "c place"]
        assert [p.name for p in desc] == ["c place", "b place", "A place"]
        assert [p.name for p in fallback] == [p.name for p in asc]

    @pytest.mark.asyncio
    async def test_editable_restores_newlines(self, db_session):
        place = await self.service.create(
            db_session, PlaceCreate(name="X", specials="one\ntwo", notes=None)
        )

        editable = await self.service.editable(db_session, place.id)

        assert editable.specials == "one\ntwo"
        assert editable.notes == ""
        assert await self.service.editable(db_session, uuid4()) is None

    @pytest.mark.asyncio
    async def test_get_missing(self, db_session):
        assert await self.service.get(db_session, uuid4()) is None


class TestPlaceDelete:

    def setup_method(self):
        self.service = PlaceService()

    @pytest.mark.asyncio
    async def test_delete(self, db_session):
        await seed_tags(db_session, "bars")
        place = await self.service.create(db_session, PlaceCreate(name="X", tags=["bars"]))
        bars = await tag_service.find_by_value(db_session, "bars")

        assert await self.service.delete(db_session, place.id) is True
        assert await self.service.get(db_session, place.id) is None
        assert await tag_service.places_for_tag(db_session, bars.id) == []
        assert await self.service.delete(db_session, place.id) is False
