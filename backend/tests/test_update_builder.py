"""
East Village Everything — Partial Update Builder Tests
========================================================

What we test:
    ✅ Only supplied fields are assigned, in the declared field order
    ✅ updated_at is always appended last
    ✅ Explicit null/"" counts as supplied
    ✅ Transforms apply to supplied values only
    ✅ An empty patch has no changes
"""

from datetime import datetime, timezone

from app.schemas.place import PlaceUpdate
from app.schemas.tag import TagUpdate
from app.services.place_service import PLACE_TRANSFORMS, PLACE_UPDATE_FIELDS
from app.services.tag_service import TAG_UPDATE_FIELDS
from app.services.text import normalize_phone
from app.services.update_builder import UpdatePlan, plan_update

NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


class TestPlanUpdate:

    def test_single_field(self):
        plan = plan_update(PlaceUpdate(name="Mona's"), PLACE_UPDATE_FIELDS, now=NOW)
        assert plan.assignments == [("name", "Mona's"), ("updated_at", NOW)]
        assert plan.has_changes

    def test_field_order_follows_declaration_not_payload(self):
        patch = PlaceUpdate.model_validate({"notes": "x", "address": "1 Ave A", "name": "B"})
        plan = plan_update(patch, PLACE_UPDATE_FIELDS, now=NOW)
        assert plan.columns == ["name", "address", "notes", "updated_at"]

    def test_empty_patch_only_bumps_timestamp(self):
        plan = plan_update(PlaceUpdate(), PLACE_UPDATE_FIELDS, now=NOW)
        assert plan.assignments == [("updated_at", NOW)]
        assert not plan.has_changes

    def test_explicit_null_is_supplied(self):
        """Sending null for phone clears it; omitting phone leaves it alone."""
        plan = plan_update(PlaceUpdate(phone=None), PLACE_UPDATE_FIELDS, now=NOW)
        assert "phone" in plan
        assert plan.get("phone") is None

    def test_transforms_are_applied(self):
        plan = plan_update(
            PlaceUpdate(phone="(212) 555-0000", specials="a\nb"),
            PLACE_UPDATE_FIELDS,
            PLACE_TRANSFORMS,
            now=NOW,
        )
        assert plan.get("phone") == "2125550000"
        assert plan.get("specials") == "a<br/>b"

    def test_fields_outside_the_list_are_ignored(self):
        """tags is on PlaceUpdate but is not a column."""
        plan = plan_update(PlaceUpdate(tags=["bar"]), PLACE_UPDATE_FIELDS, now=NOW)
        assert not plan.has_changes

    def test_transform_only_for_named_fields(self):
        plan = plan_update(
            PlaceUpdate(name="5551234567"),
            PLACE_UPDATE_FIELDS,
            {"phone": normalize_phone},
            now=NOW,
        )
        assert plan.get("name") == "5551234567"

    def test_parent_cleared_on_tag(self):
        plan = plan_update(TagUpdate(parent_tag_id=None), TAG_UPDATE_FIELDS, now=NOW)
        assert plan.columns == ["parent_tag_id", "updated_at"]
        assert plan.get("parent_tag_id") is None

    def test_defaults_to_current_time(self):
        before = datetime.now(timezone.utc)
        plan = plan_update(TagUpdate(display="Bars"), TAG_UPDATE_FIELDS)
        assert plan.get("updated_at") >= before


class TestUpdatePlan:

    def test_values_keep_order(self):
        plan = UpdatePlan([("b", 1), ("a", 2), ("updated_at", NOW)])
        assert list(plan.values()) == ["b", "a", "updated_at"]

    def test_get_default(self):
        plan = UpdatePlan([("updated_at", NOW)])
        assert plan.get("name", "fallback") == "fallback"
        assert "name" not in plan
