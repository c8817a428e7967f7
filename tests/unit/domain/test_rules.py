from datetime import datetime, timedelta, timezone

import pytest

from domain.rules.catalog_rules import CatalogRules
from domain.rules.egg_rules import EggRules
from domain.rules.hierarchy_rules import HierarchyCycleError, HierarchyRules
from domain.rules.pricing_rules import PricingRules
from domain.rules.reader_rules import ReaderRules
from domain.rules.slug_rules import SlugRules

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def _ids(nodes):
    return [node["id"] for node in nodes]


def test_build_forest_nests_children_in_input_order():
    items = [
        {"id": 1, "parent_id": None},
        {"id": 3, "parent_id": 1},
        {"id": 2, "parent_id": 1},
        {"id": 4, "parent_id": 2},
    ]
    forest = HierarchyRules.build_forest(items)

    assert _ids(forest) == [1]
    assert _ids(forest[0]["children"]) == [3, 2]
    assert _ids(forest[0]["children"][1]["children"]) == [4]
    assert forest[0]["children"][0]["children"] == []


def test_build_forest_promotes_orphans_to_roots():
    items = [{"id": 1, "parent_id": None}, {"id": 2, "parent_id": 99}]
    forest = HierarchyRules.build_forest(items)
    assert _ids(forest) == [1, 2]


def test_build_forest_keeps_every_item_once():
    items = [{"id": i, "parent_id": i - 1 if i > 1 else None} for i in range(1, 8)]
    forest = HierarchyRules.build_forest(items)

    seen = []
    stack = list(forest)
    while stack:
        node = stack.pop()
        seen.append(node["id"])
        stack.extend(node["children"])
    assert sorted(seen) == list(range(1, 8))


def test_build_forest_rejects_cycles():
    items = [
        {"id": 1, "parent_id": None},
        {"id": 2, "parent_id": 3},
        {"id": 3, "parent_id": 2},
    ]
    with pytest.raises(HierarchyCycleError) as exc:
        HierarchyRules.build_forest(items)
    assert sorted(exc.value.item_ids) == [2, 3]


def test_build_forest_empty():
    assert HierarchyRules.build_forest([]) == []


def test_ancestors_nearest_first():
    by_id = {
        1: {"id": 1, "parent_id": None},
        2: {"id": 2, "parent_id": 1},
        3: {"id": 3, "parent_id": 2},
    }
    assert _ids(HierarchyRules.ancestors(by_id, 3)) == [2, 1]
    assert HierarchyRules.ancestors(by_id, 1) == []


def test_bundle_offer_discounts_by_level():
    offer = PricingRules.bundle_offer(7, "Opening Arc", "arc", [1.99, 1.99, 1.99])
    assert offer.original_price == 5.97
    assert offer.discount == 0.10
    assert offer.bundle_price == 5.37
    assert offer.savings == 0.60
    assert offer.item_count == 3

    assert PricingRules.bundle_offer(1, "Book", "book", [10, 10]).bundle_price == 12.0


def test_bundle_offer_needs_children_and_a_bundle_level():
    assert PricingRules.bundle_offer(1, "Issue", "issue", [1.0]) is None
    assert PricingRules.bundle_offer(1, "Saga", "saga", []) is None


def test_quantity_tiers():
    assert PricingRules.quantity_discount(2) == 0.0
    assert PricingRules.quantity_discount(3) == 0.10
    assert PricingRules.quantity_discount(5) == 0.15
    assert PricingRules.quantity_discount(12) == 0.20


def test_quote_applies_tier_on_total_units():
    items = [
        {"id": 1, "title": "A", "type": "issue", "price": 2.5},
        {"id": 2, "title": "B", "type": "issue", "price": None},
    ]
    quote = PricingRules.quote(items, {1: 3, 2: 1})

    assert quote.item_count == 4
    assert quote.subtotal == 7.5
    assert quote.discount_rate == 0.10
    assert quote.discount == 0.75
    assert quote.total == 6.75
    assert quote.lines[1].line_total == 0.0


def test_egg_availability_window():
    start = NOW - timedelta(days=1)
    end = NOW + timedelta(days=1)
    assert EggRules.is_available(True, start, end, NOW)
    assert not EggRules.is_available(False, start, end, NOW)
    assert not EggRules.is_available(True, NOW + timedelta(hours=1), None, NOW)
    assert not EggRules.is_available(True, None, NOW - timedelta(hours=1), NOW)
    # naive datetimes are read as UTC
    assert EggRules.is_available(True, datetime(2025, 2, 28), datetime(2025, 3, 2), NOW)


def test_egg_visibility():
    egg = {"is_active": True, "available_from": None, "available_until": None}
    hidden = {"is_active": False}

    assert EggRules.is_visible(egg, "book", now=NOW)
    assert not EggRules.is_visible(egg, "issue", now=NOW)
    assert EggRules.is_visible(egg, "issue", inline_mode=True, now=NOW)
    assert not EggRules.is_visible(hidden, "book", now=NOW)
    assert EggRules.is_visible(hidden, "issue", admin_mode=True, now=NOW)


def test_egg_reward_summary():
    egg = {"title": "Hidden Map", "reward": "Map", "reward_data": {"points": 50, "exclusive_art": "map.png"}}
    assert EggRules.reward_summary(egg) == {
        "title": "Hidden Map",
        "reward": "Map",
        "points": 50,
        "exclusive_art": "map.png",
    }
    assert "exclusive_art" not in EggRules.reward_summary({"title": "x"}, include_art=False)
    assert EggRules.reward_summary({"title": "x"})["points"] == 0


def test_clamp_rating():
    assert ReaderRules.clamp_rating(0) == 1
    assert ReaderRules.clamp_rating(9) == 5
    assert ReaderRules.clamp_rating(3.6) == 4


def test_percent_bounds():
    assert ReaderRules.is_valid_percent(None)
    assert ReaderRules.is_valid_percent(0)
    assert ReaderRules.is_valid_percent(100)
    assert not ReaderRules.is_valid_percent(101)
    assert not ReaderRules.is_valid_percent(-1)


def test_first_progress_creates_record():
    change = ReaderRules.progress_change(None, {"percent_complete": 40, "last_position": "p3"}, NOW)
    assert change.created
    assert change.values["session_count"] == 1
    assert change.values["started_at"] == NOW
    assert change.values["completed_at"] is None
    assert change.values["last_position"] == "p3"


def test_later_progress_bumps_session_and_stamps_completion_once():
    existing = {"session_count": 2, "completed_at": None, "last_position": "p3"}
    change = ReaderRules.progress_change(existing, {"percent_complete": 100}, NOW)
    assert not change.created
    assert change.values["session_count"] == 3
    assert change.values["completed_at"] == NOW
    assert "last_position" not in change.values

    done = {"session_count": 3, "completed_at": NOW - timedelta(days=2)}
    again = ReaderRules.progress_change(done, {"percent_complete": 100}, NOW)
    assert "completed_at" not in again.values


def test_route_unlocking():
    gated = {"requires_previous_completion": True, "is_default_route": False}
    assert not ReaderRules.route_unlocked(gated, None)
    assert not ReaderRules.route_unlocked(gated, 99)
    assert ReaderRules.route_unlocked(gated, 100)
    assert ReaderRules.route_unlocked({"requires_previous_completion": False}, None)
    assert ReaderRules.route_unlocked({"requires_previous_completion": True, "is_default_route": True}, None)
    assert ReaderRules.route_position("dark-path") == "route:dark-path"


def test_slugify():
    assert SlugRules.slugify("Hello, World!") == "hello-world"
    assert SlugRules.slugify("  Café & Crème  ") == "cafe-and-creme"
    assert SlugRules.slugify("Don't Panic") == "dont-panic"
    assert SlugRules.slugify("!!!") == ""
    assert SlugRules.slugify(SlugRules.slugify("Some -- Title")) == "some-title"


def test_prepare_update_strips_server_fields():
    changes = CatalogRules.prepare_update({"id": 9, "created_at": "x", "title": "New"}, now=NOW)
    assert changes == {"title": "New", "updated_at": NOW}


def test_item_type_validation():
    assert CatalogRules.is_valid_item_type("saga")
    assert not CatalogRules.is_valid_item_type("chapter")
    assert not CatalogRules.is_valid_item_type(None)
    assert CatalogRules.invalid_item_type_message() == (
        "Invalid item_type. Must be one of: book, volume, saga, arc, issue"
    )
