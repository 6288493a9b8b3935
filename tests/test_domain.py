from datetime import datetime, timedelta, timezone

import pytest

from stand import domain


def _item(item_type="burger", paid=False, delivered=False, item_id=None):
    item = domain.new_item(item_id or f"{item_type}-{paid}-{delivered}", item_type)
    item["is_paid"] = paid
    item["is_delivered"] = delivered
    return item


def _order(*items, priority=1, created_at="2026-10-19T10:00:00+00:00", status=domain.WAITING):
    return {"order_id": created_at, "priority": priority, "created_at": created_at,
            "status": status, "items": list(items)}


# -----------------------------
# ingredient cycling
# -----------------------------
def test_cycle_ingredient_order():
    assert domain.cycle_ingredient(domain.NORMAL) == domain.REMOVED
    assert domain.cycle_ingredient(domain.REMOVED) == domain.DOUBLED
    assert domain.cycle_ingredient(domain.DOUBLED) == domain.NORMAL


@pytest.mark.parametrize("state", [domain.REMOVED, domain.NORMAL, domain.DOUBLED])
def test_cycle_ingredient_returns_after_three_steps(state):
    assert domain.cycle_ingredient(domain.cycle_ingredient(domain.cycle_ingredient(state))) == state


def test_ingredient_states_from_customizations():
    states = domain.ingredient_states(
        ["bun", "meat", "onion"], {"removed": ["onion"], "doubled": ["meat"]}
    )
    assert states == {"bun": 1, "meat": 2, "onion": 0}


def test_customizations_are_disjoint_and_keep_recipe_order():
    states = {"bun": 1, "meat": 2, "onion": 0, "cheese": 2, "tomato": 0}
    custom = domain.customizations_from_states(states)
    assert custom == {"removed": ["onion", "tomato"], "doubled": ["meat", "cheese"]}
    assert not set(custom["removed"]) & set(custom["doubled"])


def test_fries_ignore_customizations():
    fries = domain.new_item("f1", domain.FRIES, {"removed": ["salt"], "doubled": []})
    assert fries["customizations"] == domain.empty_customizations()
    assert domain.format_customizations(fries) == []


def test_format_customizations_labels():
    burger = domain.new_item("b1", domain.BURGER, {"removed": ["onion"], "doubled": ["meat"]})
    assert domain.format_customizations(burger) == ["0x onion", "2x meat"]


def test_new_item_rejects_unknown_type():
    with pytest.raises(ValueError):
        domain.new_item("x", "salad")


# -----------------------------
# filters
# -----------------------------
def test_filter_cycle():
    assert domain.cycle_filter(domain.INACTIVE) == domain.ACTIVE
    assert domain.cycle_filter(domain.ACTIVE) == domain.OPPOSITE
    assert domain.cycle_filter(domain.OPPOSITE) == domain.INACTIVE


@pytest.mark.parametrize("state", domain.FILTER_STATES)
def test_filter_cycle_returns_after_three_steps(state):
    assert domain.cycle_filter(domain.cycle_filter(domain.cycle_filter(state))) == state


def test_parse_filter_falls_back_to_inactive():
    assert domain.parse_filter("bogus") == domain.INACTIVE
    assert domain.parse_filter(None) == domain.INACTIVE
    assert domain.parse_filter("opposite") == domain.OPPOSITE


def test_filter_orders_by_status_and_payment():
    waiting_unpaid = _order(_item(), created_at="a")
    delivered_unpaid = _order(_item(delivered=True), created_at="b")
    delivered_paid = _order(_item(paid=True, delivered=True), created_at="c")
    partly = _order(_item(delivered=True, paid=True), _item(), created_at="d")
    all_orders = [waiting_unpaid, delivered_unpaid, delivered_paid, partly]

    assert domain.filter_orders(all_orders) == all_orders
    assert domain.filter_orders(all_orders, status_filter=domain.ACTIVE) == [waiting_unpaid, partly]
    assert domain.filter_orders(all_orders, status_filter=domain.OPPOSITE) == [delivered_unpaid, delivered_paid]
    assert domain.filter_orders(all_orders, payment_filter=domain.ACTIVE) == [
        waiting_unpaid, delivered_unpaid, partly
    ]
    assert domain.filter_orders(all_orders, domain.OPPOSITE, domain.ACTIVE) == [delivered_unpaid]


def test_filter_labels():
    assert domain.filter_label("status", domain.ACTIVE) == "Status: waiting"
    assert domain.filter_label("payment", domain.OPPOSITE) == "Payment: paid"


# -----------------------------
# completion
# -----------------------------
def test_completion_requires_every_item_paid_and_delivered():
    order = _order()
    items = [_item(paid=True, delivered=True), _item(paid=True)]
    assert domain.apply_completion(order, items) == {"items": items}


def test_completion_stamps_timestamp_on_transition():
    order = _order()
    items = [_item(paid=True, delivered=True)]
    changes = domain.apply_completion(order, items, now="2026-10-19T12:00:00+00:00")
    assert changes["status"] == domain.COMPLETED
    assert changes["completed_at"] == "2026-10-19T12:00:00+00:00"


def test_completion_is_idempotent():
    items = [_item(paid=True, delivered=True)]
    order = _order(*items)
    order.update(domain.apply_completion(order, items, now="first"))

    again = domain.apply_completion(order, items, now="second")
    assert "completed_at" not in again
    assert "status" not in again
    assert order["completed_at"] == "first"


def test_empty_order_never_completes():
    assert domain.apply_completion(_order(), []) == {"items": []}


def test_toggle_and_complete_items():
    items = [_item(item_id="a"), _item(item_id="b")]
    toggled = domain.toggle_items(items, ["a"], "is_paid")
    assert [i["is_paid"] for i in toggled] == [True, False]
    assert [i["is_paid"] for i in domain.toggle_items(toggled, ["a"], "is_paid")] == [False, False]
    assert domain.is_complete(domain.complete_items(items))
    assert [i["item_id"] for i in domain.remove_items(items, ["a"])] == ["b"]
    with pytest.raises(ValueError):
        domain.toggle_items(items, ["a"], "item_id")


def test_sort_orders_priority_then_age():
    old_low = _order(priority=1, created_at="2026-10-19T09:00:00+00:00")
    new_high = _order(priority=3, created_at="2026-10-19T11:00:00+00:00")
    old_high = _order(priority=3, created_at="2026-10-19T08:00:00+00:00")
    assert domain.sort_orders([old_low, new_high, old_high]) == [old_high, new_high, old_low]


# -----------------------------
# pricing & stats
# -----------------------------
def test_order_total():
    items = [_item("burger"), _item("burger"), _item("fries")]
    assert domain.order_total(items, {"burger_price": 5, "fries_price": 2}) == 12


def test_queue_stats_counts_only_undelivered():
    orders = [
        _order(_item("burger"), _item("fries"), _item("burger", delivered=True)),
        _order(_item("fries"), _item("fries", delivered=True)),
    ]
    assert domain.queue_stats(orders) == {"burgers": 1, "fries": 2}


def test_sales_stats():
    orders = [
        _order(_item("burger", paid=True, delivered=True), _item("fries", paid=True)),
        _order(_item("burger"), _item("burger", delivered=True)),
    ]
    stats = domain.sales_stats(orders, {"burger_price": 5, "fries_price": 2})
    assert stats["total_burgers"] == 3
    assert stats["delivered_burgers"] == 2
    assert stats["remaining_burgers"] == 1
    assert stats["paid_fries"] == 1
    assert stats["remaining_fries"] == 1
    assert stats["total_revenue"] == 17
    assert stats["paid_revenue"] == 7
    assert stats["unpaid_revenue"] == 10


def test_time_ago():
    now = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)

    def ago(**delta):
        return domain.time_ago((now - timedelta(**delta)).isoformat(), now=now)

    assert ago(seconds=10) == "just now"
    assert ago(minutes=1) == "1 minute ago"
    assert ago(minutes=25) == "25 minutes ago"
    assert ago(hours=1) == "1 hour ago"
    assert ago(hours=5) == "5 hours ago"
    assert ago(days=1) == "yesterday"
    assert ago(days=3) == "3 days ago"
    assert ago(days=30) == "19.09.2026"
