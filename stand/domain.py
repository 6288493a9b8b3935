"""
Order, customization and statistics logic.

Everything here works on plain dicts as they come out of DynamoDB and
performs no I/O, so views and stores share one definition of what
"completed", "pending" or "paid" means.
"""
from datetime import datetime, timezone

BURGER = "burger"
FRIES = "fries"
ITEM_TYPES = (BURGER, FRIES)

WAITING = "waiting"
COMPLETED = "completed"

# ingredient multiplier states
REMOVED, NORMAL, DOUBLED = 0, 1, 2
_NEXT_INGREDIENT_STATE = {NORMAL: REMOVED, REMOVED: DOUBLED, DOUBLED: NORMAL}

INACTIVE, ACTIVE, OPPOSITE = "inactive", "active", "opposite"
FILTER_STATES = (INACTIVE, ACTIVE, OPPOSITE)

DEFAULT_PRICES = {"burger_price": 5, "fries_price": 2}

_FILTER_LABELS = {
    "status": {INACTIVE: "Status: all", ACTIVE: "Status: waiting", OPPOSITE: "Status: delivered"},
    "payment": {INACTIVE: "Payment: all", ACTIVE: "Payment: unpaid", OPPOSITE: "Payment: paid"},
}


def utc_now():
    return datetime.now(timezone.utc).isoformat()


# -----------------------------
# items & customizations
# -----------------------------
def empty_customizations():
    return {"removed": [], "doubled": []}


def new_item(item_id, item_type, customizations=None):
    if item_type not in ITEM_TYPES:
        raise ValueError(f"Unknown item type: {item_type}")
    if item_type == FRIES or customizations is None:
        customizations = empty_customizations()
    return {
        "item_id": item_id,
        "type": item_type,
        "customizations": {
            "removed": list(customizations.get("removed", [])),
            "doubled": list(customizations.get("doubled", [])),
        },
        "is_paid": False,
        "is_delivered": False,
    }


def ingredient_states(ingredients, customizations=None):
    """Map every recipe ingredient to 0 (removed), 1 (normal) or 2 (doubled)."""
    customizations = customizations or empty_customizations()
    removed = set(customizations.get("removed", []))
    doubled = set(customizations.get("doubled", []))
    states = {}
    for ingredient in ingredients:
        if ingredient in removed:
            states[ingredient] = REMOVED
        elif ingredient in doubled:
            states[ingredient] = DOUBLED
        else:
            states[ingredient] = NORMAL
    return states


def cycle_ingredient(state):
    """1x -> 0x -> 2x -> 1x"""
    return _NEXT_INGREDIENT_STATE.get(state, NORMAL)


def customizations_from_states(states):
    return {
        "removed": [ing for ing, s in states.items() if s == REMOVED],
        "doubled": [ing for ing, s in states.items() if s == DOUBLED],
    }


def format_customizations(item):
    """Chip labels for an item, e.g. ['0x onion', '2x meat']."""
    if item.get("type") != BURGER:
        return []
    custom = item.get("customizations") or {}
    labels = [f"0x {ing}" for ing in custom.get("removed", [])]
    labels += [f"2x {ing}" for ing in custom.get("doubled", [])]
    return labels


# -----------------------------
# order lifecycle
# -----------------------------
def all_delivered(items):
    return all(item.get("is_delivered") for item in items)


def all_paid(items):
    return all(item.get("is_paid") for item in items)


def is_complete(items):
    return bool(items) and all(i.get("is_paid") and i.get("is_delivered") for i in items)


def apply_completion(order, items, now=None):
    """
    Return the fields to write when an order's items change.

    The order flips to completed when every item is paid and delivered.
    completed_at is stamped only on that edge; re-applying the update to
    an already completed order keeps the original timestamp.
    """
    changes = {"items": items}
    if is_complete(items) and order.get("status") != COMPLETED:
        changes["status"] = COMPLETED
        changes["completed_at"] = now or utc_now()
    return changes


def toggle_items(items, selected_ids, field):
    """Flip is_paid / is_delivered on the selected items."""
    if field not in ("is_paid", "is_delivered"):
        raise ValueError(f"Cannot toggle {field}")
    selected_ids = set(selected_ids)
    return [
        dict(item, **{field: not item.get(field)}) if item["item_id"] in selected_ids else item
        for item in items
    ]


def complete_items(items):
    return [dict(item, is_paid=True, is_delivered=True) for item in items]


def remove_items(items, selected_ids):
    selected_ids = set(selected_ids)
    return [item for item in items if item["item_id"] not in selected_ids]


def sort_orders(orders):
    """Highest priority first, oldest first within a priority."""
    by_age = sorted(orders, key=lambda o: o.get("created_at", ""))
    return sorted(by_age, key=lambda o: o.get("priority", 1), reverse=True)


# -----------------------------
# filters
# -----------------------------
def cycle_filter(state):
    """inactive -> active -> opposite -> inactive"""
    if state == INACTIVE:
        return ACTIVE
    if state == ACTIVE:
        return OPPOSITE
    return INACTIVE


def parse_filter(value):
    return value if value in FILTER_STATES else INACTIVE


def filter_label(kind, state):
    return _FILTER_LABELS[kind][parse_filter(state)]


def _passes(state, satisfied):
    if state == ACTIVE:
        return not satisfied
    if state == OPPOSITE:
        return satisfied
    return True


def filter_orders(orders, status_filter=INACTIVE, payment_filter=INACTIVE):
    """
    status: active = still waiting for delivery, opposite = all delivered.
    payment: active = something unpaid, opposite = all paid.
    """
    return [
        o for o in orders
        if _passes(status_filter, all_delivered(o.get("items", [])))
        and _passes(payment_filter, all_paid(o.get("items", [])))
    ]


# -----------------------------
# pricing & statistics
# -----------------------------
def unit_price(item_type, prices):
    if item_type == BURGER:
        return prices["burger_price"]
    if item_type == FRIES:
        return prices["fries_price"]
    return 0


def order_total(items, prices):
    return sum(unit_price(item.get("type"), prices) for item in items)


def queue_stats(orders):
    """Burgers and fries still waiting to be handed over."""
    stats = {"burgers": 0, "fries": 0}
    for order in orders:
        for item in order.get("items", []):
            if item.get("is_delivered"):
                continue
            if item.get("type") == BURGER:
                stats["burgers"] += 1
            elif item.get("type") == FRIES:
                stats["fries"] += 1
    return stats


def sales_stats(orders, prices):
    stats = {
        f"{prefix}_{kind}": 0
        for prefix in ("total", "delivered", "paid")
        for kind in ("burgers", "fries")
    }
    stats["total_revenue"] = 0
    stats["paid_revenue"] = 0

    for order in orders:
        for item in order.get("items", []):
            item_type = item.get("type")
            if item_type not in ITEM_TYPES:
                continue
            kind = "burgers" if item_type == BURGER else "fries"
            price = unit_price(item_type, prices)
            stats[f"total_{kind}"] += 1
            stats["total_revenue"] += price
            if item.get("is_delivered"):
                stats[f"delivered_{kind}"] += 1
            if item.get("is_paid"):
                stats[f"paid_{kind}"] += 1
                stats["paid_revenue"] += price

    stats["remaining_burgers"] = stats["total_burgers"] - stats["delivered_burgers"]
    stats["remaining_fries"] = stats["total_fries"] - stats["delivered_fries"]
    stats["unpaid_revenue"] = stats["total_revenue"] - stats["paid_revenue"]
    return stats


def time_ago(timestamp, now=None):
    """Human label for how long ago an ISO timestamp was."""
    if not timestamp:
        return ""
    then = datetime.fromisoformat(timestamp)
    if then.tzinfo is None:
        then = then.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    minutes = int((now - then).total_seconds() // 60)
    hours = minutes // 60
    days = hours // 24

    if minutes < 1:
        return "just now"
    if minutes == 1:
        return "1 minute ago"
    if minutes < 60:
        return f"{minutes} minutes ago"
    if hours == 1:
        return "1 hour ago"
    if hours < 24:
        return f"{hours} hours ago"
    if days == 1:
        return "yesterday"
    if days < 7:
        return f"{days} days ago"
    return then.strftime("%d.%m.%Y")
