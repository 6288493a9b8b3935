import logging
import uuid

from aws_config import COMMENTS_TABLE, ORDERS_TABLE, SETTINGS_TABLE
from aws_lib.dynamodb_client import DynamoDBClient, ItemNotFound

from .. import domain
from ..exceptions import NotFound, ValidationFailed
from . import comments

logger = logging.getLogger(__name__)

ddb = DynamoDBClient()

COUNTER_KEY = {"setting_id": "orderCounter"}


# order numbers
def next_order_number():
    """Atomically bump the shared order counter and return the new number."""
    counters = ddb.increment(SETTINGS_TABLE, COUNTER_KEY, {"current_number": 1})
    return counters["current_number"]


def get_order_counter():
    counter = ddb.get(SETTINGS_TABLE, COUNTER_KEY)
    return counter.get("current_number", 0)


def set_order_counter(number):
    if number < 0:
        raise ValidationFailed("The order counter cannot be negative.")
    ddb.put(SETTINGS_TABLE, dict(COUNTER_KEY, current_number=number))
    logger.info("Order counter set to %d", number)


# orders
def create_order(user_id, items, priority=1, initial_comment=None, author_nickname=None):
    """
    Store a new waiting order and return its id.
    A non-blank initial_comment is attached as the first comment.
    """
    if not items:
        raise ValidationFailed("An order needs at least one item.")
    if priority < 1:
        raise ValidationFailed("Priority must be at least 1.")

    order = {
        "order_id": str(uuid.uuid4()),
        "order_number": next_order_number(),
        "priority": priority,
        "created_at": domain.utc_now(),
        "created_by": user_id,
        "status": domain.WAITING,
        "items": items,
    }
    ddb.put(ORDERS_TABLE, order)
    logger.info("Created order #%d (%s) with %d items",
                order["order_number"], order["order_id"], len(items))

    if initial_comment and initial_comment.strip() and author_nickname:
        comments.add_comment(order["order_id"], initial_comment.strip(), user_id, author_nickname)

    return order["order_id"]


def list_orders():
    return domain.sort_orders(ddb.scan(ORDERS_TABLE))


def get_order(order_id):
    order = ddb.get(ORDERS_TABLE, {"order_id": order_id})
    if not order:
        raise NotFound("Order", order_id)
    return order


def update_order_priority(order_id, priority):
    if priority < 1:
        raise ValidationFailed("Priority must be at least 1.")
    try:
        ddb.update(ORDERS_TABLE, {"order_id": order_id}, {"priority": priority})
    except ItemNotFound:
        raise NotFound("Order", order_id) from None


def update_order_items(order_id, items):
    """
    Replace the item list; completes the order once everything is
    paid and delivered.
    """
    order = get_order(order_id)
    changes = domain.apply_completion(order, items)
    try:
        ddb.update(ORDERS_TABLE, {"order_id": order_id}, changes)
    except ItemNotFound:
        raise NotFound("Order", order_id) from None
    if changes.get("status") == domain.COMPLETED:
        logger.info("Order #%s completed", order.get("order_number"))
    return dict(order, **changes)


def delete_order(order_id):
    """Delete the order together with all of its comments."""
    actions = [
        ("delete", COMMENTS_TABLE, {"comment_id": c["comment_id"]})
        for c in comments.list_comments(order_id)
    ]
    actions.append(("delete", ORDERS_TABLE, {"order_id": order_id}))
    ddb.transact(actions)
    logger.info("Deleted order %s and %d comments", order_id, len(actions) - 1)
