import logging
import uuid
from decimal import Decimal

from aws_config import EXPENSE_ACTIONS_TABLE, EXPENSE_ITEMS_TABLE
from aws_lib.dynamodb_client import DynamoDBClient, ItemNotFound

from ..domain import utc_now
from ..exceptions import NotFound, ValidationFailed

logger = logging.getLogger(__name__)

ddb = DynamoDBClient()


def _money(amount):
    amount = Decimal(str(amount))
    if amount <= 0:
        raise ValidationFailed("Amount must be greater than zero.")
    return amount


# actions
def create_action(name, user_id):
    action = {
        "action_id": str(uuid.uuid4()),
        "name": name,
        "created_at": utc_now(),
        "created_by": user_id,
        "total_amount": 0,
        "item_count": 0,
    }
    ddb.put(EXPENSE_ACTIONS_TABLE, action)
    logger.info("Expense action %s created", name)
    return action["action_id"]


def list_actions():
    return sorted(ddb.scan(EXPENSE_ACTIONS_TABLE), key=lambda a: a["created_at"], reverse=True)


def get_action(action_id):
    action = ddb.get(EXPENSE_ACTIONS_TABLE, {"action_id": action_id})
    if not action:
        raise NotFound("Expense action", action_id)
    return action


def rename_action(action_id, name):
    try:
        ddb.update(EXPENSE_ACTIONS_TABLE, {"action_id": action_id}, {"name": name})
    except ItemNotFound:
        raise NotFound("Expense action", action_id) from None


def delete_action(action_id):
    """Delete the action together with all of its items."""
    items = ddb.scan(EXPENSE_ITEMS_TABLE, action_id=action_id)
    actions = [("delete", EXPENSE_ITEMS_TABLE, {"item_id": i["item_id"]}) for i in items]
    actions.append(("delete", EXPENSE_ACTIONS_TABLE, {"action_id": action_id}))
    ddb.transact(actions)
    logger.info("Deleted expense action %s with %d items", action_id, len(items))


# items
def add_item(action_id, description, amount, user_id, photo_id=None):
    amount = _money(amount)
    item = {
        "item_id": str(uuid.uuid4()),
        "action_id": action_id,
        "description": description,
        "amount": amount,
        "photo_id": photo_id or None,
        "created_at": utc_now(),
        "created_by": user_id,
    }
    ddb.transact([
        ("put", EXPENSE_ITEMS_TABLE, item),
        ("add", EXPENSE_ACTIONS_TABLE, {"action_id": action_id},
         {"total_amount": amount, "item_count": 1}),
    ])
    logger.info("Expense %s (%s) added to action %s", description, amount, action_id)
    return item["item_id"]


def list_items(action_id):
    items = ddb.scan(EXPENSE_ITEMS_TABLE, action_id=action_id)
    return sorted(items, key=lambda i: i["created_at"], reverse=True)


def get_item(item_id):
    item = ddb.get(EXPENSE_ITEMS_TABLE, {"item_id": item_id})
    if not item:
        raise NotFound("Expense item", item_id)
    return item


def update_item(item_id, description=None, amount=None, photo_id=None):
    """
    Change an item; the action total moves by the amount difference.
    photo_id="" unlinks the photo, None leaves it alone.
    """
    item = get_item(item_id)
    changes = {}
    if description is not None:
        changes["description"] = description
    if photo_id is not None:
        changes["photo_id"] = photo_id or None

    diff = Decimal(0)
    if amount is not None:
        amount = _money(amount)
        diff = amount - Decimal(str(item["amount"]))
        changes["amount"] = amount

    if not changes:
        return

    writes = [("put", EXPENSE_ITEMS_TABLE, dict(item, **changes))]
    if diff != 0:
        writes.append(("add", EXPENSE_ACTIONS_TABLE, {"action_id": item["action_id"]},
                       {"total_amount": diff}))
    ddb.transact(writes)


def delete_item(item_id):
    item = get_item(item_id)
    ddb.transact([
        ("delete", EXPENSE_ITEMS_TABLE, {"item_id": item_id}),
        ("add", EXPENSE_ACTIONS_TABLE, {"action_id": item["action_id"]},
         {"total_amount": -Decimal(str(item["amount"])), "item_count": -1}),
    ])
    logger.info("Expense item %s deleted", item_id)
