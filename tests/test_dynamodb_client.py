from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from botocore.exceptions import ClientError

from aws_lib.dynamodb_client import TRANSACT_LIMIT, DynamoDBClient, ItemNotFound


@pytest.fixture
def resource(monkeypatch):
    fake_resource = MagicMock()
    monkeypatch.setattr(DynamoDBClient, "resource", property(lambda self: fake_resource))
    return fake_resource


def test_put_converts_numbers_but_not_booleans(resource):
    DynamoDBClient().put("T", {"id": "1", "n": 3, "price": 2.5, "flag": True, "items": [{"q": 1}]})

    item = resource.Table.return_value.put_item.call_args.kwargs["Item"]
    assert item == {"id": "1", "n": Decimal(3), "price": Decimal("2.5"), "flag": True,
                    "items": [{"q": Decimal(1)}]}
    assert item["flag"] is True


def test_get_deserializes_decimals(resource):
    resource.Table.return_value.get_item.return_value = {
        "Item": {"id": "1", "count": Decimal(4), "amount": Decimal("12.5")}
    }
    assert DynamoDBClient().get("T", {"id": "1"}) == {"id": "1", "count": 4, "amount": 12.5}


def test_get_missing_item_returns_empty_dict(resource):
    resource.Table.return_value.get_item.return_value = {}
    assert DynamoDBClient().get("T", {"id": "nope"}) == {}


def test_scan_follows_pagination(resource):
    table = resource.Table.return_value
    table.scan.side_effect = [
        {"Items": [{"id": "1"}], "LastEvaluatedKey": {"id": "1"}},
        {"Items": [{"id": "2"}]},
    ]

    assert DynamoDBClient().scan("T", album_id="a") == [{"id": "1"}, {"id": "2"}]
    first, second = table.scan.call_args_list
    assert "FilterExpression" in first.kwargs
    assert second.kwargs["ExclusiveStartKey"] == {"id": "1"}


def test_update_uses_placeholders_for_reserved_words(resource):
    DynamoDBClient().update("T", {"id": "1"}, {"status": "completed", "items": []})

    kwargs = resource.Table.return_value.update_item.call_args.kwargs
    assert kwargs["UpdateExpression"] == "SET #f0 = :v0, #f1 = :v1"
    assert kwargs["ExpressionAttributeNames"] == {"#f0": "status", "#f1": "items", "#pk": "id"}
    assert kwargs["ExpressionAttributeValues"] == {":v0": "completed", ":v1": []}
    assert kwargs["ConditionExpression"] == "attribute_exists(#pk)"


def test_update_of_missing_item_raises(resource):
    resource.Table.return_value.update_item.side_effect = ClientError(
        {"Error": {"Code": "ConditionalCheckFailedException", "Message": "failed"}}, "UpdateItem"
    )
    with pytest.raises(ItemNotFound):
        DynamoDBClient().update("T", {"id": "gone"}, {"priority": 2})


def test_update_passes_other_errors_through(resource):
    resource.Table.return_value.update_item.side_effect = ClientError(
        {"Error": {"Code": "ProvisionedThroughputExceededException", "Message": "slow down"}}, "UpdateItem"
    )
    with pytest.raises(ClientError):
        DynamoDBClient().update("T", {"id": "1"}, {"priority": 2})


def test_increment_returns_new_values(resource):
    table = resource.Table.return_value
    table.update_item.return_value = {"Attributes": {"current_number": Decimal(8)}}

    assert DynamoDBClient().increment("T", {"id": "c"}, {"current_number": 1}) == {"current_number": 8}
    kwargs = table.update_item.call_args.kwargs
    assert kwargs["UpdateExpression"] == "ADD #f0 :v0"
    assert kwargs["ReturnValues"] == "UPDATED_NEW"


def test_transact_builds_conditional_counter_updates(resource):
    DynamoDBClient().transact([
        ("put", "Photos", {"photo_id": "p"}),
        ("add", "Albums", {"album_id": "a"}, {"photo_count": 1}),
        ("delete", "Other", {"id": "x"}),
    ])

    items = resource.meta.client.transact_write_items.call_args.kwargs["TransactItems"]
    assert items[0] == {"Put": {"TableName": "Photos", "Item": {"photo_id": "p"}}}
    update = items[1]["Update"]
    assert update["ConditionExpression"] == "attribute_exists(#pk)"
    assert update["ExpressionAttributeNames"]["#pk"] == "album_id"
    assert update["ExpressionAttributeValues"] == {":v0": Decimal(1)}
    assert items[2] == {"Delete": {"TableName": "Other", "Key": {"id": "x"}}}


def test_transact_splits_large_batches(resource):
    actions = [("delete", "T", {"id": str(i)}) for i in range(TRANSACT_LIMIT + 5)]
    DynamoDBClient().transact(actions)

    calls = resource.meta.client.transact_write_items.call_args_list
    assert [len(c.kwargs["TransactItems"]) for c in calls] == [TRANSACT_LIMIT, 5]


def test_transact_rejects_unknown_action(resource):
    with pytest.raises(ValueError):
        DynamoDBClient().transact([("upsert", "T", {})])
