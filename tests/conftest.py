import os
from collections import defaultdict
from decimal import Decimal

import django
import pytest
from botocore.exceptions import ClientError

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "foodstand.settings")
django.setup()

from aws_config import TABLE_KEYS  # noqa: E402
from aws_lib.dynamodb_client import DynamoDBClient, ItemNotFound  # noqa: E402
from stand.store import comments, expenses, gallery, orders, settings, users  # noqa: E402

STORE_MODULES = (comments, expenses, gallery, orders, settings, users)


def _key_value(table, key):
    return key[TABLE_KEYS[table]]


class FakeDynamoDB(DynamoDBClient):
    """
    In-memory stand-in for the DynamoDB wrapper. Items are stored in the
    same Decimal form DynamoDB keeps, and read back through the real
    deserializer.
    """

    def __init__(self):
        super().__init__()
        self.tables = defaultdict(dict)
        self.transactions = []

    def put(self, table, item):
        self.tables[table][item[TABLE_KEYS[table]]] = self._convert_to_decimal(item)

    def get(self, table, key):
        item = self.tables[table].get(_key_value(table, key))
        return self._deserialize(item) if item else {}

    def scan(self, table, **equals):
        wanted = self._convert_to_decimal(equals)
        return [
            self._deserialize(item)
            for item in self.tables[table].values()
            if all(item.get(k) == v for k, v in wanted.items())
        ]

    def update(self, table, key, values):
        item = self.tables[table].get(_key_value(table, key))
        if item is None:
            raise ItemNotFound(table, key)
        item.update(self._convert_to_decimal(values))

    def increment(self, table, key, deltas):
        item = self.tables[table].setdefault(_key_value(table, key), dict(key))
        for field, delta in self._convert_to_decimal(deltas).items():
            item[field] = item.get(field, Decimal(0)) + delta
        return self._deserialize({field: item[field] for field in deltas})

    def delete(self, table, key):
        self.tables[table].pop(_key_value(table, key), None)

    def transact(self, actions):
        for action in actions:
            if action[0] == "add" and _key_value(action[1], action[2]) not in self.tables[action[1]]:
                raise ClientError(
                    {"Error": {"Code": "TransactionCanceledException", "Message": "ConditionalCheckFailed"}},
                    "TransactWriteItems",
                )
        for action in actions:
            op, table = action[0], action[1]
            if op == "put":
                self.put(table, action[2])
            elif op == "delete":
                self.delete(table, action[2])
            else:
                self.increment(table, action[2], action[3])
        self.transactions.append(actions)

    def count(self, table):
        return len(self.tables[table])


class FakeS3:
    def __init__(self):
        self.objects = {}

    def upload_bytes(self, bucket, key, body, content_type="image/jpeg"):
        self.objects[(bucket, key)] = body
        return f"s3://{bucket}/{key}"

    def delete(self, bucket, key):
        self.objects.pop((bucket, key), None)

    def presigned_url(self, bucket, key, expires_in=300):
        return f"https://{bucket}.s3.test/{key}?expires={expires_in}"


@pytest.fixture
def fake_ddb(monkeypatch):
    fake = FakeDynamoDB()
    for module in STORE_MODULES:
        monkeypatch.setattr(module, "ddb", fake)
    return fake


@pytest.fixture
def fake_s3(monkeypatch):
    fake = FakeS3()
    monkeypatch.setattr(gallery, "s3", fake)
    return fake
