from decimal import Decimal
from functools import reduce
import logging

from boto3.dynamodb.conditions import Attr
from botocore.exceptions import ClientError

from .base_client import AWSBaseClient

logger = logging.getLogger(__name__)

# DynamoDB rejects transactions with more actions than this
TRANSACT_LIMIT = 100


class ItemNotFound(Exception):
    """Raised when an update targets an item that does not exist."""

    def __init__(self, table, key):
        self.table = table
        self.key = key
        super().__init__(f"{table} has no item {key}")


class DynamoDBClient(AWSBaseClient):
    def __init__(self):
        super().__init__("dynamodb")

    def _deserialize(self, value):
        """Convert DynamoDB data into plain Python types."""
        if isinstance(value, dict):
            return {k: self._deserialize(v) for k, v in value.items()}
        if isinstance(value, list):
            return [self._deserialize(v) for v in value]
        if isinstance(value, Decimal):
            return int(value) if value % 1 == 0 else float(value)
        return value

# CURD

    def put(self, table, item):
        tbl = self.resource.Table(table)
        clean_item = self._convert_to_decimal(item)
        return tbl.put_item(Item=clean_item)

    def get(self, table, key):
        tbl = self.resource.Table(table)
        resp = tbl.get_item(Key=key)
        item = resp.get("Item")
        return self._deserialize(item) if item else {}

    def scan(self, table, **equals):
        """
        Scan the whole table, following pagination.
        Keyword arguments become equality filters (field=value).
        """
        tbl = self.resource.Table(table)
        kwargs = {}
        if equals:
            conditions = [Attr(k).eq(self._convert_to_decimal(v)) for k, v in equals.items()]
            kwargs["FilterExpression"] = reduce(lambda a, b: a & b, conditions)

        items = []
        while True:
            resp = tbl.scan(**kwargs)
            items.extend(resp.get("Items", []))
            last_key = resp.get("LastEvaluatedKey")
            if not last_key:
                break
            kwargs["ExclusiveStartKey"] = last_key
        return [self._deserialize(i) for i in items]

    def update(self, table, key, values):
        """
        SET the given fields on an existing item. UpdateItem would
        otherwise create the item, so a missing one raises ItemNotFound.
        """
        tbl = self.resource.Table(table)
        expression, names, vals = self._expression("SET", values)
        names["#pk"] = next(iter(key))
        try:
            return tbl.update_item(
                Key=key,
                UpdateExpression=expression,
                ConditionExpression="attribute_exists(#pk)",
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=vals,
            )
        except ClientError as e:
            if e.response["Error"]["Code"] == "ConditionalCheckFailedException":
                raise ItemNotFound(table, key) from e
            raise

    def increment(self, table, key, deltas):
        """
        Atomically ADD the given deltas; missing fields (or items) start at 0.
        Returns the updated counters.
        """
        tbl = self.resource.Table(table)
        expression, names, vals = self._expression("ADD", deltas)
        resp = tbl.update_item(
            Key=key,
            UpdateExpression=expression,
            ExpressionAttributeNames=names,
            ExpressionAttributeValues=vals,
            ReturnValues="UPDATED_NEW",
        )
        return self._deserialize(resp.get("Attributes", {}))

    def delete(self, table, key):
        """
        Delete an item from the DynamoDB table.
        """
        tbl = self.resource.Table(table)
        return tbl.delete_item(Key=key)

# transactions

    def transact(self, actions):
        """
        Commit multi-item writes atomically.

        actions is a list of tuples:
          ("put", table, item)
          ("delete", table, key)
          ("add", table, key, deltas)   -- only applies to an existing item

        Lists longer than TRANSACT_LIMIT are committed in consecutive
        chunks, so callers put children before their parent.
        """
        transact_items = [self._transact_item(a) for a in actions]
        client = self.resource.meta.client
        for start in range(0, len(transact_items), TRANSACT_LIMIT):
            chunk = transact_items[start:start + TRANSACT_LIMIT]
            client.transact_write_items(TransactItems=chunk)
        logger.debug("Committed %d transactional writes", len(transact_items))

    def _transact_item(self, action):
        op, table = action[0], action[1]
        if op == "put":
            return {"Put": {"TableName": table, "Item": self._convert_to_decimal(action[2])}}
        if op == "delete":
            return {"Delete": {"TableName": table, "Key": action[2]}}
        if op == "add":
            key, deltas = action[2], action[3]
            expression, names, vals = self._expression("ADD", deltas)
            names["#pk"] = next(iter(key))
            return {
                "Update": {
                    "TableName": table,
                    "Key": key,
                    "UpdateExpression": expression,
                    "ConditionExpression": "attribute_exists(#pk)",
                    "ExpressionAttributeNames": names,
                    "ExpressionAttributeValues": vals,
                }
            }
        raise ValueError(f"Unknown transaction action: {op}")

    def _expression(self, verb, values):
        # placeholders everywhere: name, status and items are reserved words
        names, vals, parts = {}, {}, []
        for i, (field, value) in enumerate(values.items()):
            names[f"#f{i}"] = field
            vals[f":v{i}"] = self._convert_to_decimal(value)
            parts.append(f"#f{i} = :v{i}" if verb == "SET" else f"#f{i} :v{i}")
        return f"{verb} " + ", ".join(parts), names, vals

# int to decimal
    def _convert_to_decimal(self, data):
        """Recursively convert numbers to Decimal for DynamoDB writes."""
        if isinstance(data, dict):
            return {k: self._convert_to_decimal(v) for k, v in data.items()}
        if isinstance(data, list):
            return [self._convert_to_decimal(v) for v in data]
        if isinstance(data, bool):
            return data
        if isinstance(data, int):
            return Decimal(data)
        if isinstance(data, float):
            return Decimal(str(data))
        return data
