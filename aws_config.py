# aws_config.py
import os

import boto3
from botocore.config import Config

# -----------------------------
# AWS region & boto3 config
# -----------------------------
AWS_REGION = os.getenv("AWS_REGION", "eu-central-1")

boto3_config = Config(
    region_name=AWS_REGION,
    retries={"max_attempts": 3, "mode": "standard"}
)

# -----------------------------
# DynamoDB tables (one per collection)
# -----------------------------
USERS_TABLE = os.getenv("DDB_USERS_TABLE", "StandUsers")
ORDERS_TABLE = os.getenv("DDB_ORDERS_TABLE", "StandOrders")
COMMENTS_TABLE = os.getenv("DDB_COMMENTS_TABLE", "StandComments")
SETTINGS_TABLE = os.getenv("DDB_SETTINGS_TABLE", "StandSettings")
ALBUMS_TABLE = os.getenv("DDB_ALBUMS_TABLE", "StandAlbums")
PHOTOS_TABLE = os.getenv("DDB_PHOTOS_TABLE", "StandPhotos")
EXPENSE_ACTIONS_TABLE = os.getenv("DDB_EXPENSE_ACTIONS_TABLE", "StandExpenseActions")
EXPENSE_ITEMS_TABLE = os.getenv("DDB_EXPENSE_ITEMS_TABLE", "StandExpenseItems")

# table name -> partition key
TABLE_KEYS = {
    USERS_TABLE: "user_id",
    ORDERS_TABLE: "order_id",
    COMMENTS_TABLE: "comment_id",
    SETTINGS_TABLE: "setting_id",
    ALBUMS_TABLE: "album_id",
    PHOTOS_TABLE: "photo_id",
    EXPENSE_ACTIONS_TABLE: "action_id",
    EXPENSE_ITEMS_TABLE: "item_id",
}

# -----------------------------
# S3 photo storage
# -----------------------------
S3_PHOTO_BUCKET = os.getenv("S3_PHOTO_BUCKET", "foodstand-photos")
PRESIGNED_URL_TTL = int(os.getenv("S3_PRESIGNED_URL_TTL", "300"))


# -----------------------------
# AWS clients/resources
# -----------------------------
def dynamodb_resource():
    return boto3.resource("dynamodb", region_name=AWS_REGION, config=boto3_config)


def s3_client():
    return boto3.client("s3", region_name=AWS_REGION, config=boto3_config)
