# infra_setup.py
import os

import django

from aws_config import AWS_REGION, S3_PHOTO_BUCKET, TABLE_KEYS, dynamodb_resource, s3_client

# Initialize AWS clients/resources
ddb = dynamodb_resource()
s3 = s3_client()


# --- DynamoDB Tables ---
def create_table(table_name, partition_key):
    """Create a DynamoDB table if it doesn't exist."""
    existing = ddb.meta.client.list_tables()["TableNames"]
    if table_name in existing:
        print(f"Table '{table_name}' already exists.")
        return

    table = ddb.create_table(
        TableName=table_name,
        AttributeDefinitions=[{"AttributeName": partition_key, "AttributeType": "S"}],
        KeySchema=[{"AttributeName": partition_key, "KeyType": "HASH"}],
        BillingMode="PAY_PER_REQUEST"
    )
    table.wait_until_exists()
    print(f"Created table '{table_name}' successfully.")


# --- S3 Bucket ---
def create_bucket(bucket_name, region=AWS_REGION):
    existing_buckets = [b['Name'] for b in s3.list_buckets().get('Buckets', [])]
    if bucket_name in existing_buckets:
        print(f"S3 bucket '{bucket_name}' already exists.")
        return bucket_name

    if region == "us-east-1":
        s3.create_bucket(Bucket=bucket_name)
    else:
        s3.create_bucket(
            Bucket=bucket_name,
            CreateBucketConfiguration={'LocationConstraint': region}
        )
    print(f"Created S3 bucket '{bucket_name}' in region '{region}'.")
    return bucket_name


# --- Default settings ---
def seed_settings():
    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "foodstand.settings")
    django.setup()
    from stand.store import settings as stand_settings

    if stand_settings.get_recipes():
        print("Settings already seeded.")
        return
    stand_settings.seed_defaults()
    print("Default ingredients and active recipe created.")


# --- Main setup ---
if __name__ == "__main__":
    for table_name, key in TABLE_KEYS.items():
        create_table(table_name, key)

    BUCKET_NAME = create_bucket(S3_PHOTO_BUCKET)
    seed_settings()

    print("\nInfrastructure setup completed successfully.")
    print(f"S3 Bucket Name: {BUCKET_NAME}")
