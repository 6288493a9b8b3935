from aws_config import S3_PHOTO_BUCKET, TABLE_KEYS, dynamodb_resource, s3_client

# -------------------------------
# Setup AWS clients
# -------------------------------
ddb = dynamodb_resource()
s3 = s3_client()


def clear_table(table_name):
    table = ddb.Table(table_name)
    print(f"Clearing table: {table_name}")

    # Get primary key names dynamically
    key_names = [k['AttributeName'] for k in table.key_schema]

    items = []
    kwargs = {}
    while True:
        response = table.scan(**kwargs)
        items.extend(response.get("Items", []))
        if "LastEvaluatedKey" not in response:
            break
        kwargs["ExclusiveStartKey"] = response["LastEvaluatedKey"]

    # Delete items using correct key(s)
    with table.batch_writer() as batch:
        for item in items:
            batch.delete_item(Key={k: item[k] for k in key_names})
    print(f"Cleared {len(items)} items from {table_name}")


def clear_bucket(bucket_name):
    print(f"Clearing S3 bucket: {bucket_name}")
    deleted = 0
    paginator = s3.get_paginator("list_objects_v2")
    for page in paginator.paginate(Bucket=bucket_name):
        keys = [{"Key": obj["Key"]} for obj in page.get("Contents", [])]
        if keys:
            s3.delete_objects(Bucket=bucket_name, Delete={"Objects": keys})
            deleted += len(keys)
    print(f"Removed {deleted} objects")


if __name__ == "__main__":
    for table_name in TABLE_KEYS:
        clear_table(table_name)
    clear_bucket(S3_PHOTO_BUCKET)
    print("Reset done. Run infra_setup.py to seed default settings again.")
