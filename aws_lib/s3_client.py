from .base_client import AWSBaseClient


class S3Client(AWSBaseClient):
    def __init__(self):
        super().__init__("s3")

    def upload_bytes(self, bucket, key, body, content_type="image/jpeg"):
        self.client.put_object(
            Bucket=bucket,
            Key=key,
            Body=body,
            ContentType=content_type
        )
        return f"s3://{bucket}/{key}"

    def delete(self, bucket, key):
        return self.client.delete_object(Bucket=bucket, Key=key)

    def presigned_url(self, bucket, key, expires_in=300):
        """Temporary GET link for a stored object."""
        return self.client.generate_presigned_url(
            "get_object",
            Params={"Bucket": bucket, "Key": key},
            ExpiresIn=expires_in
        )
