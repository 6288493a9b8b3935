"""Data access for each stand collection, backed by DynamoDB and S3."""
