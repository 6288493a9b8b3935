import boto3

from aws_config import AWS_REGION, boto3_config


class AWSBaseClient:
    """
    Common base of the stand's AWS wrappers. Clients and resources are
    built per access from a new session, so credentials rotated on the
    host are picked up without restarting the site.
    """

    def __init__(self, service_name, region_name=AWS_REGION):
        self.service_name = service_name
        self.region_name = region_name

    def _session(self):
        return boto3.Session(region_name=self.region_name)

    @property
    def client(self):
        return self._session().client(self.service_name, config=boto3_config)

    @property
    def resource(self):
        return self._session().resource(self.service_name, config=boto3_config)
