import unittest
from unittest.mock import MagicMock

from botocore.exceptions import ClientError, EndpointConnectionError

from bucket_audit_cli.adapters.aws.s3_adapter import S3ConfigFetcher
from bucket_audit_cli.core.exceptions import FetchError


def client_error(code: str, operation: str = "Operation") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": f"{code} message"}}, operation)


class S3AdapterTestCase(unittest.TestCase):
    def setUp(self):
        self.clients = {}
        self.session = MagicMock()
        self.session.client.side_effect = self._client
        self.fetcher = S3ConfigFetcher(self.session, region="us-east-1")

    def _client(self, service, region_name=None, config=None):
        if region_name not in self.clients:
            client = MagicMock(name=f"s3-{region_name}")
            client.get_bucket_location.return_value = {"LocationConstraint": "eu-west-2"}
            self.clients[region_name] = client
        return self.clients[region_name]

    @property
    def bucket_client(self):
        return self.fetcher.client(self.fetcher.resolve_bucket_region("b1"))


class TestRegionRouting(S3AdapterTestCase):
    def test_fetches_go_to_the_bucket_region(self):
        self.bucket_client.get_bucket_acl.return_value = {"Grants": [{"Permission": "READ"}]}

        self.assertEqual(self.fetcher.fetch_acl("b1"), [{"Permission": "READ"}])
        self.clients["eu-west-2"].get_bucket_acl.assert_called_once_with(Bucket="b1")
        self.clients["us-east-1"].get_bucket_acl.assert_not_called()

    def test_region_is_cached_per_bucket(self):
        self.fetcher.resolve_bucket_region("b1")
        self.fetcher.resolve_bucket_region("b1")
        self.assertEqual(self.clients["us-east-1"].get_bucket_location.call_count, 1)

    def test_empty_location_is_us_east_1(self):
        self._client("s3", "us-east-1").get_bucket_location.return_value = {"LocationConstraint": None}
        self.assertEqual(self.fetcher.resolve_bucket_region("old"), "us-east-1")

    def test_legacy_eu_location(self):
        self._client("s3", "us-east-1").get_bucket_location.return_value = {"LocationConstraint": "EU"}
        self.assertEqual(self.fetcher.resolve_bucket_region("old"), "eu-west-1")

    def test_location_failure_is_a_fetch_error(self):
        self._client("s3", "us-east-1").get_bucket_location.side_effect = client_error("AccessDenied")
        with self.assertRaises(FetchError) as ctx:
            self.fetcher.resolve_bucket_region("b1")
        self.assertEqual(ctx.exception.code, "AccessDenied")


class TestNotConfigured(S3AdapterTestCase):
    def test_no_encryption(self):
        self.bucket_client.get_bucket_encryption.side_effect = client_error(
            "ServerSideEncryptionConfigurationNotFoundError")
        self.assertIsNone(self.fetcher.fetch_encryption("b1"))

    def test_no_policy(self):
        self.bucket_client.get_bucket_policy.side_effect = client_error("NoSuchBucketPolicy")
        self.assertIsNone(self.fetcher.fetch_policy("b1"))

    def test_no_public_access_block(self):
        self.bucket_client.get_public_access_block.side_effect = client_error(
            "NoSuchPublicAccessBlockConfiguration")
        self.assertIsNone(self.fetcher.fetch_public_access_block("b1"))

    def test_no_website(self):
        self.bucket_client.get_bucket_website.side_effect = client_error("NoSuchWebsiteConfiguration")
        self.assertIsNone(self.fetcher.fetch_website("b1"))

    def test_any_website_failure_reads_as_disabled(self):
        self.bucket_client.get_bucket_website.side_effect = client_error("AccessDenied")
        self.assertIsNone(self.fetcher.fetch_website("b1"))

    def test_connection_failure_reads_as_disabled(self):
        self.bucket_client.get_bucket_website.side_effect = EndpointConnectionError(
            endpoint_url="https://s3.eu-west-2.amazonaws.com")
        self.assertIsNone(self.fetcher.fetch_website("b1"))

    def test_logging_disabled(self):
        self.bucket_client.get_bucket_logging.return_value = {}
        self.assertIsNone(self.fetcher.fetch_logging("b1"))


class TestConfigured(S3AdapterTestCase):
    def test_policy_document(self):
        self.bucket_client.get_bucket_policy.return_value = {"Policy": '{"Statement": []}'}
        self.assertEqual(self.fetcher.fetch_policy("b1"), '{"Statement": []}')

    def test_encryption_configuration(self):
        config = {"Rules": [{"ApplyServerSideEncryptionByDefault": {"SSEAlgorithm": "aws:kms"}}]}
        self.bucket_client.get_bucket_encryption.return_value = {"ServerSideEncryptionConfiguration": config}
        self.assertEqual(self.fetcher.fetch_encryption("b1"), config)

    def test_versioning_keeps_status_and_mfa(self):
        self.bucket_client.get_bucket_versioning.return_value = {
            "Status": "Enabled",
            "MFADelete": "Disabled",
            "ResponseMetadata": {},
        }
        self.assertEqual(self.fetcher.fetch_versioning("b1"), {"Status": "Enabled", "MFADelete": "Disabled"})

    def test_logging_enabled(self):
        self.bucket_client.get_bucket_logging.return_value = {"LoggingEnabled": {"TargetBucket": "logs"}}
        self.assertEqual(self.fetcher.fetch_logging("b1"), {"TargetBucket": "logs"})

    def test_website_configuration(self):
        self.bucket_client.get_bucket_website.return_value = {
            "IndexDocument": {"Suffix": "index.html"},
            "ResponseMetadata": {},
        }
        self.assertEqual(self.fetcher.fetch_website("b1"), {"IndexDocument": {"Suffix": "index.html"}})


class TestFailures(S3AdapterTestCase):
    def test_access_denied_is_a_fetch_error(self):
        self.bucket_client.get_bucket_policy.side_effect = client_error("AccessDenied")
        with self.assertRaises(FetchError) as ctx:
            self.fetcher.fetch_policy("b1")
        self.assertEqual(ctx.exception.bucket, "b1")
        self.assertEqual(ctx.exception.operation, "get_bucket_policy")

    def test_not_configured_code_of_another_operation_is_still_an_error(self):
        self.bucket_client.get_bucket_acl.side_effect = client_error("NoSuchBucketPolicy")
        with self.assertRaises(FetchError):
            self.fetcher.fetch_acl("b1")


class TestListBuckets(S3AdapterTestCase):
    def test_pages_are_flattened_in_order(self):
        paginator = MagicMock()
        paginator.paginate.return_value = [
            {"Buckets": [{"Name": "a"}, {"Name": "b"}]},
            {"Buckets": [{"Name": "c"}]},
        ]
        self._client("s3", "us-east-1").get_paginator.return_value = paginator

        self.assertEqual(self.fetcher.list_buckets(), ["a", "b", "c"])


if __name__ == '__main__':
    unittest.main()
