# src/bucket_audit_cli/adapters/aws/s3_adapter.py
"""
boto3 implementation of BucketConfigFetcher.

S3 bucket configuration calls must be sent to the bucket's own region, so every
fetch first resolves the bucket region (GetBucketLocation, cached per bucket) and
uses one client per region. Clients are created under a lock; boto3 sessions are
not thread safe but the clients they create are.

Retries and throttling are left to botocore's adaptive retry mode.
"""

import logging
import threading
from typing import Any, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from bucket_audit_cli.config import (
    DEFAULT_REGION,
    LEGACY_REGION_ALIASES,
    NOT_CONFIGURED_ERROR_CODES,
)
from bucket_audit_cli.core.base_fetcher import BucketConfigFetcher
from bucket_audit_cli.core.exceptions import FetchError

logger = logging.getLogger(__name__)

CLIENT_CONFIG = Config(
    retries={"max_attempts": 10, "mode": "adaptive"},
    connect_timeout=10,
    read_timeout=30,
)


def _error_code(error: ClientError) -> str:
    return error.response.get("Error", {}).get("Code", "")


def _fetch_error(bucket: str, operation: str, error: ClientError) -> FetchError:
    message = error.response.get("Error", {}).get("Message", str(error))
    return FetchError(bucket, operation, _error_code(error), message)


class S3ConfigFetcher(BucketConfigFetcher):
    """
    Fetches bucket configuration with boto3.

    Args:
        session: boto3 Session to build clients from (profile, credentials).
        region:  Region of the client used for bucket discovery and location lookups.
    """

    def __init__(self, session: Optional[boto3.session.Session] = None, region: str = DEFAULT_REGION):
        self.session = session or boto3.session.Session()
        self.region = region
        self._clients: dict[str, Any] = {}
        self._regions: dict[str, str] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Clients & routing
    # ------------------------------------------------------------------
    def client(self, region: Optional[str] = None):
        region = region or self.region
        with self._lock:
            client = self._clients.get(region)
            if client is None:
                client = self.session.client("s3", region_name=region, config=CLIENT_CONFIG)
                self._clients[region] = client
            return client

    def resolve_bucket_region(self, bucket: str) -> str:
        with self._lock:
            cached = self._regions.get(bucket)
        if cached:
            return cached

        try:
            response = self.client().get_bucket_location(Bucket=bucket)
        except ClientError as e:
            raise _fetch_error(bucket, "get_bucket_location", e) from e

        constraint = response.get("LocationConstraint") or ""
        region = LEGACY_REGION_ALIASES.get(constraint, constraint)
        logger.debug("Bucket %s is in %s", bucket, region)

        with self._lock:
            self._regions[bucket] = region
        return region

    def _call(self, bucket: str, operation: str) -> dict:
        client = self.client(self.resolve_bucket_region(bucket))
        try:
            return getattr(client, operation)(Bucket=bucket)
        except ClientError as e:
            if _error_code(e) == NOT_CONFIGURED_ERROR_CODES.get(operation):
                raise
            raise _fetch_error(bucket, operation, e) from e

    def _call_optional(self, bucket: str, operation: str) -> Optional[dict]:
        """Like _call, but a "not configured" error code returns None."""
        try:
            return self._call(bucket, operation)
        except ClientError as e:
            logger.debug("%s: %s not configured (%s)", bucket, operation, _error_code(e))
            return None

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------
    def list_buckets(self) -> list[str]:
        """Every bucket name in the account, in API order."""
        names = []
        paginator = self.client().get_paginator("list_buckets")
        for page in paginator.paginate():
            names.extend(b["Name"] for b in page.get("Buckets", []))
        return names

    # ------------------------------------------------------------------
    # BucketConfigFetcher
    # ------------------------------------------------------------------
    def fetch_acl(self, bucket: str) -> list[dict]:
        return self._call(bucket, "get_bucket_acl").get("Grants", [])

    def fetch_encryption(self, bucket: str) -> Optional[dict]:
        response = self._call_optional(bucket, "get_bucket_encryption")
        if response is None:
            return None
        return response.get("ServerSideEncryptionConfiguration")

    def fetch_versioning(self, bucket: str) -> dict:
        response = self._call(bucket, "get_bucket_versioning")
        return {k: response[k] for k in ("Status", "MFADelete") if k in response}

    def fetch_website(self, bucket: str) -> Optional[dict]:
        # Any failure to read the website configuration counts as no website.
        try:
            response = self._call_optional(bucket, "get_bucket_website")
        except (FetchError, BotoCoreError) as e:
            logger.warning("%s; treating static website hosting as disabled", e)
            return None
        if response is None:
            return None
        response.pop("ResponseMetadata", None)
        return response

    def fetch_logging(self, bucket: str) -> Optional[dict]:
        return self._call(bucket, "get_bucket_logging").get("LoggingEnabled")

    def fetch_public_access_block(self, bucket: str) -> Optional[dict]:
        response = self._call_optional(bucket, "get_public_access_block")
        if response is None:
            return None
        return response.get("PublicAccessBlockConfiguration")

    def fetch_policy(self, bucket: str) -> Optional[str]:
        response = self._call_optional(bucket, "get_bucket_policy")
        if response is None:
            return None
        return response.get("Policy")
