# src/bucket_audit_cli/core/base_fetcher.py
"""
Abstract base class for bucket configuration fetchers.

The audit core never talks to a cloud API directly. It asks a fetcher for the raw
configuration of one facet of one bucket and classifies what comes back.

┌─────────────────────────────────────────────────────────────┐
│                 CLI / AWSProvider.run_audit                 │
└────────────────────────┬────────────────────────────────────┘
                         │  uses
                         ▼
             ┌──────────────────────┐
             │    BucketAuditor     │  core/orchestrator.py
             └──────────┬───────────┘
                        │  one call per fetch kind
                        ▼
             ┌──────────────────────┐
             │ BucketConfigFetcher  │  ◄── this module
             └──────────────────────┘
                        ▲
             implements │
             ┌──────────────────────┐
             │   S3ConfigFetcher    │  adapters/aws/s3_adapter.py (boto3)
             └──────────────────────┘

A fetcher owns:
  - Routing each call to a region-correct client (resolve_bucket_region).
  - Retries, timeouts and throttling.
  - Turning "not configured" provider errors into None.

Anything else that goes wrong should be raised; the orchestrator turns it into a
BucketAuditError for that bucket and moves on to the next one.
"""

from abc import ABC, abstractmethod
from typing import Optional


class BucketConfigFetcher(ABC):

    @abstractmethod
    def fetch_acl(self, bucket: str) -> list[dict]:
        """ACL grants. An empty list when the bucket has none."""
        ...

    @abstractmethod
    def fetch_encryption(self, bucket: str) -> Optional[dict]:
        """ServerSideEncryptionConfiguration, or None when not configured."""
        ...

    @abstractmethod
    def fetch_versioning(self, bucket: str) -> dict:
        """
        GetBucketVersioning response. Carries both Status and MFADelete; either
        key may be missing.
        """
        ...

    @abstractmethod
    def fetch_website(self, bucket: str) -> Optional[dict]:
        """Website configuration, or None when the bucket does not host a website."""
        ...

    @abstractmethod
    def fetch_logging(self, bucket: str) -> Optional[dict]:
        """The LoggingEnabled block, or None when access logging is off."""
        ...

    @abstractmethod
    def fetch_public_access_block(self, bucket: str) -> Optional[dict]:
        """PublicAccessBlockConfiguration, or None when not configured."""
        ...

    @abstractmethod
    def fetch_policy(self, bucket: str) -> Optional[str]:
        """The bucket policy JSON document, or None when the bucket has no policy."""
        ...

    @abstractmethod
    def resolve_bucket_region(self, bucket: str) -> str:
        """Region the bucket lives in, e.g. "eu-west-1"."""
        ...

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}>"
