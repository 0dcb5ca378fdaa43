# src/bucket_audit_cli/adapters/aws/aws_provider.py
"""
AWS entry point: credentials, bucket discovery and the audit run.
"""

import logging
from typing import Callable, Iterable, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError

from bucket_audit_cli.adapters.aws.s3_adapter import S3ConfigFetcher
from bucket_audit_cli.config import AWS_PROFILE, DEFAULT_REGION, FACET_WORKERS, MAX_WORKERS
from bucket_audit_cli.core.audits import AuditSet
from bucket_audit_cli.core.models import AuditRun
from bucket_audit_cli.core.orchestrator import BucketAuditor, run_audits

logger = logging.getLogger(__name__)


class AWSProvider:
    """
    Audits S3 buckets in one AWS account.

    Args:
        profile:       Named profile from ~/.aws/config; None uses the default chain.
        region:        Region for STS and bucket discovery. Bucket fetches are routed
                       to each bucket's own region.
        max_workers:   Buckets audited concurrently.
        facet_workers: Concurrent fetches within one bucket.
    """

    def __init__(
        self,
        profile: Optional[str] = AWS_PROFILE,
        region: Optional[str] = None,
        max_workers: int = MAX_WORKERS,
        facet_workers: int = FACET_WORKERS,
    ):
        self.region = region or DEFAULT_REGION
        self.session = boto3.session.Session(profile_name=profile, region_name=self.region)
        self.fetcher = S3ConfigFetcher(self.session, region=self.region)
        self.max_workers = max_workers
        self.facet_workers = facet_workers
        self._account_id: Optional[str] = None

    def validate_credentials(self) -> bool:
        """Checks if the session has valid AWS credentials. Never raises."""
        try:
            sts = self.session.client("sts", region_name=self.region)
            identity = sts.get_caller_identity()
            self._account_id = identity["Account"]
            return True
        except (NoCredentialsError, ClientError, BotoCoreError) as e:
            logger.debug("Credential check failed: %s", e)
            return False

    def get_account_id(self) -> str:
        if not self._account_id:
            self.validate_credentials()
        return self._account_id or "unknown"

    def list_buckets(self) -> list[str]:
        return self.fetcher.list_buckets()

    def run_audit(
        self,
        buckets: Optional[Iterable[str]],
        audits: AuditSet,
        progress_callback: Optional[Callable[[str, int, int], None]] = None,
    ) -> AuditRun:
        """
        Audit the given buckets, or every bucket in the account when none are given.
        """
        names = list(buckets) if buckets else self.list_buckets()
        logger.info("Auditing %d bucket(s) with checks: %s", len(names),
                    ", ".join(sorted(a.value for a in audits)))

        auditor = BucketAuditor(self.fetcher, max_workers=self.facet_workers)
        run = run_audits(
            names,
            audits.enabled(),
            auditor,
            max_workers=self.max_workers,
            progress_callback=progress_callback,
        )
        run.account_id = self.get_account_id()
        return run
