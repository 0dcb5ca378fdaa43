# src/bucket_audit_cli/core/orchestrator.py
"""
Audit orchestration.

BucketAuditor turns an enabled audit set into the minimum number of fetches for a
bucket. Several audits can be answered by the same fetch:

    Audit.VERSIONING, Audit.MFA_DELETE  ->  FetchKind.VERSIONING
    Audit.POLICY, Audit.CLOUDFRONT      ->  FetchKind.POLICY

Each fetch kind is fetched and classified at most once per bucket and its finding
is stored under every enabled audit that maps to it.

run_audits() fans BucketAuditor.run_report() out over many buckets. Buckets share
no state, so they run in a thread pool; reports come back in input order.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from enum import Enum
from typing import Callable, Iterable, Optional

from bucket_audit_cli.core.base_fetcher import BucketConfigFetcher
from bucket_audit_cli.core.checks.policy import classify_policy
from bucket_audit_cli.core.checks.s3 import (
    classify_acl,
    classify_encryption,
    classify_logging,
    classify_public_access_block,
    classify_versioning,
    classify_website,
)
from bucket_audit_cli.core.exceptions import BucketAuditError
from bucket_audit_cli.core.models import REPORT_ORDER, Audit, AuditRun, Finding, Report

logger = logging.getLogger(__name__)


class FetchKind(str, Enum):
    PUBLIC_ACCESS_BLOCK = "public-access-block"
    ENCRYPTION = "encryption"
    VERSIONING = "versioning"
    WEBSITE = "website"
    POLICY = "policy"
    ACL = "acl"
    LOGGING = "logging"


AUDIT_FETCH_KIND: dict[Audit, FetchKind] = {
    Audit.ACL: FetchKind.ACL,
    Audit.CLOUDFRONT: FetchKind.POLICY,
    Audit.LOGGING: FetchKind.LOGGING,
    Audit.MFA_DELETE: FetchKind.VERSIONING,
    Audit.POLICY: FetchKind.POLICY,
    Audit.PUBLIC_ACCESS_BLOCKS: FetchKind.PUBLIC_ACCESS_BLOCK,
    Audit.SERVER_SIDE_ENCRYPTION: FetchKind.ENCRYPTION,
    Audit.VERSIONING: FetchKind.VERSIONING,
    Audit.WEBSITE: FetchKind.WEBSITE,
}

# FetchKind -> (fetcher method name, classifier)
FETCH_STEPS: dict[FetchKind, tuple[str, Callable[..., Finding]]] = {
    FetchKind.ACL: ("fetch_acl", classify_acl),
    FetchKind.ENCRYPTION: ("fetch_encryption", classify_encryption),
    FetchKind.LOGGING: ("fetch_logging", classify_logging),
    FetchKind.POLICY: ("fetch_policy", classify_policy),
    FetchKind.PUBLIC_ACCESS_BLOCK: ("fetch_public_access_block", classify_public_access_block),
    FetchKind.VERSIONING: ("fetch_versioning", classify_versioning),
    FetchKind.WEBSITE: ("fetch_website", classify_website),
}


def fetch_kinds_for(audits: Iterable[Audit]) -> list[FetchKind]:
    """Distinct fetches needed for these audits, in FetchKind declaration order."""
    needed = {AUDIT_FETCH_KIND[a] for a in audits if a is not Audit.ALL}
    return [kind for kind in FetchKind if kind in needed]


class BucketAuditor:
    """
    Audits a single bucket through a BucketConfigFetcher.

    Args:
        fetcher:     Supplies raw configuration per facet.
        max_workers: Upper bound on concurrent fetches for one bucket. 1 fetches
                     sequentially.
    """

    def __init__(self, fetcher: BucketConfigFetcher, max_workers: int = 1):
        self.fetcher = fetcher
        self.max_workers = max(1, max_workers)

    def _fetch(self, bucket: str, kind: FetchKind) -> Finding:
        method_name, classify = FETCH_STEPS[kind]
        try:
            raw = getattr(self.fetcher, method_name)(bucket)
            return classify(raw)
        except Exception as e:
            raise BucketAuditError(bucket, kind.value, e) from e

    def run_report(self, bucket: str, audits: Iterable[Audit]) -> Report:
        """
        Build the Report for one bucket.

        Only audits in `audits` get a slot in the report.

        Raises:
            BucketAuditError: a fetch or classification failed. When several fail
                              the first in FetchKind order is raised.
        """
        wanted = set(audits)
        audits = [a for a in REPORT_ORDER if a in wanted]
        kinds = fetch_kinds_for(audits)
        logger.debug("Auditing %s: %s", bucket, ", ".join(k.value for k in kinds))

        if self.max_workers > 1 and len(kinds) > 1:
            with ThreadPoolExecutor(max_workers=min(self.max_workers, len(kinds))) as pool:
                futures = {kind: pool.submit(self._fetch, bucket, kind) for kind in kinds}
                results = {kind: futures[kind].result() for kind in kinds}
        else:
            results = {kind: self._fetch(bucket, kind) for kind in kinds}

        findings = {audit: results[AUDIT_FETCH_KIND[audit]] for audit in audits}
        return Report(name=bucket, findings=findings)


def run_audits(
    buckets: Iterable[str],
    audits: Iterable[Audit],
    auditor: BucketAuditor,
    max_workers: int = 1,
    progress_callback: Optional[Callable[[str, int, int], None]] = None,
) -> AuditRun:
    """
    Audit many buckets concurrently.

    Args:
        buckets:           Bucket names; duplicates are audited once.
        audits:            Enabled audits (an AuditSet or any iterable of Audit).
        auditor:           Per-bucket auditor.
        max_workers:       Buckets audited at the same time.
        progress_callback: Optional callable(bucket: str, done: int, total: int)
                           invoked as each bucket finishes.

    Returns:
        An AuditRun with reports in input order and one BucketAuditError per
        failed bucket. On Ctrl-C no new buckets are started, buckets already in
        flight are allowed to finish, and the run is marked cancelled.
    """
    names = list(dict.fromkeys(buckets))
    enabled = list(audits)
    run = AuditRun()
    if not names:
        return run

    completed: dict[str, Report] = {}
    failed: dict[str, BucketAuditError] = {}

    def collect(name, future):
        try:
            completed[name] = future.result()
        except BucketAuditError as e:
            logger.debug("%s", e)
            failed[name] = e

    pool = ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(names))))
    futures = {pool.submit(auditor.run_report, name, enabled): name for name in names}
    try:
        for done, future in enumerate(as_completed(futures), start=1):
            name = futures[future]
            collect(name, future)
            if progress_callback:
                progress_callback(name, done, len(names))
    except KeyboardInterrupt:
        logger.warning("Interrupted, waiting for in-flight buckets to finish")
        run.cancelled = True
        pool.shutdown(wait=True, cancel_futures=True)
        for future, name in futures.items():
            if future.done() and not future.cancelled() and name not in completed and name not in failed:
                collect(name, future)
    finally:
        pool.shutdown(wait=True)

    run.reports = [completed[n] for n in names if n in completed]
    run.failures = [failed[n] for n in names if n in failed]
    return run
