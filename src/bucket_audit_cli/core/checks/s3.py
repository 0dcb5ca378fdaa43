"""
S3 finding classifiers.

Each function takes the raw configuration returned by a BucketConfigFetcher and
returns a finding. They do no I/O. Missing configuration always classifies as the
safe/disabled variant; the only value carried through verbatim is an unknown
server side encryption algorithm.
"""

from typing import Any, Optional

from bucket_audit_cli.config import (
    DEFAULT_SSE_ALGORITHM,
    KMS_SSE_ALGORITHM,
    PUBLIC_GRANTEE_URIS,
)
from bucket_audit_cli.core.models import (
    AclFinding,
    EncryptionFinding,
    LoggingFinding,
    MfaStatus,
    PublicAccessBlockFinding,
    SseType,
    VersioningFinding,
    VersioningStatus,
    WebsiteFinding,
)


def classify_acl(grants: Optional[list[dict]]) -> AclFinding:
    """Public if any grant goes to the AllUsers or AuthenticatedUsers groups."""
    for grant in grants or []:
        uri = (grant.get("Grantee") or {}).get("URI")
        if uri in PUBLIC_GRANTEE_URIS:
            return AclFinding.PUBLIC
    return AclFinding.PRIVATE


def classify_encryption(config: Optional[dict]) -> EncryptionFinding:
    """
    Classify the first default encryption rule.

    Args:
        config: ServerSideEncryptionConfiguration, or None when the bucket has none.
    """
    rules = (config or {}).get("Rules") or []
    if not rules:
        return EncryptionFinding(SseType.NONE)

    default = rules[0].get("ApplyServerSideEncryptionByDefault") or {}
    algorithm = default.get("SSEAlgorithm")

    if not algorithm:
        return EncryptionFinding(SseType.NONE)
    if algorithm == DEFAULT_SSE_ALGORITHM:
        return EncryptionFinding(SseType.DEFAULT)
    if algorithm == KMS_SSE_ALGORITHM:
        return EncryptionFinding(SseType.KMS)
    return EncryptionFinding.unknown(algorithm)


def classify_versioning(response: Optional[dict]) -> VersioningFinding:
    """
    Versioning and MFA Delete from one GetBucketVersioning response.

    A bucket that never had versioning has no Status; that reads as Suspended.
    """
    response = response or {}

    versioning = (
        VersioningStatus.ENABLED
        if response.get("Status") == VersioningStatus.ENABLED.value
        else VersioningStatus.SUSPENDED
    )
    mfa_delete = (
        MfaStatus.ENABLED
        if response.get("MFADelete") == MfaStatus.ENABLED.value
        else MfaStatus.DISABLED
    )
    return VersioningFinding(versioning=versioning, mfa_delete=mfa_delete)


def classify_website(config: Optional[dict]) -> WebsiteFinding:
    # Any successful fetch means hosting is on, whatever the document holds.
    if config is None:
        return WebsiteFinding.DISABLED
    return WebsiteFinding.ENABLED


def classify_logging(logging_enabled: Optional[dict]) -> LoggingFinding:
    if not logging_enabled:
        return LoggingFinding.disabled()
    return LoggingFinding(target_bucket=logging_enabled.get("TargetBucket", ""))


def classify_public_access_block(config: Optional[dict[str, Any]]) -> PublicAccessBlockFinding:
    """All four switches default to False when no configuration exists."""
    config = config or {}
    return PublicAccessBlockFinding(
        block_public_acls=bool(config.get("BlockPublicAcls", False)),
        block_public_policy=bool(config.get("BlockPublicPolicy", False)),
        ignore_public_acls=bool(config.get("IgnorePublicAcls", False)),
        restrict_public_buckets=bool(config.get("RestrictPublicBuckets", False)),
    )
