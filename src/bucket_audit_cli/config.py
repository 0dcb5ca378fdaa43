# src/bucket_audit_cli/config.py
"""
Central configuration for Bucket Audit CLI.
All environment variables, defaults, and AWS constants live here.
"""

import os
from dotenv import load_dotenv

load_dotenv()


# ---------------------------------------------------------------------------
# AWS session defaults
# Overridden by --profile / --region on the command line.
# ---------------------------------------------------------------------------
AWS_PROFILE: str | None = os.getenv("AWS_PROFILE")
DEFAULT_REGION: str = os.getenv("BUCKET_AUDIT_REGION", "us-east-1")

# ---------------------------------------------------------------------------
# Concurrency
# MAX_WORKERS bounds how many buckets are audited at once; FACET_WORKERS bounds
# the concurrent fetches inside a single bucket. Keep both modest, S3 control
# plane calls are rate limited per account.
# ---------------------------------------------------------------------------
MAX_WORKERS: int = int(os.getenv("BUCKET_AUDIT_MAX_WORKERS", "4"))
FACET_WORKERS: int = int(os.getenv("BUCKET_AUDIT_FACET_WORKERS", "4"))

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
LOG_LEVEL: str = os.getenv("BUCKET_AUDIT_LOG_LEVEL", "WARNING")

# ---------------------------------------------------------------------------
# ACL grantee group URIs that make a bucket public.
# ---------------------------------------------------------------------------
PUBLIC_GRANTEE_URIS: tuple[str, ...] = (
    "http://acs.amazonaws.com/groups/global/AllUsers",
    "http://acs.amazonaws.com/groups/global/AuthenticatedUsers",
)

# ---------------------------------------------------------------------------
# Bucket policy principals
# ---------------------------------------------------------------------------
CLOUDFRONT_OAI_PREFIX: str = "arn:aws:iam::cloudfront:user/CloudFront Origin Access Identity "
WILDCARD: str = "*"

# ---------------------------------------------------------------------------
# Server side encryption algorithms
# ---------------------------------------------------------------------------
DEFAULT_SSE_ALGORITHM: str = "AES256"
KMS_SSE_ALGORITHM: str = "aws:kms"

# ---------------------------------------------------------------------------
# GetBucketLocation quirks
# A missing LocationConstraint means us-east-1; "EU" is the legacy name
# for eu-west-1.
# ---------------------------------------------------------------------------
LEGACY_REGION_ALIASES: dict[str, str] = {
    "": "us-east-1",
    "EU": "eu-west-1",
}

# ---------------------------------------------------------------------------
# S3 error codes that mean "this facet is not configured" rather than failure.
# ---------------------------------------------------------------------------
NOT_CONFIGURED_ERROR_CODES: dict[str, str] = {
    "get_bucket_encryption": "ServerSideEncryptionConfigurationNotFoundError",
    "get_public_access_block": "NoSuchPublicAccessBlockConfiguration",
    "get_bucket_policy": "NoSuchBucketPolicy",
    "get_bucket_website": "NoSuchWebsiteConfiguration",
}
