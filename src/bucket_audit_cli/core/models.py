

from enum import Enum
from dataclasses import dataclass, field
from typing import Iterator, Optional, Union

from bucket_audit_cli.config import CLOUDFRONT_OAI_PREFIX, WILDCARD
from bucket_audit_cli.core.exceptions import BucketAuditError, UnknownAuditError


class Audit(str, Enum):
    ACL = "acl"
    ALL = "all"
    CLOUDFRONT = "cloudfront"
    LOGGING = "logging"
    MFA_DELETE = "mfa-delete"
    POLICY = "policy"
    PUBLIC_ACCESS_BLOCKS = "public-access-blocks"
    SERVER_SIDE_ENCRYPTION = "server-side-encryption"
    VERSIONING = "versioning"
    WEBSITE = "website"

    @classmethod
    def parse(cls, name: str) -> "Audit":
        """Case-insensitive lookup by canonical name or alias."""
        key = name.strip().lower()
        for audit, aliases in AUDIT_ALIASES.items():
            if key in aliases:
                return audit
        raise UnknownAuditError(name)

    @classmethod
    def concrete(cls) -> list["Audit"]:
        """Every real check category; ALL is a control token only."""
        return [a for a in cls if a is not cls.ALL]


AUDIT_ALIASES: dict[Audit, tuple[str, ...]] = {
    Audit.ACL: ("acl",),
    Audit.ALL: ("all",),
    Audit.CLOUDFRONT: ("cloudfront",),
    Audit.LOGGING: ("logging",),
    Audit.MFA_DELETE: ("mfa-delete", "mfa"),
    Audit.POLICY: ("policy",),
    Audit.PUBLIC_ACCESS_BLOCKS: ("public-access-blocks",),
    Audit.SERVER_SIDE_ENCRYPTION: ("server-side-encryption", "encryption", "sse"),
    Audit.VERSIONING: ("versioning",),
    Audit.WEBSITE: ("website",),
}

# Order in which findings are rendered for a bucket.
REPORT_ORDER: list[Audit] = [
    Audit.PUBLIC_ACCESS_BLOCKS,
    Audit.SERVER_SIDE_ENCRYPTION,
    Audit.VERSIONING,
    Audit.MFA_DELETE,
    Audit.WEBSITE,
    Audit.POLICY,
    Audit.CLOUDFRONT,
    Audit.ACL,
    Audit.LOGGING,
]


# ---------------------------------------------------------------------------
# Findings
# ---------------------------------------------------------------------------

class AclFinding(str, Enum):
    PRIVATE = "private"
    PUBLIC = "public"


class SseType(str, Enum):
    DEFAULT = "AES256"
    KMS = "aws:kms"
    NONE = "None"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class EncryptionFinding:
    sse: SseType
    algorithm: Optional[str] = None

    @classmethod
    def unknown(cls, algorithm: str) -> "EncryptionFinding":
        return cls(SseType.UNKNOWN, algorithm)

    @property
    def label(self) -> str:
        """Algorithm name as reported, verbatim for unknown algorithms."""
        if self.sse is SseType.UNKNOWN:
            return self.algorithm or ""
        return self.sse.value


class VersioningStatus(str, Enum):
    ENABLED = "Enabled"
    SUSPENDED = "Suspended"


class MfaStatus(str, Enum):
    ENABLED = "Enabled"
    DISABLED = "Disabled"


@dataclass(frozen=True)
class VersioningFinding:
    versioning: VersioningStatus
    mfa_delete: MfaStatus


class WebsiteFinding(str, Enum):
    ENABLED = "Enabled"
    DISABLED = "Disabled"


@dataclass(frozen=True)
class LoggingFinding:
    target_bucket: Optional[str] = None

    @classmethod
    def disabled(cls) -> "LoggingFinding":
        return cls(None)

    @property
    def enabled(self) -> bool:
        return self.target_bucket is not None


@dataclass(frozen=True)
class PublicAccessBlockFinding:
    block_public_acls: bool = False
    block_public_policy: bool = False
    ignore_public_acls: bool = False
    restrict_public_buckets: bool = False

    def items(self) -> list[tuple[str, bool]]:
        """The four switches under their AWS names, in display order."""
        return [
            ("BlockPublicAcls", self.block_public_acls),
            ("BlockPublicPolicy", self.block_public_policy),
            ("IgnorePublicAcls", self.ignore_public_acls),
            ("RestrictPublicBuckets", self.restrict_public_buckets),
        ]


@dataclass(frozen=True)
class PolicyFinding:
    """
    Risk signals extracted from the Allow statements of a bucket policy.

    actions and principals are flattened across every Allow statement in the
    document; Deny statements never contribute.
    """
    actions: tuple[str, ...] = ()
    principals: tuple[str, ...] = ()

    def action_wildcards(self) -> int:
        # "*", "s3:*" and "iam:*AccessKey*" all count
        return sum(1 for action in self.actions if WILDCARD in action)

    def principal_wildcards(self) -> int:
        # Only the bare "*" principal means anyone.
        return sum(1 for principal in self.principals if principal == WILDCARD)

    def wildcards(self) -> int:
        return self.action_wildcards() + self.principal_wildcards()

    def cloudfront_distributions(self) -> int:
        return sum(1 for p in self.principals if p.startswith(CLOUDFRONT_OAI_PREFIX))


Finding = Union[
    AclFinding,
    EncryptionFinding,
    LoggingFinding,
    PolicyFinding,
    PublicAccessBlockFinding,
    VersioningFinding,
    WebsiteFinding,
    None,
]


# ---------------------------------------------------------------------------
# Report
# ---------------------------------------------------------------------------

@dataclass
class Report:
    """
    Findings for one bucket, keyed by the audit that produced them.

    A key is present only when that audit ran. For POLICY and CLOUDFRONT a
    present key holding None means the bucket has no policy.
    """
    name: str
    findings: dict[Audit, Finding] = field(default_factory=dict)

    def audited(self, audit: Audit) -> bool:
        return audit in self.findings

    def get(self, audit: Audit) -> Finding:
        return self.findings.get(audit)

    def audits(self) -> Iterator[Audit]:
        """Audits present in this report, in render order."""
        return (a for a in REPORT_ORDER if a in self.findings)


@dataclass
class AuditRun:
    reports: list[Report] = field(default_factory=list)
    failures: list[BucketAuditError] = field(default_factory=list)
    cancelled: bool = False
    account_id: Optional[str] = None
