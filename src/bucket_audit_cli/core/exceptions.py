# src/bucket_audit_cli/core/exceptions.py
"""
Error taxonomy for bucket audits.

  - UnknownAuditError : a check name on the command line that does not map to an Audit.
  - PolicyParseError  : a bucket policy document that breaks the provider contract
                        (bad JSON, no Statement array, statement without an Effect).
  - FetchError        : the provider call itself failed (permissions, throttling, ...).
  - BucketAuditError  : wraps any of the above for one bucket and one facet so a
                        multi-bucket run can report it and carry on.

Absence of configuration (no encryption rule, no policy, no public access block...)
is never an error; classifiers map it to the "disabled" finding.
"""

from typing import Optional


class AuditError(Exception):
    """Base class for every error raised by the audit core."""


class UnknownAuditError(AuditError, ValueError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown audit: {name!r}")


class PolicyParseError(AuditError):
    """The bucket policy document is not the shape the provider guarantees."""


class FetchError(AuditError):
    def __init__(self, bucket: str, operation: str, code: str = "", message: str = ""):
        self.bucket = bucket
        self.operation = operation
        self.code = code
        detail = f"{code}: {message}" if code else message
        super().__init__(f"{operation} failed for bucket '{bucket}' ({detail})")


class BucketAuditError(AuditError):
    """
    A single bucket's audit was aborted.

    Attributes:
        bucket: The bucket being audited.
        facet:  The configuration facet (fetch kind) that failed, e.g. "policy".
        cause:  The original exception.
    """

    def __init__(self, bucket: str, facet: str, cause: Optional[BaseException] = None):
        self.bucket = bucket
        self.facet = facet
        self.cause = cause
        reason = f": {cause}" if cause else ""
        super().__init__(f"Audit of '{facet}' failed for bucket '{bucket}'{reason}")
