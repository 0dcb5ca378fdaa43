# src/bucket_audit_cli/core/checks/policy.py
"""
Bucket policy statement analysis.

A policy document is parsed once and reduced to two risk signals:

  - wildcards                : Allow-statement actions containing "*" anywhere
                               ("*", "s3:*", "iam:*AccessKey*") plus principals that
                               are exactly "*". A principal such as
                               "arn:aws:iam::*:user/*" is NOT a wildcard principal.
  - cloudfront distributions : Allow-statement principals that are CloudFront
                               Origin Access Identities.

Deny statements are skipped entirely: a wildcard in a Deny narrows access.

This is not an IAM evaluator. Conditions, resources and NotAction/NotPrincipal
are ignored.

S3 only ever returns well-formed policies, so a document without a Statement
array or a statement without an Effect raises PolicyParseError rather than being
guessed at.
"""

import json
import logging
from typing import Any, Optional

from bucket_audit_cli.core.exceptions import PolicyParseError
from bucket_audit_cli.core.models import PolicyFinding

logger = logging.getLogger(__name__)

ALLOW = "Allow"
DENY = "Deny"


def _strings(value: Any) -> list[str]:
    """A string or a list of strings, flattened. Any other shape is empty."""
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [v for v in value if isinstance(v, str)]
    return []


def extract_actions(value: Any) -> list[str]:
    """
    Normalise a statement's Action entry.

        "Action": "s3:GetObject"
        "Action": ["s3:GetObject", "s3:*"]
    """
    return _strings(value)


def extract_principals(value: Any) -> list[str]:
    """
    Normalise a statement's Principal entry to a list of AWS principal strings.

        "Principal": "*"
        "Principal": {"AWS": "arn:aws:iam::123456789012:root"}
        "Principal": {"AWS": ["arn:aws:iam::123456789012:root", "*"]}

    Service, Federated and CanonicalUser principals are not of interest.
    """
    if isinstance(value, str):
        return [value]
    if isinstance(value, dict):
        logger.debug("Principal object with keys: %s", sorted(value))
        return _strings(value.get("AWS"))
    return []


def _statement_effect(statement: Any, index: int) -> str:
    if not isinstance(statement, dict):
        raise PolicyParseError(f"Statement {index} is not an object")

    effect = statement.get("Effect")
    if not isinstance(effect, str):
        raise PolicyParseError(f"Statement {index} does not have an explicit Effect")
    if effect not in (ALLOW, DENY):
        raise PolicyParseError(f"Statement {index} has an invalid Effect: {effect!r}")
    return effect


def analyze_policy(document: str) -> PolicyFinding:
    """
    Parse a bucket policy document and collect the actions and principals of
    every Allow statement.

    Raises:
        PolicyParseError: document is not JSON, has no Statement array, or a
                          statement has no Allow/Deny Effect.
    """
    try:
        policy = json.loads(document)
    except (TypeError, ValueError) as e:
        raise PolicyParseError(f"Bucket policy is not valid JSON: {e}") from e

    statements = policy.get("Statement") if isinstance(policy, dict) else None
    if not isinstance(statements, list):
        raise PolicyParseError("Bucket policy has no Statement array")

    actions: list[str] = []
    principals: list[str] = []

    for index, statement in enumerate(statements):
        if _statement_effect(statement, index) == DENY:
            continue

        actions.extend(extract_actions(statement.get("Action")))
        principals.extend(extract_principals(statement.get("Principal")))

    return PolicyFinding(actions=tuple(actions), principals=tuple(principals))


def classify_policy(document: Optional[str]) -> Optional[PolicyFinding]:
    """None when the bucket has no policy, otherwise the analysed policy."""
    if document is None:
        return None
    return analyze_policy(document)
