import csv
import io
from typing import Iterable, Optional, TextIO

from rich.markup import escape

from bucket_audit_cli.core.models import (
    AclFinding,
    Audit,
    EncryptionFinding,
    LoggingFinding,
    MfaStatus,
    PolicyFinding,
    PublicAccessBlockFinding,
    Report,
    SseType,
    VersioningFinding,
    VersioningStatus,
    WebsiteFinding,
)

# glyph, rich colour
SYMBOLS: dict[str, tuple[str, str]] = {
    "arrow": ("❯", "yellow"),
    "cross": ("✖", "red"),
    "info": ("🛈", "cyan"),
    "tick": ("✔", "green"),
    "warning": ("⚠️", "cyan"),
}

HEADER_INDENT = "  "
FINDING_INDENT = "    "
BLOCK_INDENT = "      "


def _symbol(name: str, coloured: bool) -> str:
    glyph, colour = SYMBOLS[name]
    if coloured:
        return f"[{colour}]{glyph}[/{colour}]"
    return glyph


def _tick_or_cross(ok: bool, coloured: bool) -> str:
    return _symbol("tick" if ok else "cross", coloured)


def _text(value: str, coloured: bool) -> str:
    return escape(value) if coloured else value


def _plural(count: int) -> str:
    return "s" if count > 1 else ""


# ---------------------------------------------------------------------------
# Text: one function per facet, each returning the line body (no indent)
# ---------------------------------------------------------------------------

def _encryption_line(finding: EncryptionFinding, coloured: bool) -> str:
    if finding.sse is SseType.DEFAULT:
        return f"{_symbol('info', coloured)} Server side encryption enabled using the default AES256 algorithm"
    if finding.sse is SseType.KMS:
        return f"{_symbol('tick', coloured)} Server side encryption enabled using KMS"
    if finding.sse is SseType.NONE:
        return f"{_symbol('cross', coloured)} Server side encryption is not enabled"
    return (
        f"{_symbol('warning', coloured)} Server side encryption using unknown algorithm: "
        f"{_text(finding.label, coloured)}"
    )


def _versioning_line(finding: VersioningFinding, coloured: bool) -> str:
    if finding.versioning is VersioningStatus.ENABLED:
        return f"{_symbol('tick', coloured)} Object Versioning is enabled"
    return f"{_symbol('cross', coloured)} Object Versioning is not enabled"


def _mfa_delete_line(finding: VersioningFinding, coloured: bool) -> str:
    if finding.mfa_delete is MfaStatus.ENABLED:
        return f"{_symbol('tick', coloured)} MFA Delete is enabled"
    return f"{_symbol('cross', coloured)} MFA Delete is not enabled"


def _website_line(finding: WebsiteFinding, coloured: bool) -> str:
    if finding is WebsiteFinding.ENABLED:
        return f"{_symbol('warning', coloured)} Static website hosting is enabled"
    return f"{_symbol('tick', coloured)} Static website hosting is disabled"


def _policy_line(finding: Optional[PolicyFinding], coloured: bool) -> str:
    if finding is None:
        return f"{_symbol('info', coloured)} No bucket policy set"
    count = finding.wildcards()
    if count == 0:
        return f"{_symbol('tick', coloured)} Bucket policy doesn't allow a wildcard entity"
    return f"{_symbol('cross', coloured)} Bucket has {count} statement{_plural(count)} with wildcard entities"


def _cloudfront_line(finding: Optional[PolicyFinding], coloured: bool) -> str:
    count = finding.cloudfront_distributions() if finding is not None else 0
    if count == 0:
        return f"{_symbol('tick', coloured)} Bucket is not associated with any CloudFront distributions"
    return (
        f"{_symbol('cross', coloured)} Bucket is associated with {count} "
        f"CloudFront distribution{_plural(count)}"
    )


def _acl_line(finding: AclFinding, coloured: bool) -> str:
    if finding is AclFinding.PUBLIC:
        return f"{_symbol('warning', coloured)} Bucket allows public access via ACL"
    return (
        f"{_symbol('tick', coloured)} Bucket ACL doesn't allow access to 'Everyone' "
        "or 'Any authenticated AWS user'"
    )


def _logging_line(finding: LoggingFinding, coloured: bool) -> str:
    if finding.enabled:
        return f"{_symbol('tick', coloured)} Logging to {_text(finding.target_bucket, coloured)}"
    return f"{_symbol('cross', coloured)} Logging is not enabled"


def _public_access_block_lines(finding: PublicAccessBlockFinding, coloured: bool) -> list[str]:
    lines = [f"{FINDING_INDENT}{_symbol('arrow', coloured)} Bucket public access configuration"]
    for name, value in finding.items():
        lines.append(f"{BLOCK_INDENT}{_tick_or_cross(value, coloured)} {name} is set to {str(value).lower()}")
    return lines


TEXT_LINES = {
    Audit.SERVER_SIDE_ENCRYPTION: _encryption_line,
    Audit.VERSIONING: _versioning_line,
    Audit.MFA_DELETE: _mfa_delete_line,
    Audit.WEBSITE: _website_line,
    Audit.POLICY: _policy_line,
    Audit.CLOUDFRONT: _cloudfront_line,
    Audit.ACL: _acl_line,
    Audit.LOGGING: _logging_line,
}


def format_report_text(report: Report, coloured: bool = False) -> list[str]:
    """Lines for one bucket. Audits that did not run are skipped."""
    name = f"[bold blue]{escape(report.name)}[/bold blue]" if coloured else report.name
    lines = [f"{HEADER_INDENT}{_symbol('arrow', coloured)} {name}"]

    for audit in report.audits():
        finding = report.get(audit)
        if audit is Audit.PUBLIC_ACCESS_BLOCKS:
            lines.extend(_public_access_block_lines(finding, coloured))
        else:
            lines.append(f"{FINDING_INDENT}{TEXT_LINES[audit](finding, coloured)}")
    return lines


def format_as_text(reports: Iterable[Report], coloured: bool = False) -> str:
    """
    Human readable output for every report.

    With coloured=True the lines carry rich markup and must be printed through
    a rich Console; otherwise they are plain text.
    """
    output = []
    for report in reports:
        output.extend(format_report_text(report, coloured))
    return "\n".join(output)


# ---------------------------------------------------------------------------
# CSV
# ---------------------------------------------------------------------------

CSV_COLUMNS: list[str] = [
    "name",
    "acl",
    "block_public_acls",
    "block_public_policy",
    "encryption",
    "ignore_public_acls",
    "logging",
    "mfa_delete",
    "policy_wildcard_principals",
    "cloudfront_distributions",
    "restrict_public_buckets",
    "versioning",
    "website",
]


def _csv_bool(value: bool) -> str:
    return "true" if value else "false"


def csv_row(report: Report) -> dict[str, str]:
    """Flatten a report into CSV cells. Cells of audits that did not run stay empty."""
    row = {column: "" for column in CSV_COLUMNS}
    row["name"] = report.name

    for audit in report.audits():
        finding = report.get(audit)

        if audit is Audit.ACL:
            row["acl"] = finding.value
        elif audit is Audit.PUBLIC_ACCESS_BLOCKS:
            row["block_public_acls"] = _csv_bool(finding.block_public_acls)
            row["block_public_policy"] = _csv_bool(finding.block_public_policy)
            row["ignore_public_acls"] = _csv_bool(finding.ignore_public_acls)
            row["restrict_public_buckets"] = _csv_bool(finding.restrict_public_buckets)
        elif audit is Audit.SERVER_SIDE_ENCRYPTION:
            row["encryption"] = finding.label
        elif audit is Audit.LOGGING:
            row["logging"] = _csv_bool(finding.enabled)
        elif audit is Audit.MFA_DELETE:
            row["mfa_delete"] = _csv_bool(finding.mfa_delete is MfaStatus.ENABLED)
        elif audit is Audit.VERSIONING:
            row["versioning"] = _csv_bool(finding.versioning is VersioningStatus.ENABLED)
        elif audit is Audit.POLICY:
            row["policy_wildcard_principals"] = _csv_bool(finding is not None and finding.wildcards() > 0)
        elif audit is Audit.CLOUDFRONT:
            row["cloudfront_distributions"] = str(finding.cloudfront_distributions() if finding else 0)
        elif audit is Audit.WEBSITE:
            row["website"] = _csv_bool(finding is WebsiteFinding.ENABLED)

    return row


class CsvReportWriter:
    """
    Writes reports as CSV rows to one stream.

    The header is written once, before the first row, however many reports pass
    through. Use a single writer for a whole run.
    """

    def __init__(self, stream: TextIO):
        self._writer = csv.DictWriter(stream, fieldnames=CSV_COLUMNS, lineterminator="\n")
        self._header_written = False

    def write_header(self) -> None:
        if not self._header_written:
            self._writer.writeheader()
            self._header_written = True

    def write(self, report: Report) -> None:
        self.write_header()
        self._writer.writerow(csv_row(report))

    def write_all(self, reports: Iterable[Report]) -> None:
        self.write_header()
        for report in reports:
            self.write(report)


def format_as_csv(reports: Iterable[Report]) -> str:
    buffer = io.StringIO()
    CsvReportWriter(buffer).write_all(reports)
    return buffer.getvalue()
