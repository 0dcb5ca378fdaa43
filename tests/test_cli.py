import csv
import io
import unittest
from unittest.mock import patch

from click.testing import CliRunner

from bucket_audit_cli.cli import cli
from bucket_audit_cli.core.audits import AuditSet
from bucket_audit_cli.core.exceptions import BucketAuditError, PolicyParseError
from bucket_audit_cli.core.models import AclFinding, Audit, AuditRun, Report, WebsiteFinding
from bucket_audit_cli.utils.formatters import CSV_COLUMNS


def acl_report(name: str) -> Report:
    return Report(name=name, findings={Audit.ACL: AclFinding.PRIVATE})


class CliTestCase(unittest.TestCase):
    def setUp(self):
        patcher = patch("bucket_audit_cli.cli.AWSProvider")
        self.provider_cls = patcher.start()
        self.addCleanup(patcher.stop)
        self.provider = self.provider_cls.return_value
        self.provider.validate_credentials.return_value = True
        self.provider.run_audit.return_value = AuditRun(reports=[acl_report("a"), acl_report("b")])
        self.runner = CliRunner()

    def invoke(self, *args):
        return self.runner.invoke(cli, list(args))

    def audits_passed(self) -> AuditSet:
        return self.provider.run_audit.call_args.args[1]


class TestAuditCommand(CliTestCase):
    def test_text_output(self):
        result = self.invoke("audit", "--no-color")

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("  ❯ a", result.output)
        self.assertIn("  ❯ b", result.output)
        self.assertIn("Bucket ACL doesn't allow access", result.output)

    def test_text_output_names_the_account(self):
        self.provider.run_audit.return_value = AuditRun(reports=[acl_report("a")], account_id="123456789012")
        result = self.invoke("audit", "--no-color")

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Audit complete for account: 123456789012", result.output)

    def test_csv_output_has_no_account_line(self):
        self.provider.run_audit.return_value = AuditRun(reports=[acl_report("a")], account_id="123456789012")
        result = self.invoke("audit", "--format", "csv")
        self.assertNotIn("123456789012", result.output)

    def test_csv_has_a_single_header(self):
        result = self.invoke("audit", "--format", "csv")

        self.assertEqual(result.exit_code, 0, result.output)
        rows = list(csv.reader(io.StringIO(result.output)))
        self.assertEqual(rows[0], CSV_COLUMNS)
        self.assertEqual([r[0] for r in rows[1:]], ["a", "b"])
        self.assertEqual(sum(1 for r in rows if r == CSV_COLUMNS), 1)

    def test_csv_to_file(self):
        with self.runner.isolated_filesystem():
            result = self.invoke("audit", "--format", "csv", "-o", "report.csv")
            with open("report.csv", encoding="utf-8") as f:
                lines = f.read().splitlines()

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(lines[0], ",".join(CSV_COLUMNS))
        self.assertEqual(len(lines), 3)

    def test_every_check_enabled_by_default(self):
        self.invoke("audit")
        self.assertEqual(self.audits_passed(), AuditSet())

    def test_disable_all_then_enable_one(self):
        result = self.invoke("audit", "-d", "all", "-e", "acl")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(self.audits_passed().enabled(), [Audit.ACL])

    def test_comma_separated_aliases(self):
        self.invoke("audit", "-d", "mfa,sse,website")
        enabled = self.audits_passed()
        self.assertNotIn(Audit.MFA_DELETE, enabled)
        self.assertNotIn(Audit.SERVER_SIDE_ENCRYPTION, enabled)
        self.assertNotIn(Audit.WEBSITE, enabled)
        self.assertIn(Audit.VERSIONING, enabled)

    def test_buckets_are_passed_through(self):
        self.invoke("audit", "-b", "one", "-b", "two")
        self.assertEqual(list(self.provider.run_audit.call_args.args[0]), ["one", "two"])

    def test_unknown_check_is_a_usage_error(self):
        result = self.invoke("audit", "-e", "nope")
        self.assertEqual(result.exit_code, 2)
        self.provider.run_audit.assert_not_called()

    def test_invalid_credentials(self):
        self.provider.validate_credentials.return_value = False
        result = self.invoke("audit")
        self.assertEqual(result.exit_code, 1)
        self.provider.run_audit.assert_not_called()

    def test_failed_bucket_exits_non_zero_but_reports_the_rest(self):
        failure = BucketAuditError("bad", "policy", PolicyParseError("no Statement"))
        self.provider.run_audit.return_value = AuditRun(reports=[acl_report("good")], failures=[failure])

        result = self.invoke("audit", "--no-color")

        self.assertEqual(result.exit_code, 1)
        self.assertIn("  ❯ good", result.output)

    def test_cancelled_run(self):
        self.provider.run_audit.return_value = AuditRun(
            reports=[Report(name="a", findings={Audit.WEBSITE: WebsiteFinding.DISABLED})], cancelled=True)
        result = self.invoke("audit", "--no-color")
        self.assertEqual(result.exit_code, 130)


class TestListChecks(CliTestCase):
    def test_lists_every_check(self):
        result = self.invoke("list-checks")

        self.assertEqual(result.exit_code, 0, result.output)
        for audit in Audit:
            self.assertIn(audit.value, result.output)


if __name__ == '__main__':
    unittest.main()
