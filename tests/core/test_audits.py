import unittest

from bucket_audit_cli.core.audits import AuditSet
from bucket_audit_cli.core.models import Audit


class TestAuditSetDefaults(unittest.TestCase):
    def test_default_set_is_every_concrete_audit(self):
        self.assertEqual(set(AuditSet().enabled()), set(Audit.concrete()))
        self.assertNotIn(Audit.ALL, AuditSet())
        self.assertEqual(len(AuditSet()), 9)

    def test_all_is_never_stored(self):
        audits = AuditSet([Audit.ALL, Audit.ACL])
        self.assertEqual(set(audits.enabled()), {Audit.ACL})

    def test_none_input_is_a_no_op(self):
        self.assertEqual(
            set(AuditSet().disable(None).enable(None).enabled()),
            set(AuditSet().enabled()),
        )


class TestAuditSetDisable(unittest.TestCase):
    def test_disable_all_empties_the_set_whatever_else_is_listed(self):
        for extra in ([], [Audit.ACL], [Audit.POLICY, Audit.WEBSITE]):
            self.assertEqual(AuditSet().disable([*extra, Audit.ALL]).enabled(), [])
            self.assertEqual(AuditSet().disable([Audit.ALL, *extra]).enabled(), [])

    def test_disable_removes_named_audits(self):
        audits = AuditSet().disable([Audit.ACL, Audit.LOGGING])
        self.assertNotIn(Audit.ACL, audits)
        self.assertNotIn(Audit.LOGGING, audits)
        self.assertIn(Audit.POLICY, audits)
        self.assertEqual(len(audits), 7)

    def test_disabling_an_absent_audit_is_not_an_error(self):
        audits = AuditSet.empty().disable([Audit.ACL])
        self.assertEqual(audits.enabled(), [])

    def test_disable_does_not_mutate_the_original(self):
        original = AuditSet()
        original.disable([Audit.ACL])
        self.assertIn(Audit.ACL, original)


class TestAuditSetEnable(unittest.TestCase):
    def test_enable_all_restores_the_default_set_after_disables(self):
        audits = AuditSet().disable([Audit.ALL]).enable([Audit.ACL, Audit.ALL])
        self.assertEqual(set(audits.enabled()), set(Audit.concrete()))

    def test_enable_is_idempotent(self):
        audits = AuditSet.empty().enable([Audit.ACL]).enable([Audit.ACL])
        self.assertEqual(audits.enabled(), [Audit.ACL])

    def test_disable_then_enable_composes(self):
        audits = AuditSet().disable([Audit.ALL]).enable([Audit.POLICY, Audit.VERSIONING])
        self.assertEqual(set(audits.enabled()), {Audit.POLICY, Audit.VERSIONING})

    def test_equality_ignores_order(self):
        self.assertEqual(
            AuditSet([Audit.ACL, Audit.WEBSITE]),
            AuditSet([Audit.WEBSITE, Audit.ACL]),
        )


if __name__ == '__main__':
    unittest.main()
