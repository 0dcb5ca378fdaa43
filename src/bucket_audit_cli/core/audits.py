# src/bucket_audit_cli/core/audits.py
"""
The set of audits enabled for a run.

An AuditSet starts with every concrete audit enabled. Audit.ALL is never stored:
passing it to disable() empties the set, passing it to enable() restores the
full default set. Both operations return a new AuditSet.

Callers that accept both lists apply disable() first, then enable(), so that
`--disable-check all --enable-check acl` audits only the ACL.
"""

from typing import Iterable, Iterator, Optional

from bucket_audit_cli.core.models import Audit


class AuditSet:

    def __init__(self, audits: Optional[Iterable[Audit]] = None):
        if audits is None:
            audits = Audit.concrete()
        self._audits = frozenset(a for a in audits if a is not Audit.ALL)

    @classmethod
    def empty(cls) -> "AuditSet":
        return cls(())

    def disable(self, audits: Optional[Iterable[Audit]]) -> "AuditSet":
        """Remove audits from the set. ALL empties it; absent members are ignored."""
        if audits is None:
            return self
        audits = list(audits)
        if Audit.ALL in audits:
            return AuditSet.empty()
        return AuditSet(self._audits.difference(audits))

    def enable(self, audits: Optional[Iterable[Audit]]) -> "AuditSet":
        """Add audits to the set. ALL restores every audit, discarding earlier disables."""
        if audits is None:
            return self
        audits = list(audits)
        if Audit.ALL in audits:
            return AuditSet()
        return AuditSet(self._audits.union(audits))

    def enabled(self) -> list[Audit]:
        """Enabled audits. Order is unspecified."""
        return list(self._audits)

    def __contains__(self, audit: object) -> bool:
        return audit in self._audits

    def __iter__(self) -> Iterator[Audit]:
        return iter(self._audits)

    def __len__(self) -> int:
        return len(self._audits)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AuditSet):
            return NotImplemented
        return self._audits == other._audits

    def __hash__(self) -> int:
        return hash(self._audits)

    def __repr__(self) -> str:
        names = sorted(a.value for a in self._audits)
        return f"<AuditSet {names}>"
