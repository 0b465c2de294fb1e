"""Integrity guard around ledger mutations."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Generic, TypeVar

from .errors import IntegrityRegressionError

if TYPE_CHECKING:
    from collections.abc import Callable

    from .integrity import CheckResult
    from .model import MigrationLedger

log = getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class MutationReport(Generic[T]):
    ledger: MigrationLedger
    outcome: T
    before: CheckResult
    after: CheckResult

    @property
    def introduced(self) -> int:
        return max(0, self.after.count - self.before.count)

    @property
    def fixed(self) -> int:
        return max(0, self.before.count - self.after.count)


def guarded_mutation(
    ledger: MigrationLedger,
    mutate: Callable[[MigrationLedger], T],
    *,
    check: Callable[[MigrationLedger], CheckResult],
    force: bool = False,
) -> MutationReport[T]:
    """Apply ``mutate`` to a copy of ``ledger`` unless it adds integrity errors.

    The caller's ledger is never modified; the mutated copy is returned in the
    report and is what should be persisted. ``force`` accepts a regression but
    the report still carries the delta.
    """

    before = check(ledger)
    candidate = copy.deepcopy(ledger)
    outcome = mutate(candidate)
    after = check(candidate)

    if after.count > before.count:
        if not force:
            raise IntegrityRegressionError(before=before.count, after=after.count)
        log.warning(
            "Forcing mutation that introduces %d integrity error(s)",
            after.count - before.count,
        )

    return MutationReport(ledger=candidate, outcome=outcome, before=before, after=after)
