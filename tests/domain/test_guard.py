from __future__ import annotations

from functools import partial

import pytest

from statebridge.domain.errors import IntegrityRegressionError
from statebridge.domain.guard import guarded_mutation
from statebridge.domain.integrity import check_integrity
from statebridge.domain.mapping import set_association
from tests.helpers.ledgers import FakeInventory, active, make_group, make_ledger, make_urn

_check = partial(check_integrity, read_inventory=FakeInventory({}))


def test_mutation_introducing_duplicate_is_refused() -> None:
    taken = make_urn("dev", "taken")
    ledger = make_ledger(make_group("dev", active("x.a", taken), active("x.b")))

    with pytest.raises(IntegrityRegressionError) as excinfo:
        guarded_mutation(
            ledger, partial(set_association, address="x.b", identifier=taken), check=_check
        )

    assert excinfo.value.before == 0
    assert excinfo.value.after == 1
    assert "--force" in str(excinfo.value)
    assert ledger.groups[0].entries[1].target_identifier is None


def test_forced_mutation_reports_introduced_errors() -> None:
    taken = make_urn("dev", "taken")
    ledger = make_ledger(make_group("dev", active("x.a", taken), active("x.b")))

    report = guarded_mutation(
        ledger,
        partial(set_association, address="x.b", identifier=taken),
        check=_check,
        force=True,
    )

    assert report.outcome == 1
    assert report.introduced == 1
    assert report.fixed == 0
    assert report.ledger.groups[0].entries[1].target_identifier == taken
    assert ledger.groups[0].entries[1].target_identifier is None


def test_mutation_that_fixes_errors_reports_delta() -> None:
    taken = make_urn("dev", "taken")
    ledger = make_ledger(make_group("dev", active("x.a", taken), active("x.b", taken)))

    report = guarded_mutation(
        ledger,
        partial(set_association, address="x.b", identifier=make_urn("dev", "other")),
        check=_check,
    )

    assert report.fixed == 1
    assert report.introduced == 0
    assert not report.after.has_errors
