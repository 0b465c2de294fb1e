"""Suggest the next migration step from integrity findings and statuses.

Steps are tried in the order an operator works through a migration:

1) create the ledger
2) fix integrity findings
3) track every resource in the state
4) import resources that have no Pulumi state yet
5) converge resources the preview would still change
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from .integrity import CLI_NAME
from .status import NotTracked, Translated, TranslatedStatus, addresses_with, summarize

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .integrity import CheckResult
    from .status import ResourceStatus


class StepKind(StrEnum):
    INIT = "init"
    FIX_INTEGRITY = "fix-integrity"
    TRACK = "track"
    IMPORT = "import"
    CONVERGE = "converge"
    DONE = "done"


@dataclass(frozen=True, slots=True, kw_only=True)
class NextStep:
    kind: StepKind
    message: str
    group: str | None = None
    addresses: tuple[str, ...] = ()
    commands: tuple[str, ...] = ()


def missing_ledger_step(ledger: str) -> NextStep:
    return NextStep(
        kind=StepKind.INIT,
        message=f"Ledger {ledger} does not exist. Draft one from a Terraform state file",
        commands=(
            f"{CLI_NAME} --ledger {ledger!r} init --group <stack> --tf-state <state.json> "
            "--tf-sources <terraform dir> --pulumi-sources <pulumi dir>",
        ),
    )


def next_step(
    check: CheckResult, statuses_by_group: Mapping[str, Mapping[str, ResourceStatus]]
) -> NextStep:
    if check.has_errors:
        suggestions = tuple(error.suggestion for error in check.errors if error.suggestion)
        return NextStep(
            kind=StepKind.FIX_INTEGRITY,
            message=f"Fix {check.count} integrity issue(s) first",
            commands=(f"{CLI_NAME} check", *suggestions[:1]),
        )

    for group, statuses in statuses_by_group.items():
        untracked = addresses_with(statuses, lambda status: isinstance(status, NotTracked))
        if untracked:
            first = untracked[0]
            return NextStep(
                kind=StepKind.TRACK,
                message=(
                    f"{len(untracked)} resource(s) in {group} are not tracked. "
                    "Translate them to Pulumi and record the URN, or skip them"
                ),
                group=group,
                addresses=tuple(untracked),
                commands=(
                    f"{CLI_NAME} set-association --addr {first!r} --urn <urn> --group {group!r}",
                    f"{CLI_NAME} skip --addr {first!r} --group {group!r}",
                ),
            )

    for group, statuses in statuses_by_group.items():
        summary = summarize(statuses)
        if summary.translated[TranslatedStatus.NO_STATE]:
            return NextStep(
                kind=StepKind.IMPORT,
                message=(
                    f"{summary.translated[TranslatedStatus.NO_STATE]} resource(s) in {group} "
                    "have no Pulumi state yet. Resolve the import stubs and import them"
                ),
                group=group,
                addresses=tuple(_with_sub_status(statuses, TranslatedStatus.NO_STATE)),
                commands=(
                    f"{CLI_NAME} resolve-imports --group {group!r}",
                    f"pulumi import --stack {group} --file import-resolved-{group}.json",
                ),
            )

    for group, statuses in statuses_by_group.items():
        changing = [
            *_with_sub_status(statuses, TranslatedStatus.NEEDS_REPLACE),
            *_with_sub_status(statuses, TranslatedStatus.NEEDS_UPDATE),
        ]
        if changing:
            return NextStep(
                kind=StepKind.CONVERGE,
                message=(
                    f"{len(changing)} resource(s) in {group} would still change. "
                    "Adjust the Pulumi program until the preview shows no changes"
                ),
                group=group,
                addresses=tuple(changing),
                commands=(f"{CLI_NAME} compute-diff --group {group!r} --details",),
            )

    return NextStep(
        kind=StepKind.DONE,
        message="Every resource is migrated or skipped",
    )


def _with_sub_status(
    statuses: Mapping[str, ResourceStatus], sub_status: TranslatedStatus
) -> list[str]:
    return addresses_with(
        statuses,
        lambda status: isinstance(status, Translated) and status.sub_status is sub_status,
    )
