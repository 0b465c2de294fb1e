"""Per-resource migration status derived from inventory, ledger and preview.

Every inventory address receives exactly one status. Classification is
stateless: each address is evaluated on its own, in this priority order:

1) no ledger entry -> ``NotTracked``
2) entry with a disposition -> ``Skipped``
3) active entry without identifier -> ``NotTracked``
4) active entry with identifier -> ``Translated`` with a sub-status taken
   from the preview map (absent -> no-state)
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Literal, TypeAlias, assert_never

from .mapping import find_entry

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping

    from .model import MappingEntry, MigrationGroup, ResourceDescriptor


class PreviewOp(StrEnum):
    """Pending change the target system reports for one resource."""

    SAME = "same"
    CREATE = "create"
    UPDATE = "update"
    REPLACE = "replace"
    DELETE = "delete"

    @property
    def will_replace(self) -> bool:
        return self is PreviewOp.REPLACE

    @property
    def will_update(self) -> bool:
        return self is PreviewOp.UPDATE

    @property
    def will_not_change(self) -> bool:
        return self is PreviewOp.SAME


class TranslatedStatus(StrEnum):
    NO_STATE = "no-state"
    NEEDS_UPDATE = "needs-update"
    NEEDS_REPLACE = "needs-replace"
    MIGRATED = "migrated"


@dataclass(frozen=True, slots=True)
class Skipped:
    kind: Literal["skipped"] = "skipped"


@dataclass(frozen=True, slots=True)
class NotTracked:
    kind: Literal["not-tracked"] = "not-tracked"


@dataclass(frozen=True, slots=True)
class Translated:
    target_identifier: str
    sub_status: TranslatedStatus
    kind: Literal["translated"] = "translated"


ResourceStatus: TypeAlias = "Skipped | NotTracked | Translated"


def translated_status_for(op: PreviewOp | None) -> TranslatedStatus:
    if op is None:
        return TranslatedStatus.NO_STATE
    if op.will_replace:
        return TranslatedStatus.NEEDS_REPLACE
    if op.will_update:
        return TranslatedStatus.NEEDS_UPDATE
    if op.will_not_change:
        return TranslatedStatus.MIGRATED
    # create/delete: not distinguished yet, see DESIGN.md
    return TranslatedStatus.NEEDS_UPDATE


def classify_resource(
    entry: MappingEntry | None, preview: Mapping[str, PreviewOp]
) -> ResourceStatus:
    if entry is None:
        return NotTracked()
    if not entry.is_active:
        return Skipped()
    if not entry.target_identifier:
        return NotTracked()
    op = preview.get(entry.target_identifier)
    return Translated(
        target_identifier=entry.target_identifier,
        sub_status=translated_status_for(op),
    )


def reconcile_statuses(
    inventory: Iterable[ResourceDescriptor],
    group: MigrationGroup,
    preview: Mapping[str, PreviewOp],
) -> dict[str, ResourceStatus]:
    """Classify every inventory address, preserving inventory order."""

    return {
        resource.address: classify_resource(find_entry(group, resource.address), preview)
        for resource in inventory
    }


@dataclass(slots=True)
class StatusSummary:
    total: int = 0
    skipped: int = 0
    not_tracked: int = 0
    translated: Counter[TranslatedStatus] = field(default_factory=Counter)

    @property
    def migrated(self) -> int:
        return self.translated[TranslatedStatus.MIGRATED]

    @property
    def translated_total(self) -> int:
        return sum(self.translated.values())


def summarize(statuses: Mapping[str, ResourceStatus]) -> StatusSummary:
    summary = StatusSummary(total=len(statuses))
    for status in statuses.values():
        match status:
            case Skipped():
                summary.skipped += 1
            case NotTracked():
                summary.not_tracked += 1
            case Translated(sub_status=sub_status):
                summary.translated[sub_status] += 1
            case _:
                assert_never(status)
    return summary


def addresses_with(
    statuses: Mapping[str, ResourceStatus],
    predicate: Callable[[ResourceStatus], bool],
) -> list[str]:
    return sorted(address for address, status in statuses.items() if predicate(status))
