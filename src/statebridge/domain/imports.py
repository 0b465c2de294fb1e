"""Resolve import candidates into concrete import directives.

Responsibilities of this stage:
- bind every eligible ledger entry to exactly one candidate by exact identity
- collect unresolved entries with operator-facing suggestions
- never fail the run because some entries stay unresolved

An entry is eligible when it has an address, is active, and its identifier
has no confirmed live state in the target system. When an inventory is
given, a binding also needs an import ID, from the candidate or from state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from .matching import is_match, rank_partial_candidates, suggested_identifier
from .model import ImportDirective

if TYPE_CHECKING:
    from collections.abc import Collection, Iterable, Mapping

    from .model import CandidateImportRecord, MappingEntry, MigrationGroup, ResourceDescriptor

log = getLogger(__name__)


class UnresolvedReason(StrEnum):
    NO_IDENTIFIER = "no-identifier"
    NO_MATCH = "no-match"
    DUPLICATE = "duplicate"
    NOT_IN_STATE = "not-in-state"
    NO_IMPORT_ID = "no-import-id"


@dataclass(frozen=True, slots=True)
class UnresolvedEntry:
    address: str
    reason: UnresolvedReason
    suggestions: tuple[str, ...] = ()


@dataclass(slots=True)
class ImportResolution:
    directives: list[ImportDirective] = field(default_factory=list)
    unresolved: list[UnresolvedEntry] = field(default_factory=list)
    components: list[CandidateImportRecord] = field(default_factory=list)
    skipped: int = 0

    @property
    def unresolved_count(self) -> int:
        return len(self.unresolved)

    @property
    def resolved_count(self) -> int:
        return len(self.directives)


def import_id_candidates(resource: ResourceDescriptor) -> tuple[str, ...]:
    """Import IDs to try for ``resource``, most likely first."""

    candidates: list[str] = []
    for key in ("id", "arn"):
        value = resource.attributes.get(key)
        if isinstance(value, str) and value and value not in candidates:
            candidates.append(value)
    return tuple(candidates)


def resolve_imports(
    candidates: Iterable[CandidateImportRecord],
    group: MigrationGroup,
    *,
    project: str,
    live_identifiers: Collection[str] = (),
    inventory: Iterable[ResourceDescriptor] | None = None,
) -> ImportResolution:
    """Bind eligible entries of ``group`` to matching ``candidates``."""

    resolution = ImportResolution()
    bindable: list[CandidateImportRecord] = []
    for candidate in candidates:
        if candidate.component:
            resolution.components.append(candidate)
        else:
            bindable.append(candidate)

    resources_by_address: Mapping[str, ResourceDescriptor] = (
        {resource.address: resource for resource in inventory} if inventory is not None else {}
    )
    bound_identifiers: set[str] = set()

    for entry in group.entries:
        address = entry.source_address
        if not address:
            continue
        if not entry.is_active:
            resolution.skipped += 1
            continue
        if entry.target_identifier and entry.target_identifier in live_identifiers:
            continue

        outcome = _resolve_entry(entry, bindable, project=project, group=group.name)
        if isinstance(outcome, UnresolvedEntry):
            log.warning("Could not resolve %s: %s", address, outcome.reason)
            resolution.unresolved.append(outcome)
            continue

        identifier = entry.target_identifier or ""
        if identifier in bound_identifiers:
            log.warning("Candidate %s already bound; leaving %s unresolved", identifier, address)
            resolution.unresolved.append(
                UnresolvedEntry(address=address, reason=UnresolvedReason.DUPLICATE)
            )
            continue

        import_id = outcome.import_id
        if import_id is None and inventory is not None:
            resource = resources_by_address.get(address)
            if resource is None:
                resolution.unresolved.append(
                    UnresolvedEntry(address=address, reason=UnresolvedReason.NOT_IN_STATE)
                )
                continue
            import_ids = import_id_candidates(resource)
            if not import_ids:
                resolution.unresolved.append(
                    UnresolvedEntry(address=address, reason=UnresolvedReason.NO_IMPORT_ID)
                )
                continue
            import_id = import_ids[0]

        bound_identifiers.add(identifier)
        resolution.directives.append(
            ImportDirective(
                address=address,
                target_identifier=identifier,
                kind=outcome.kind,
                name=outcome.name,
                import_id=import_id,
            )
        )

    log.info(
        "Import resolution for %s: resolved=%d, unresolved=%d, skipped=%d",
        group.name,
        resolution.resolved_count,
        resolution.unresolved_count,
        resolution.skipped,
    )
    return resolution


def _resolve_entry(
    entry: MappingEntry,
    candidates: list[CandidateImportRecord],
    *,
    project: str,
    group: str,
) -> CandidateImportRecord | UnresolvedEntry:
    address = entry.source_address or ""
    if not entry.target_identifier:
        return UnresolvedEntry(address=address, reason=UnresolvedReason.NO_IDENTIFIER)

    # Every exact match carries the entry's own identifier, so the first one is canonical.
    for candidate in candidates:
        if is_match(entry, candidate, project=project, group=group):
            return candidate

    return UnresolvedEntry(
        address=address,
        reason=UnresolvedReason.NO_MATCH,
        suggestions=tuple(
            suggested_identifier(entry, candidate, project=project, group=group)
            for candidate in rank_partial_candidates(entry, candidates)
        ),
    )
