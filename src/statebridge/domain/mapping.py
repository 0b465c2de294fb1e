"""In-memory operations on the mapping ledger.

Entries are values: every change replaces the entry at its index instead of
mutating it, so no two groups ever share an entry object. Persistence is a
separate, explicit step (``statebridge.adapters.json_ledger``).
"""

from __future__ import annotations

from dataclasses import replace
from logging import getLogger
from typing import TYPE_CHECKING

from .errors import EntryNotFoundError, GroupNotFoundError
from .identifiers import Urn
from .model import Disposition, MappingEntry

if TYPE_CHECKING:
    from .model import MigrationGroup, MigrationLedger

log = getLogger(__name__)


def find_entry(group: MigrationGroup, address: str) -> MappingEntry | None:
    for entry in group.entries:
        if entry.source_address == address:
            return entry
    return None


def upsert_entry(group: MigrationGroup, address: str, identifier: str) -> MappingEntry:
    """Point ``address`` at ``identifier``, clearing a skip disposition.

    Only the first entry with the address is updated; a missing address is
    appended as a new active entry.
    """

    for index, entry in enumerate(group.entries):
        if entry.source_address != address:
            continue
        disposition = (
            Disposition.UNSET if entry.disposition is Disposition.SKIP else entry.disposition
        )
        updated = replace(entry, target_identifier=identifier, disposition=disposition)
        group.entries[index] = updated
        return updated

    created = MappingEntry(source_address=address, target_identifier=identifier)
    group.entries.append(created)
    return created


def remove_entries(group: MigrationGroup, address: str) -> int:
    kept = [entry for entry in group.entries if entry.source_address != address]
    removed = len(group.entries) - len(kept)
    group.entries[:] = kept
    return removed


def mark_skipped(group: MigrationGroup, address: str) -> int:
    """Set ``SKIP`` on every entry for ``address``, adding one when none exists."""

    touched = 0
    for index, entry in enumerate(group.entries):
        if entry.source_address == address:
            group.entries[index] = replace(entry, disposition=Disposition.SKIP)
            touched += 1
    if not touched:
        group.entries.append(MappingEntry(source_address=address, disposition=Disposition.SKIP))
        touched = 1
    return touched


def find_group(ledger: MigrationLedger, name: str) -> MigrationGroup:
    for group in ledger.groups:
        if group.name == name:
            return group
    raise GroupNotFoundError(name)


def select_groups(ledger: MigrationLedger, name: str | None) -> list[MigrationGroup]:
    if name is None:
        return list(ledger.groups)
    return [find_group(ledger, name)]


def specialize_identifier(identifier: str, group_name: str) -> str:
    """Rewrite the stack segment of ``identifier`` for ``group_name``."""

    return Urn.parse(identifier).with_stack(group_name).render()


def set_association(
    ledger: MigrationLedger,
    address: str,
    identifier: str,
    *,
    group: str | None = None,
) -> int:
    """Associate ``address`` with ``identifier`` in every selected group.

    The identifier is validated before anything changes, then rewritten per
    group so each stack tracks its own URN.
    """

    parsed = Urn.parse(identifier)
    groups = select_groups(ledger, group)
    for target in groups:
        upsert_entry(target, address, parsed.with_stack(target.name).render())
    log.debug("Associated %s with %s in %d group(s)", address, identifier, len(groups))
    return len(groups)


def skip_address(ledger: MigrationLedger, address: str, *, group: str | None = None) -> int:
    touched = 0
    for target in select_groups(ledger, group):
        touched += mark_skipped(target, address)
    if touched == 0:
        raise EntryNotFoundError(address)
    return touched


def untrack_address(ledger: MigrationLedger, address: str, *, group: str | None = None) -> int:
    removed = 0
    for target in select_groups(ledger, group):
        removed += remove_entries(target, address)
    if removed == 0:
        raise EntryNotFoundError(address)
    return removed
