"""Draft a ledger group from a state inventory.

Each managed resource becomes an active entry. Its identifier is the URN
the target system would assign when the resource keeps its source name
under the type suggested by the type lookup. Resources whose type has no
known mapping, or whose suggested URN is already taken in the draft, get
an entry without an identifier so the operator can fill it in with
``set-association``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from .errors import NotFoundError
from .matching import derive_expected_identifier
from .model import MappingEntry, MigrationGroup

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .model import ResourceDescriptor
    from .ports import TypeLookup

log = getLogger(__name__)

_INDEX_SUFFIX = re.compile(r"\[(?P<key>[^\]]+)\]$")


@dataclass(slots=True)
class LedgerDraft:
    group: MigrationGroup
    unmapped: list[str] = field(default_factory=list)
    conflicts: list[str] = field(default_factory=list)

    @property
    def mapped_count(self) -> int:
        return sum(1 for entry in self.group.entries if entry.target_identifier)


def default_target_name(resource: ResourceDescriptor) -> str:
    """Source name, suffixed with the ``count``/``for_each`` key when present."""

    base = resource.name or resource.address.rsplit(".", 1)[-1]
    base = _INDEX_SUFFIX.sub("", base)
    match = _INDEX_SUFFIX.search(resource.address)
    if match is None:
        return base
    key = match.group("key").strip('"')
    return f"{base}-{key}"


def draft_group(
    name: str,
    inventory: Iterable[ResourceDescriptor],
    *,
    project: str,
    type_lookup: TypeLookup,
    state_location: str | None = None,
) -> LedgerDraft:
    draft = LedgerDraft(group=MigrationGroup(name=name, state_location=state_location))
    claimed: set[str] = set()

    for resource in inventory:
        if not resource.is_managed:
            continue
        try:
            token = type_lookup(resource.provider_namespace, resource.kind)
        except NotFoundError as exc:
            log.info("No Pulumi type for %s: %s", resource.address, exc)
            draft.unmapped.append(resource.address)
            draft.group.entries.append(MappingEntry(source_address=resource.address))
            continue

        identifier = derive_expected_identifier(
            project, name, token, default_target_name(resource)
        )
        if identifier in claimed:
            log.warning("%s would reuse %s; leaving it unassigned", resource.address, identifier)
            draft.conflicts.append(resource.address)
            draft.group.entries.append(MappingEntry(source_address=resource.address))
            continue

        claimed.add(identifier)
        draft.group.entries.append(
            MappingEntry(source_address=resource.address, target_identifier=identifier)
        )

    log.info(
        "Drafted %d entries for %s: %d mapped, %d unmapped, %d conflicting",
        len(draft.group.entries),
        name,
        draft.mapped_count,
        len(draft.unmapped),
        len(draft.conflicts),
    )
    return draft
