"""Ledger and inventory types (pure, dependency-light)."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping


class Disposition(StrEnum):
    """How a ledger entry takes part in reconciliation.

    The values double as the ledger's serialization tokens; ``UNSET`` is
    written by omitting the field.
    """

    UNSET = ""
    SKIP = "skip"
    IGNORE_NO_STATE = "ignore-no-state"
    IGNORE_NEEDS_UPDATE = "ignore-needs-update"
    IGNORE_NEEDS_REPLACE = "ignore-needs-replace"


@dataclass(frozen=True, slots=True, kw_only=True)
class ResourceDescriptor:
    """One managed resource from a source-system state snapshot."""

    address: str
    kind: str
    provider_namespace: str
    name: str = ""
    module_address: str | None = None
    is_managed: bool = True
    attributes: Mapping[str, object] = field(default_factory=lambda: MappingProxyType({}))


@dataclass(frozen=True, slots=True)
class MappingEntry:
    """Association between a source address and a target identifier."""

    source_address: str | None = None
    target_identifier: str | None = None
    disposition: Disposition = Disposition.UNSET

    @property
    def is_active(self) -> bool:
        return self.disposition is Disposition.UNSET


@dataclass(slots=True, kw_only=True)
class MigrationGroup:
    """One target stack paired with one source state file."""

    name: str
    state_location: str | None = None
    import_stub_file: str | None = None
    import_resolved_file: str | None = None
    entries: list[MappingEntry] = field(default_factory=list)


@dataclass(slots=True, kw_only=True)
class MigrationLedger:
    """Root persistence unit; loaded and saved as a whole document."""

    source_location: str | None = None
    target_location: str | None = None
    groups: list[MigrationGroup] = field(default_factory=list)


@dataclass(frozen=True, slots=True, kw_only=True)
class CandidateImportRecord:
    """Resource discovered by a target-system preview that has no state yet."""

    kind: str
    name: str
    logical_name: str | None = None
    target_identifier: str | None = None
    import_id: str | None = None
    component: bool = False

    @property
    def display_name(self) -> str:
        # The preview may disambiguate ``name``; the logical name is what lands in the URN.
        return self.logical_name or self.name


@dataclass(frozen=True, slots=True, kw_only=True)
class ImportDirective:
    """Resolved binding of a source address to a candidate identifier."""

    address: str
    target_identifier: str
    kind: str
    name: str
    import_id: str | None = None
