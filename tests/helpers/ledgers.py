"""Builders and in-memory fakes for ledger-centric tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from statebridge.adapters.json_ledger import save_ledger
from statebridge.adapters.pulumi import write_import_file
from statebridge.domain.errors import StateNotFoundError
from statebridge.domain.model import (
    Disposition,
    MappingEntry,
    MigrationGroup,
    MigrationLedger,
    ResourceDescriptor,
)

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from statebridge.adapters.pulumi import ImportFile
    from statebridge.domain.model import CandidateImportRecord
    from statebridge.domain.status import PreviewOp

PROJECT = "proj"
BUCKET = "aws:s3/bucket:Bucket"


def make_urn(stack: str, name: str, *, kind: str = BUCKET, project: str = PROJECT) -> str:
    return f"urn:pulumi:{stack}::{project}::{kind}::{name}"


def active(address: str, identifier: str | None = None) -> MappingEntry:
    return MappingEntry(source_address=address, target_identifier=identifier)


def skipped(address: str, identifier: str | None = None) -> MappingEntry:
    return MappingEntry(
        source_address=address, target_identifier=identifier, disposition=Disposition.SKIP
    )


def make_group(
    name: str = "dev",
    *entries: MappingEntry,
    state_location: str | None = None,
) -> MigrationGroup:
    return MigrationGroup(name=name, state_location=state_location, entries=list(entries))


def make_ledger(*groups: MigrationGroup) -> MigrationLedger:
    return MigrationLedger(groups=list(groups))


def descriptor(address: str, **attributes: object) -> ResourceDescriptor:
    kind, name = address.split(".")[-2:]
    return ResourceDescriptor(
        address=address,
        kind=kind,
        provider_namespace="registry.terraform.io/hashicorp/aws",
        name=name,
        attributes=dict(attributes),
    )


def write_ledger(directory: Path, ledger: MigrationLedger) -> Path:
    path = directory / "migration.json"
    save_ledger(ledger, path)
    return path


@dataclass
class FakeInventory:
    """Inventory port returning canned addresses per state location."""

    states: Mapping[str, Sequence[str]]
    attributes: Mapping[str, Mapping[str, object]] = field(default_factory=dict)
    calls: list[str] = field(default_factory=list)

    def __call__(self, state_location: str) -> tuple[ResourceDescriptor, ...]:
        self.calls.append(state_location)
        if state_location not in self.states:
            raise StateNotFoundError(Path(state_location))
        return tuple(
            descriptor(address, **self.attributes.get(address, {}))
            for address in self.states[state_location]
        )


@dataclass
class FakePreviewRunner:
    """Preview port returning canned operations and import stubs."""

    previews: Mapping[str, dict[str, PreviewOp]] = field(default_factory=dict)
    stubs: ImportFile | None = None
    preview_calls: list[str] = field(default_factory=list)
    stub_calls: list[tuple[str, Path]] = field(default_factory=list)

    def preview(self, group: str) -> dict[str, PreviewOp]:
        self.preview_calls.append(group)
        return dict(self.previews.get(group, {}))

    def preview_import_stubs(
        self, group: str, import_file: Path
    ) -> tuple[CandidateImportRecord, ...]:
        self.stub_calls.append((group, import_file))
        if self.stubs is not None:
            write_import_file(self.stubs, import_file)
        return ()
