"""Application orchestration entry points."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import partial
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING, TypeAlias

from statebridge.adapters.json_ledger import JsonLedgerStore
from statebridge.adapters.pulumi import (
    PulumiPreviewRunner,
    candidates_from_import_file,
    load_import_file,
    read_project_name,
    resolved_import_file,
    write_import_file,
)
from statebridge.adapters.pulumi.type_mapping import TypeMappingNotFoundError, pulumi_provider_for
from statebridge.adapters.terraform import TerraformInventoryReader
from statebridge.config.cli import DEFAULT_PULUMI_BIN
from statebridge.domain.advice import NextStep, missing_ledger_step, next_step
from statebridge.domain.drafting import LedgerDraft, draft_group
from statebridge.domain.errors import LedgerExistsError
from statebridge.domain.guard import MutationReport, guarded_mutation
from statebridge.domain.imports import ImportResolution, resolve_imports
from statebridge.domain.integrity import CheckResult, check_integrity
from statebridge.domain.mapping import (
    find_group,
    select_groups,
    set_association,
    skip_address,
    untrack_address,
)
from statebridge.domain.model import MigrationLedger
from statebridge.domain.status import (
    PreviewOp,
    ResourceStatus,
    StatusSummary,
    reconcile_statuses,
    summarize,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from statebridge.domain.model import MigrationGroup
    from statebridge.domain.ports import InventoryReader, PreviewRunner, TypeLookup

log = getLogger(__name__)

PathExists: TypeAlias = "Callable[[str], bool]"


@dataclass(frozen=True, slots=True)
class GroupDiff:
    group: str
    statuses: dict[str, ResourceStatus]
    summary: StatusSummary


@dataclass(frozen=True, slots=True)
class ImportReport:
    group: str
    resolution: ImportResolution
    stubs_path: Path
    output_path: Path
    generated_stubs: bool


def check_ledger(
    *,
    ledger_path: Path,
    read_inventory: InventoryReader | None = None,
    path_exists: PathExists = os.path.exists,
) -> CheckResult:
    """Run every integrity check against the ledger at ``ledger_path``."""

    ledger = JsonLedgerStore(ledger_path).load()
    return check_integrity(
        ledger,
        read_inventory=read_inventory or TerraformInventoryReader(),
        path_exists=path_exists,
    )


def set_association_command(
    *,
    ledger_path: Path,
    address: str,
    identifier: str,
    group: str | None = None,
    force: bool = False,
    read_inventory: InventoryReader | None = None,
    path_exists: PathExists = os.path.exists,
) -> MutationReport[int]:
    return _guarded_update(
        ledger_path,
        partial(set_association, address=address, identifier=identifier, group=group),
        force=force,
        read_inventory=read_inventory,
        path_exists=path_exists,
    )


def skip_command(
    *,
    ledger_path: Path,
    address: str,
    group: str | None = None,
    force: bool = False,
    read_inventory: InventoryReader | None = None,
    path_exists: PathExists = os.path.exists,
) -> MutationReport[int]:
    return _guarded_update(
        ledger_path,
        partial(skip_address, address=address, group=group),
        force=force,
        read_inventory=read_inventory,
        path_exists=path_exists,
    )


def untrack_command(
    *,
    ledger_path: Path,
    address: str,
    group: str | None = None,
    force: bool = False,
    read_inventory: InventoryReader | None = None,
    path_exists: PathExists = os.path.exists,
) -> MutationReport[int]:
    return _guarded_update(
        ledger_path,
        partial(untrack_address, address=address, group=group),
        force=force,
        read_inventory=read_inventory,
        path_exists=path_exists,
    )


def _guarded_update(
    ledger_path: Path,
    mutate: Callable[[MigrationLedger], int],
    *,
    force: bool,
    read_inventory: InventoryReader | None,
    path_exists: PathExists,
) -> MutationReport[int]:
    store = JsonLedgerStore(ledger_path)
    ledger = store.load()
    report = guarded_mutation(
        ledger,
        mutate,
        check=partial(
            check_integrity,
            read_inventory=read_inventory or TerraformInventoryReader(),
            path_exists=path_exists,
        ),
        force=force,
    )
    store.save(report.ledger)
    log.info(
        "Saved %s: %d entries touched, integrity errors %d -> %d",
        ledger_path,
        report.outcome,
        report.before.count,
        report.after.count,
    )
    return report


def compute_diff(
    *,
    ledger_path: Path,
    group: str | None = None,
    read_inventory: InventoryReader | None = None,
    preview_runner: PreviewRunner | None = None,
    pulumi_bin: str = DEFAULT_PULUMI_BIN,
) -> list[GroupDiff]:
    """Classify every resource of the selected groups against a fresh preview."""

    ledger = JsonLedgerStore(ledger_path).load()
    reader = read_inventory or TerraformInventoryReader()
    runner = preview_runner or _default_runner(ledger, pulumi_bin=pulumi_bin)

    diffs: list[GroupDiff] = []
    for target in select_groups(ledger, group):
        if not target.state_location:
            log.warning("Group %s has no tf-state; treating its inventory as empty", target.name)
            inventory = ()
        else:
            inventory = reader(target.state_location)
        preview = runner.preview(target.name)
        statuses = reconcile_statuses(inventory, target, preview)
        diffs.append(GroupDiff(group=target.name, statuses=statuses, summary=summarize(statuses)))
    return diffs


def resolve_imports_command(
    *,
    ledger_path: Path,
    group: str,
    stubs_path: Path | None = None,
    output_path: Path | None = None,
    project: str | None = None,
    read_inventory: InventoryReader | None = None,
    preview_runner: PreviewRunner | None = None,
    pulumi_bin: str = DEFAULT_PULUMI_BIN,
) -> ImportReport:
    """Bind the group's ledger entries to import stubs and write the import file.

    Stubs come from ``stubs_path``, the group's ``import-stub-file`` or, when
    that file does not exist yet, a fresh ``pulumi preview --import-file`` run.
    Cache paths that were chosen here are recorded in the ledger.
    """

    store = JsonLedgerStore(ledger_path)
    ledger = store.load()
    target = find_group(ledger, group)
    reader = read_inventory or TerraformInventoryReader()
    runner = preview_runner or _default_runner(ledger, pulumi_bin=pulumi_bin)
    project_name = project or read_project_name(ledger.target_location or ".")

    stubs = stubs_path or Path(target.import_stub_file or f"import-stubs-{target.name}.json")
    output = output_path or Path(
        target.import_resolved_file or f"import-resolved-{target.name}.json"
    )

    generated = not stubs.exists()
    if generated:
        log.info("Generating import stubs for %s into %s", target.name, stubs)
        runner.preview_import_stubs(target.name, stubs)
    stub_document = load_import_file(stubs)

    preview = runner.preview(target.name)
    live_identifiers = {urn for urn, op in preview.items() if op is not PreviewOp.CREATE}
    inventory = reader(target.state_location) if target.state_location else ()

    resolution = resolve_imports(
        candidates_from_import_file(stub_document),
        target,
        project=project_name,
        live_identifiers=live_identifiers,
        inventory=inventory,
    )
    write_import_file(resolved_import_file(stub_document, resolution), output)

    if _record_cache_paths(target, stubs=stubs, output=output):
        store.save(ledger)
    return ImportReport(
        group=target.name,
        resolution=resolution,
        stubs_path=stubs,
        output_path=output,
        generated_stubs=generated,
    )


def _record_cache_paths(group: MigrationGroup, *, stubs: Path, output: Path) -> bool:
    changed = False
    if not group.import_stub_file:
        group.import_stub_file = str(stubs)
        changed = True
    if not group.import_resolved_file:
        group.import_resolved_file = str(output)
        changed = True
    return changed


def _default_runner(ledger: MigrationLedger, *, pulumi_bin: str) -> PulumiPreviewRunner:
    return PulumiPreviewRunner(
        work_dir=Path(ledger.target_location or "."), pulumi_bin=pulumi_bin
    )


def suggest_provider(provider_namespace: str) -> str:
    package = pulumi_provider_for(provider_namespace)
    if package is None:
        raise TypeMappingNotFoundError(
            f"no Pulumi provider mapping found for {provider_namespace}"
        )
    return package


def suggest_resource(provider_namespace: str, kind: str, *, type_lookup: TypeLookup) -> str:
    return type_lookup(provider_namespace, kind)


def init_ledger_command(
    *,
    ledger_path: Path,
    group: str,
    state_location: str,
    source_location: str,
    target_location: str,
    type_lookup: TypeLookup,
    project: str | None = None,
    force: bool = False,
    read_inventory: InventoryReader | None = None,
) -> LedgerDraft:
    """Draft a one-group ledger from ``state_location`` and write it."""

    if ledger_path.exists() and not force:
        raise LedgerExistsError(ledger_path)
    reader = read_inventory or TerraformInventoryReader()
    project_name = project or read_project_name(target_location)

    draft = draft_group(
        group,
        reader(state_location),
        project=project_name,
        type_lookup=type_lookup,
        state_location=state_location,
    )
    ledger = MigrationLedger(
        source_location=source_location,
        target_location=target_location,
        groups=[draft.group],
    )
    JsonLedgerStore(ledger_path).save(ledger)
    log.info("Wrote %s with %d entries", ledger_path, len(draft.group.entries))
    return draft


def next_step_command(
    *,
    ledger_path: Path,
    read_inventory: InventoryReader | None = None,
    preview_runner: PreviewRunner | None = None,
    path_exists: PathExists = os.path.exists,
    pulumi_bin: str = DEFAULT_PULUMI_BIN,
) -> NextStep:
    """Suggest what to do next; previews run only once the ledger is consistent."""

    if not ledger_path.exists():
        return missing_ledger_step(str(ledger_path))
    reader = read_inventory or TerraformInventoryReader()
    check = check_ledger(ledger_path=ledger_path, read_inventory=reader, path_exists=path_exists)
    if check.has_errors:
        return next_step(check, {})

    diffs = compute_diff(
        ledger_path=ledger_path,
        read_inventory=reader,
        preview_runner=preview_runner,
        pulumi_bin=pulumi_bin,
    )
    return next_step(check, {diff.group: diff.statuses for diff in diffs})
