"""Integrity checks over the mapping ledger.

Three passes always run in full, in a fixed order, and their findings are
concatenated:

1) file existence of every path the ledger references
2) bidirectional uniqueness of address <-> identifier among active entries
3) consistency of each group's addresses with its live state inventory

Findings are data (``CheckError``), never exceptions. The only hard failure
is an inventory that cannot be read at all.
"""

from __future__ import annotations

import os
from collections import defaultdict
from dataclasses import dataclass, field
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from .errors import InventoryReadError, StateBridgeError

if TYPE_CHECKING:
    from collections.abc import Callable

    from .model import MigrationGroup, MigrationLedger
    from .ports import InventoryReader

log = getLogger(__name__)

CLI_NAME = "statebridge"


class CheckCategory(StrEnum):
    FILE_EXISTENCE = "file-existence"
    UNIQUE_MAPPING = "unique-mapping"
    STATE_CONSISTENCY = "state-consistency"


@dataclass(frozen=True, slots=True)
class CheckError:
    category: CheckCategory
    message: str
    suggestion: str | None = None


@dataclass(slots=True)
class CheckResult:
    errors: list[CheckError] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def count(self) -> int:
        return len(self.errors)

    def add(
        self, category: CheckCategory, message: str, suggestion: str | None = None
    ) -> None:
        self.errors.append(CheckError(category=category, message=message, suggestion=suggestion))

    def by_category(self) -> dict[CheckCategory, list[CheckError]]:
        grouped: dict[CheckCategory, list[CheckError]] = {
            category: [] for category in CheckCategory
        }
        for error in self.errors:
            grouped[error.category].append(error)
        return {category: errors for category, errors in grouped.items() if errors}


def check_integrity(
    ledger: MigrationLedger,
    *,
    read_inventory: InventoryReader,
    path_exists: Callable[[str], bool] = os.path.exists,
) -> CheckResult:
    """Run every integrity pass over ``ledger``."""

    result = CheckResult()
    _check_files_exist(ledger, result, path_exists=path_exists)
    _check_unique_mapping(ledger, result)
    _check_state_consistency(ledger, result, read_inventory=read_inventory)
    log.debug("Integrity check finished with %d error(s)", result.count)
    return result


def _group_prefix(index: int, group: MigrationGroup) -> str:
    return f"group[{index}] ({group.name})"


def _check_files_exist(
    ledger: MigrationLedger,
    result: CheckResult,
    *,
    path_exists: Callable[[str], bool],
) -> None:
    for label, location in (
        ("tf-sources", ledger.source_location),
        ("pulumi-sources", ledger.target_location),
    ):
        if location and not path_exists(location):
            result.add(
                CheckCategory.FILE_EXISTENCE,
                f"{label} directory does not exist: {location}",
            )

    for index, group in enumerate(ledger.groups):
        prefix = _group_prefix(index, group)
        for label, location in (
            ("tf-state file", group.state_location),
            ("import-stub-file", group.import_stub_file),
            ("import-resolved-file", group.import_resolved_file),
        ):
            if location and not path_exists(location):
                result.add(
                    CheckCategory.FILE_EXISTENCE,
                    f"{prefix}: {label} does not exist: {location}",
                )


def _check_unique_mapping(ledger: MigrationLedger, result: CheckResult) -> None:
    for index, group in enumerate(ledger.groups):
        prefix = _group_prefix(index, group)
        identifiers_by_address: dict[str, list[str]] = defaultdict(list)
        addresses_by_identifier: dict[str, list[str]] = defaultdict(list)

        for entry in group.entries:
            if not entry.is_active:
                continue
            if not entry.source_address or not entry.target_identifier:
                continue
            identifiers_by_address[entry.source_address].append(entry.target_identifier)
            addresses_by_identifier[entry.target_identifier].append(entry.source_address)

        for address, identifiers in identifiers_by_address.items():
            if len(identifiers) > 1:
                result.add(
                    CheckCategory.UNIQUE_MAPPING,
                    f"{prefix}: tf-addr '{address}' maps to multiple URNs: "
                    f"{', '.join(identifiers)}",
                )

        for identifier, addresses in addresses_by_identifier.items():
            if len(addresses) > 1:
                suggestions = [
                    f"{CLI_NAME} set-association --addr '{address}' --urn '<different-urn>' "
                    f"--group '{group.name}'"
                    for address in addresses[1:]
                ]
                result.add(
                    CheckCategory.UNIQUE_MAPPING,
                    f"{prefix}: URN '{identifier}' maps to multiple tf-addrs: "
                    f"{', '.join(addresses)}",
                    " OR ".join(suggestions),
                )


def _check_state_consistency(
    ledger: MigrationLedger,
    result: CheckResult,
    *,
    read_inventory: InventoryReader,
) -> None:
    for index, group in enumerate(ledger.groups):
        if not group.state_location:
            continue
        prefix = _group_prefix(index, group)

        try:
            inventory = read_inventory(group.state_location)
        except (StateBridgeError, OSError) as exc:
            raise InventoryReadError(prefix, str(exc)) from exc

        state_addresses = dict.fromkeys(resource.address for resource in inventory)
        ledger_addresses = dict.fromkeys(
            entry.source_address for entry in group.entries if entry.source_address
        )

        for address in state_addresses:
            if address not in ledger_addresses:
                result.add(
                    CheckCategory.STATE_CONSISTENCY,
                    f"{prefix}: resource '{address}' exists in Terraform state "
                    "but not in migration.json",
                    f"{CLI_NAME} skip --addr '{address}' --group '{group.name}'",
                )

        for address in ledger_addresses:
            if address not in state_addresses:
                result.add(
                    CheckCategory.STATE_CONSISTENCY,
                    f"{prefix}: resource '{address}' exists in migration.json "
                    "but not in Terraform state",
                    f"{CLI_NAME} untrack --addr '{address}' --group '{group.name}'",
                )
