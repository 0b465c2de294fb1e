"""Ports for collaborators outside the reconciliation core."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from .model import CandidateImportRecord, ResourceDescriptor
    from .status import PreviewOp


@runtime_checkable
class InventoryReader(Protocol):
    """Read the managed resources recorded in a source-system state file."""

    def __call__(self, state_location: str) -> Sequence[ResourceDescriptor]: ...


@runtime_checkable
class PreviewRunner(Protocol):
    """Run dry-run previews against the target system."""

    def preview(self, group: str) -> dict[str, PreviewOp]: ...

    def preview_import_stubs(
        self, group: str, import_file: Path
    ) -> tuple[CandidateImportRecord, ...]: ...


@runtime_checkable
class TypeLookup(Protocol):
    """Map a source provider and resource kind to a target type token."""

    def __call__(self, provider_namespace: str, kind: str) -> str: ...


__all__ = ["InventoryReader", "PreviewRunner", "TypeLookup"]
