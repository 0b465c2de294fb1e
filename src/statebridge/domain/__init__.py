"""Reconciliation and integrity core.

Everything in this package is pure apart from the ports it is handed:
ledger mutations happen in memory, persistence and external tools live in
``statebridge.adapters``.
"""

from __future__ import annotations

from .integrity import CheckCategory, CheckError, CheckResult, check_integrity
from .model import (
    CandidateImportRecord,
    Disposition,
    ImportDirective,
    MappingEntry,
    MigrationGroup,
    MigrationLedger,
    ResourceDescriptor,
)
from .status import (
    NotTracked,
    PreviewOp,
    ResourceStatus,
    Skipped,
    Translated,
    TranslatedStatus,
)

__all__ = [
    "CandidateImportRecord",
    "CheckCategory",
    "CheckError",
    "CheckResult",
    "Disposition",
    "ImportDirective",
    "MappingEntry",
    "MigrationGroup",
    "MigrationLedger",
    "NotTracked",
    "PreviewOp",
    "ResourceDescriptor",
    "ResourceStatus",
    "Skipped",
    "Translated",
    "TranslatedStatus",
    "check_integrity",
]
