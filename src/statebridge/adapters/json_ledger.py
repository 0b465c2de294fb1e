"""Persist the migration ledger as ``migration.json``."""

from __future__ import annotations

import contextlib
import json
import os
import tempfile
from dataclasses import dataclass
from logging import getLogger
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from statebridge.domain.errors import LedgerNotFoundError, LedgerParseError, PersistError
from statebridge.domain.model import Disposition, MappingEntry, MigrationGroup, MigrationLedger

log = getLogger(__name__)


def _blank_to_none(value: object) -> object:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class LedgerBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ResourceDocument(LedgerBaseModel):
    tf_addr: str | None = Field(default=None, alias="tf-addr")
    urn: str | None = None
    migrate: Disposition | None = None

    _normalize_blank = field_validator("tf_addr", "urn", "migrate", mode="before")(_blank_to_none)


class StackDocument(LedgerBaseModel):
    pulumi_stack: str = Field(alias="pulumi-stack")
    tf_state: str | None = Field(default=None, alias="tf-state")
    import_stub_file: str | None = Field(default=None, alias="import-stub-file")
    import_resolved_file: str | None = Field(default=None, alias="import-resolved-file")
    resources: list[ResourceDocument] = Field(default_factory=list)

    _normalize_blank = field_validator(
        "tf_state", "import_stub_file", "import_resolved_file", mode="before"
    )(_blank_to_none)


class MigrationDocument(LedgerBaseModel):
    tf_sources: str | None = Field(default=None, alias="tf-sources")
    pulumi_sources: str | None = Field(default=None, alias="pulumi-sources")
    stacks: list[StackDocument] = Field(default_factory=list)

    _normalize_blank = field_validator("tf_sources", "pulumi_sources", mode="before")(
        _blank_to_none
    )


class LedgerDocument(LedgerBaseModel):
    migration: MigrationDocument


def ledger_from_document(document: LedgerDocument) -> MigrationLedger:
    migration = document.migration
    return MigrationLedger(
        source_location=migration.tf_sources,
        target_location=migration.pulumi_sources,
        groups=[
            MigrationGroup(
                name=stack.pulumi_stack,
                state_location=stack.tf_state,
                import_stub_file=stack.import_stub_file,
                import_resolved_file=stack.import_resolved_file,
                entries=[
                    MappingEntry(
                        source_address=resource.tf_addr,
                        target_identifier=resource.urn,
                        disposition=resource.migrate or Disposition.UNSET,
                    )
                    for resource in stack.resources
                ],
            )
            for stack in migration.stacks
        ],
    )


def document_from_ledger(ledger: MigrationLedger) -> LedgerDocument:
    return LedgerDocument(
        migration=MigrationDocument(
            tf_sources=ledger.source_location,
            pulumi_sources=ledger.target_location,
            stacks=[
                StackDocument(
                    pulumi_stack=group.name,
                    tf_state=group.state_location,
                    import_stub_file=group.import_stub_file,
                    import_resolved_file=group.import_resolved_file,
                    resources=[
                        ResourceDocument(
                            tf_addr=entry.source_address,
                            urn=entry.target_identifier,
                            migrate=None if entry.is_active else entry.disposition,
                        )
                        for entry in group.entries
                    ],
                )
                for group in ledger.groups
            ],
        )
    )


def dumps_ledger(ledger: MigrationLedger) -> str:
    payload = document_from_ledger(ledger).model_dump(
        mode="json", by_alias=True, exclude_none=True
    )
    return json.dumps(payload, indent=2, ensure_ascii=False) + "\n"


def loads_ledger(text: str, *, source: str = "<string>") -> MigrationLedger:
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise LedgerParseError(f"failed to parse ledger {source}: {exc}") from exc
    try:
        document = LedgerDocument.model_validate(payload)
    except PydanticValidationError as exc:
        raise LedgerParseError(f"invalid ledger {source}: {exc}") from exc
    return ledger_from_document(document)


def load_ledger(path: str | Path) -> MigrationLedger:
    ledger_path = Path(path)
    try:
        text = ledger_path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise LedgerNotFoundError(ledger_path) from exc
    except UnicodeDecodeError as exc:
        raise LedgerParseError(f"ledger {ledger_path} is not valid UTF-8: {exc}") from exc
    except OSError as exc:
        raise LedgerParseError(f"failed to read ledger {ledger_path}: {exc}") from exc
    ledger = loads_ledger(text, source=str(ledger_path))
    log.debug("Loaded ledger %s with %d group(s)", ledger_path, len(ledger.groups))
    return ledger


def save_ledger(ledger: MigrationLedger, path: str | Path) -> None:
    """Atomically replace ``path`` with the serialized ledger.

    The document is written to a temporary sibling and renamed over the
    target; on any failure the previous file is left untouched.
    """

    ledger_path = Path(path)
    text = dumps_ledger(ledger)
    directory = ledger_path.parent
    tmp_name: str | None = None
    try:
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=directory,
            prefix=f".{ledger_path.name}.",
            suffix=".tmp",
            delete=False,
        ) as handle:
            tmp_name = handle.name
            handle.write(text)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, ledger_path)
    except OSError as exc:
        if tmp_name is not None:
            with contextlib.suppress(OSError):
                os.unlink(tmp_name)
        raise PersistError(f"failed to save ledger {ledger_path}: {exc}") from exc
    log.debug("Saved ledger %s", ledger_path)


@dataclass(frozen=True, slots=True)
class JsonLedgerStore:
    """Ledger persistence bound to one file path."""

    path: Path

    def load(self) -> MigrationLedger:
        return load_ledger(self.path)

    def save(self, ledger: MigrationLedger) -> None:
        save_ledger(ledger, self.path)
