"""Read Terraform state files from disk."""

from __future__ import annotations

import json
import subprocess
from dataclasses import dataclass
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING

from statebridge.config.cli import DEFAULT_TERRAFORM_BIN
from statebridge.domain.errors import (
    CollaboratorFailure,
    InventoryParseError,
    StateNotFoundError,
    UnsupportedStateFormatError,
)

from .schema import StateDocument
from .translator import list_managed_resources, parse_state_document

if TYPE_CHECKING:
    from statebridge.domain.model import ResourceDescriptor

log = getLogger(__name__)


def load_terraform_state(
    path: str | Path, *, terraform_bin: str = DEFAULT_TERRAFORM_BIN
) -> StateDocument:
    """Load a state file in JSON form or convert a binary ``.tfstate`` file.

    ``.tfstate`` files go through ``terraform show -json`` run from the
    file's directory.
    """

    state_path = Path(path)
    extension = state_path.suffix.lower()
    if extension not in {".json", ".tfstate"}:
        raise UnsupportedStateFormatError(
            f"unsupported state file format: {extension or '<none>'} "
            "(expected .json or .tfstate)"
        )
    if not state_path.exists():
        raise StateNotFoundError(state_path)

    if extension == ".json":
        try:
            text = state_path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise InventoryParseError(f"state file {state_path} is not valid UTF-8: {exc}") from exc
    else:
        text = _show_state_json(state_path, terraform_bin=terraform_bin)
    return _decode(text, source=state_path)


def _show_state_json(path: Path, *, terraform_bin: str) -> str:
    command = [terraform_bin, "show", "-json", str(path.resolve())]
    log.debug("Converting %s with %s", path, " ".join(command))
    try:
        completed = subprocess.run(
            command,
            cwd=path.parent,
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as exc:
        raise CollaboratorFailure(
            f"failed to run {terraform_bin}: {exc}", command=command
        ) from exc
    if completed.returncode != 0:
        raise CollaboratorFailure(
            "failed to convert binary state file using terraform show",
            command=command,
            returncode=completed.returncode,
            stdout=completed.stdout,
            stderr=completed.stderr,
        )
    return completed.stdout


def _decode(text: str, *, source: Path) -> StateDocument:
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise InventoryParseError(f"failed to parse state JSON from {source}: {exc}") from exc
    return parse_state_document(payload)


@dataclass(slots=True)
class TerraformInventoryReader:
    """Inventory port backed by Terraform state files."""

    terraform_bin: str = DEFAULT_TERRAFORM_BIN
    base_dir: Path | None = None

    def __call__(self, state_location: str) -> tuple[ResourceDescriptor, ...]:
        path = Path(state_location)
        if self.base_dir is not None and not path.is_absolute():
            path = self.base_dir / path
        document = load_terraform_state(path, terraform_bin=self.terraform_bin)
        resources = list_managed_resources(document)
        log.debug("Read %d managed resource(s) from %s", len(resources), path)
        return resources
