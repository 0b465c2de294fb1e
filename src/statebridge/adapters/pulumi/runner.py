"""Run the Pulumi CLI for previews and import stubs."""

from __future__ import annotations

import json
import subprocess
from dataclasses import dataclass
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING

import yaml
from pydantic import ValidationError as PydanticValidationError

from statebridge.config.cli import DEFAULT_PULUMI_BIN
from statebridge.domain.errors import CollaboratorFailure, NotFoundError, ParseError

from .schema import ImportFile, PreviewOutput
from .translator import candidates_from_import_file, preview_statuses

if TYPE_CHECKING:
    from collections.abc import Sequence

    from statebridge.domain.model import CandidateImportRecord
    from statebridge.domain.status import PreviewOp

log = getLogger(__name__)

PROJECT_FILENAMES = ("Pulumi.yaml", "Pulumi.yml")


def read_project_name(target_location: str | Path) -> str:
    """Return the ``name`` declared in the Pulumi project file."""

    directory = Path(target_location)
    for filename in PROJECT_FILENAMES:
        project_file = directory / filename
        if project_file.exists():
            break
    else:
        raise NotFoundError(f"No Pulumi.yaml found in {directory}")

    try:
        document = yaml.safe_load(project_file.read_text(encoding="utf-8"))
    except (yaml.YAMLError, UnicodeDecodeError) as exc:
        raise ParseError(f"failed to parse {project_file}: {exc}") from exc
    name = document.get("name") if isinstance(document, dict) else None
    if not isinstance(name, str) or not name.strip():
        raise ParseError(f"{project_file} does not declare a project name")
    return name.strip()


def load_import_file(path: str | Path) -> ImportFile:
    import_path = Path(path)
    try:
        payload = json.loads(import_path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise NotFoundError(f"Import file not found: {import_path}") from exc
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ParseError(f"failed to parse import file {import_path}: {exc}") from exc
    try:
        return ImportFile.model_validate(payload)
    except PydanticValidationError as exc:
        raise ParseError(f"invalid import file {import_path}: {exc}") from exc


def write_import_file(document: ImportFile, path: str | Path) -> None:
    payload = document.model_dump(mode="json", by_alias=True, exclude_none=True)
    Path(path).write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")


@dataclass(slots=True)
class PulumiPreviewRunner:
    """Preview port backed by the ``pulumi`` binary."""

    work_dir: Path
    pulumi_bin: str = DEFAULT_PULUMI_BIN
    refresh: bool = False

    def preview(self, group: str) -> dict[str, PreviewOp]:
        command = [self.pulumi_bin, "preview", "--json", "--non-interactive", "--stack", group]
        if self.refresh:
            command.append("--refresh")
        completed = self._run(command)
        try:
            output = PreviewOutput.model_validate_json(completed.stdout)
        except PydanticValidationError as exc:
            raise CollaboratorFailure(
                f"unexpected preview output for stack {group}",
                command=command,
                returncode=completed.returncode,
                stdout=completed.stdout,
                stderr=completed.stderr,
            ) from exc
        statuses = preview_statuses(output)
        log.info(
            "Preview for %s reported %d resource(s): %s",
            group,
            len(statuses),
            output.change_summary,
        )
        return statuses

    def preview_import_stubs(
        self, group: str, import_file: Path
    ) -> tuple[CandidateImportRecord, ...]:
        # pulumi runs from work_dir, so a relative path would land there
        import_file = Path(import_file).resolve()
        command = [
            self.pulumi_bin,
            "preview",
            "--non-interactive",
            "--stack",
            group,
            "--import-file",
            str(import_file),
        ]
        self._run(command)
        return candidates_from_import_file(load_import_file(import_file))

    def _run(self, command: Sequence[str]) -> subprocess.CompletedProcess[str]:
        log.debug("Running %s in %s", " ".join(command), self.work_dir)
        try:
            completed = subprocess.run(
                list(command),
                cwd=self.work_dir,
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as exc:
            raise CollaboratorFailure(
                f"failed to run {self.pulumi_bin}: {exc}", command=command
            ) from exc
        if completed.returncode != 0:
            raise CollaboratorFailure(
                f"{' '.join(command[:2])} failed",
                command=command,
                returncode=completed.returncode,
                stdout=completed.stdout,
                stderr=completed.stderr,
            )
        return completed
