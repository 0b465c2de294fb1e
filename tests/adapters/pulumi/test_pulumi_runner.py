from __future__ import annotations

import json
import subprocess
from pathlib import Path

import pytest

from statebridge.adapters.pulumi import (
    ImportFile,
    PulumiPreviewRunner,
    load_import_file,
    read_project_name,
    write_import_file,
)
from statebridge.adapters.pulumi import runner as runner_module
from statebridge.domain.errors import CollaboratorFailure, NotFoundError, ParseError
from statebridge.domain.status import PreviewOp


def test_preview_invokes_pulumi_in_work_dir(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    calls: list[tuple[list[str], object]] = []
    stdout = json.dumps({"steps": [{"op": "same", "urn": "u1"}]})

    def fake_run(command: list[str], **kwargs: object) -> subprocess.CompletedProcess[str]:
        calls.append((command, kwargs["cwd"]))
        return subprocess.CompletedProcess(command, 0, stdout=stdout, stderr="")

    monkeypatch.setattr(runner_module.subprocess, "run", fake_run)

    statuses = PulumiPreviewRunner(tmp_path, pulumi_bin="pl", refresh=True).preview("dev")

    assert statuses == {"u1": PreviewOp.SAME}
    command, cwd = calls[0]
    assert command == [
        "pl", "preview", "--json", "--non-interactive", "--stack", "dev", "--refresh"
    ]
    assert cwd == tmp_path


def test_preview_failure_raises_with_output(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    def fake_run(command: list[str], **_: object) -> subprocess.CompletedProcess[str]:
        return subprocess.CompletedProcess(command, 255, stdout="", stderr="no stack named dev")

    monkeypatch.setattr(runner_module.subprocess, "run", fake_run)

    with pytest.raises(CollaboratorFailure) as excinfo:
        PulumiPreviewRunner(tmp_path).preview("dev")

    assert excinfo.value.stderr == "no stack named dev"
    assert excinfo.value.returncode == 255


def test_preview_rejects_unexpected_output(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    def fake_run(command: list[str], **_: object) -> subprocess.CompletedProcess[str]:
        return subprocess.CompletedProcess(command, 0, stdout="warning: not json", stderr="")

    monkeypatch.setattr(runner_module.subprocess, "run", fake_run)

    with pytest.raises(CollaboratorFailure, match="unexpected preview output"):
        PulumiPreviewRunner(tmp_path).preview("dev")


def test_preview_import_stubs_reads_generated_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    import_file = tmp_path / "stubs.json"

    def fake_run(command: list[str], **_: object) -> subprocess.CompletedProcess[str]:
        assert command[-2:] == ["--import-file", str(import_file.resolve())]
        import_file.write_text(
            json.dumps({"resources": [{"type": "aws:s3/bucket:Bucket", "name": "logs"}]}),
            encoding="utf-8",
        )
        return subprocess.CompletedProcess(command, 0, stdout="", stderr="")

    monkeypatch.setattr(runner_module.subprocess, "run", fake_run)

    candidates = PulumiPreviewRunner(tmp_path).preview_import_stubs("dev", import_file)

    assert [candidate.name for candidate in candidates] == ["logs"]


def test_import_file_round_trip_keeps_unknown_keys(tmp_path: Path) -> None:
    path = tmp_path / "import.json"
    document = ImportFile.model_validate(
        {"resources": [{"type": "t", "name": "n", "version": "6.0.0"}]}
    )

    write_import_file(document, path)

    assert json.loads(path.read_text(encoding="utf-8"))["resources"][0]["version"] == "6.0.0"
    assert load_import_file(path).resources[0].name == "n"


def test_load_import_file_errors(tmp_path: Path) -> None:
    with pytest.raises(NotFoundError):
        load_import_file(tmp_path / "absent.json")

    broken = tmp_path / "broken.json"
    broken.write_text("[", encoding="utf-8")
    with pytest.raises(ParseError):
        load_import_file(broken)


def test_read_project_name(tmp_path: Path) -> None:
    (tmp_path / "Pulumi.yml").write_text("name: infra\nruntime: nodejs\n", encoding="utf-8")

    assert read_project_name(tmp_path) == "infra"


def test_read_project_name_errors(tmp_path: Path) -> None:
    with pytest.raises(NotFoundError):
        read_project_name(tmp_path)

    (tmp_path / "Pulumi.yaml").write_text("runtime: python\n", encoding="utf-8")
    with pytest.raises(ParseError):
        read_project_name(tmp_path)


def test_preview_import_stubs_passes_absolute_path_to_pulumi(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)
    work_dir = tmp_path / "infra"
    work_dir.mkdir()

    def fake_pulumi(command: list[str], **kwargs: object) -> subprocess.CompletedProcess[str]:
        # pulumi resolves --import-file against its own working directory
        target = Path(str(kwargs["cwd"])) / command[-1]
        target.write_text(
            json.dumps({"resources": [{"type": "aws:s3/bucket:Bucket", "name": "logs"}]}),
            encoding="utf-8",
        )
        return subprocess.CompletedProcess(command, 0, stdout="", stderr="")

    monkeypatch.setattr(runner_module.subprocess, "run", fake_pulumi)

    candidates = PulumiPreviewRunner(Path("infra")).preview_import_stubs(
        "dev", Path("import-stubs-dev.json")
    )

    assert [candidate.name for candidate in candidates] == ["logs"]
    assert (tmp_path / "import-stubs-dev.json").exists()
    assert not (work_dir / "import-stubs-dev.json").exists()
