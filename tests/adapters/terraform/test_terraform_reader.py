from __future__ import annotations

import json
import subprocess
from typing import TYPE_CHECKING

import pytest

from statebridge.adapters.terraform import TerraformInventoryReader, load_terraform_state
from statebridge.adapters.terraform import reader as reader_module
from statebridge.domain.errors import (
    CollaboratorFailure,
    InventoryParseError,
    StateNotFoundError,
    UnsupportedStateFormatError,
)

if TYPE_CHECKING:
    from pathlib import Path

STATE = {
    "values": {
        "root_module": {
            "resources": [
                {
                    "address": "aws_s3_bucket.logs",
                    "mode": "managed",
                    "type": "aws_s3_bucket",
                    "name": "logs",
                    "provider_name": "registry.terraform.io/hashicorp/aws",
                }
            ]
        }
    }
}


def test_json_state_is_read_directly(tmp_path: Path) -> None:
    path = tmp_path / "dev.json"
    path.write_text(json.dumps(STATE), encoding="utf-8")

    document = load_terraform_state(path)

    assert document.values is not None


def test_tfstate_is_converted_with_terraform_show(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    path = tmp_path / "dev.tfstate"
    path.write_text("binary", encoding="utf-8")
    calls: list[tuple[list[str], object]] = []

    def fake_run(command: list[str], **kwargs: object) -> subprocess.CompletedProcess[str]:
        calls.append((command, kwargs["cwd"]))
        return subprocess.CompletedProcess(command, 0, stdout=json.dumps(STATE), stderr="")

    monkeypatch.setattr(reader_module.subprocess, "run", fake_run)

    resources = TerraformInventoryReader(terraform_bin="tofu")(str(path))

    assert [resource.address for resource in resources] == ["aws_s3_bucket.logs"]
    command, cwd = calls[0]
    assert command == ["tofu", "show", "-json", str(path.resolve())]
    assert cwd == tmp_path


def test_failed_conversion_keeps_diagnostics(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    path = tmp_path / "dev.tfstate"
    path.write_text("binary", encoding="utf-8")

    def fake_run(command: list[str], **_: object) -> subprocess.CompletedProcess[str]:
        return subprocess.CompletedProcess(command, 1, stdout="", stderr="state locked")

    monkeypatch.setattr(reader_module.subprocess, "run", fake_run)

    with pytest.raises(CollaboratorFailure) as excinfo:
        load_terraform_state(path)

    assert excinfo.value.returncode == 1
    assert "state locked" in excinfo.value.diagnostics


def test_unsupported_extension(tmp_path: Path) -> None:
    path = tmp_path / "dev.yaml"
    path.write_text("{}", encoding="utf-8")

    with pytest.raises(UnsupportedStateFormatError):
        load_terraform_state(path)


def test_missing_state_file(tmp_path: Path) -> None:
    with pytest.raises(StateNotFoundError):
        load_terraform_state(tmp_path / "absent.json")


def test_invalid_json(tmp_path: Path) -> None:
    path = tmp_path / "dev.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(InventoryParseError):
        load_terraform_state(path)


def test_non_utf8_state_is_a_parse_error(tmp_path: Path) -> None:
    path = tmp_path / "dev.json"
    path.write_bytes(b'{"values": "\xff"}')

    with pytest.raises(InventoryParseError, match="not valid UTF-8"):
        load_terraform_state(path)


def test_relative_locations_resolve_against_base_dir(tmp_path: Path) -> None:
    (tmp_path / "dev.json").write_text(json.dumps(STATE), encoding="utf-8")

    resources = TerraformInventoryReader(base_dir=tmp_path)("dev.json")

    assert len(resources) == 1
