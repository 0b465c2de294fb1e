from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from collections.abc import Callable

_ENV_VARS = (
    "STATEBRIDGE_LEDGER",
    "STATEBRIDGE_TERRAFORM_BIN",
    "STATEBRIDGE_PULUMI_BIN",
    "STATEBRIDGE_LOG_LEVEL",
    "STATEBRIDGE_TYPE_MAPPINGS_DIR",
)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def all_paths_exist() -> Callable[[str], bool]:
    return lambda _path: True
