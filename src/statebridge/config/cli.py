"""Command-line configuration values."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import optional_env_var
from .errors import ConfigurationError

DEFAULT_LEDGER_FILENAME: Final[str] = "migration.json"
DEFAULT_TERRAFORM_BIN: Final[str] = "terraform"
DEFAULT_PULUMI_BIN: Final[str] = "pulumi"
DEFAULT_LOG_LEVEL: Final[str] = "INFO"
DEFAULT_TYPE_MAPPINGS_DIR: Final[str] = "type-mappings"


@dataclass(frozen=True, slots=True)
class CliConfig:
    ledger_path: Path
    terraform_bin: str = DEFAULT_TERRAFORM_BIN
    pulumi_bin: str = DEFAULT_PULUMI_BIN
    log_level: int = logging.INFO
    type_mappings_dir: Path = Path(DEFAULT_TYPE_MAPPINGS_DIR)


def parse_log_level(value: str) -> int:
    """Translate a level name such as ``debug`` into its ``logging`` constant."""

    level = logging.getLevelNamesMapping().get(value.strip().upper())
    if level is None:
        raise ConfigurationError(f"Invalid log level: {value}")
    return level


def get_cli_config() -> CliConfig:
    return CliConfig(
        ledger_path=Path(optional_env_var("STATEBRIDGE_LEDGER", DEFAULT_LEDGER_FILENAME)),
        terraform_bin=optional_env_var("STATEBRIDGE_TERRAFORM_BIN", DEFAULT_TERRAFORM_BIN),
        pulumi_bin=optional_env_var("STATEBRIDGE_PULUMI_BIN", DEFAULT_PULUMI_BIN),
        log_level=parse_log_level(optional_env_var("STATEBRIDGE_LOG_LEVEL", DEFAULT_LOG_LEVEL)),
        type_mappings_dir=Path(
            optional_env_var("STATEBRIDGE_TYPE_MAPPINGS_DIR", DEFAULT_TYPE_MAPPINGS_DIR)
        ),
    )
