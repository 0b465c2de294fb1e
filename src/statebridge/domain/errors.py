"""Exception hierarchy shared by the domain and its adapters.

Structural and IO problems are exceptions and abort the enclosing command.
Integrity violations are not: they are collected as ``CheckError`` records
(see ``statebridge.domain.integrity``).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path


class StateBridgeError(RuntimeError):
    """Base class for all statebridge failures."""


class ParseError(StateBridgeError):
    """A document or snapshot is structurally malformed."""


class LedgerParseError(ParseError):
    """The ledger document cannot be decoded or validated."""


class InventoryParseError(ParseError):
    """A state snapshot does not have the expected structure."""


class UnsupportedStateFormatError(ParseError):
    """The state file extension is neither ``.json`` nor ``.tfstate``."""


class NotFoundError(StateBridgeError):
    """A referenced file, group or entry does not exist."""


class LedgerNotFoundError(NotFoundError):
    def __init__(self, path: Path) -> None:
        super().__init__(f"Ledger file not found: {path}")
        self.path = path


class LedgerExistsError(StateBridgeError):
    def __init__(self, path: Path) -> None:
        super().__init__(f"Ledger file already exists: {path}. Use --force to overwrite it")
        self.path = path


class StateNotFoundError(NotFoundError):
    def __init__(self, path: Path) -> None:
        super().__init__(f"State file not found: {path}")
        self.path = path


class GroupNotFoundError(NotFoundError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Group {name!r} not found in ledger")
        self.name = name


class EntryNotFoundError(NotFoundError):
    def __init__(self, address: str) -> None:
        super().__init__(f"No resources found with address {address!r}")
        self.address = address


class PersistError(StateBridgeError):
    """Writing the ledger failed; the previous file is left in place."""


class ValidationError(StateBridgeError):
    """Operator input (identifier, disposition) is malformed."""


class InventoryReadError(StateBridgeError):
    """The live inventory for a group could not be read during a check."""

    def __init__(self, group: str, message: str) -> None:
        super().__init__(f"Failed to load state for {group}: {message}")
        self.group = group


class CollaboratorFailure(StateBridgeError):
    """An external tool exited unsuccessfully.

    The captured output is kept verbatim so the CLI can surface it.
    """

    def __init__(
        self,
        message: str,
        *,
        command: Sequence[str] = (),
        returncode: int | None = None,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.command = tuple(command)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr

    @property
    def diagnostics(self) -> str:
        parts: list[str] = []
        if self.command:
            parts.append(f"Command: {' '.join(self.command)}")
        if self.returncode is not None:
            parts.append(f"Exit code: {self.returncode}")
        if self.stdout.strip():
            parts.append(f"Stdout:\n{self.stdout.rstrip()}")
        if self.stderr.strip():
            parts.append(f"Stderr:\n{self.stderr.rstrip()}")
        return "\n".join(parts)


class IntegrityRegressionError(StateBridgeError):
    """A ledger mutation was refused because it adds integrity errors."""

    def __init__(self, *, before: int, after: int) -> None:
        super().__init__(
            f"operation would introduce {after - before} new integrity error(s) "
            f"(had {before}, now would have {after}). Use --force to proceed anyway"
        )
        self.before = before
        self.after = after
