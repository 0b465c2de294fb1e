"""Public interface for the Terraform state adapter."""

from __future__ import annotations

from .reader import TerraformInventoryReader, load_terraform_state
from .schema import StateDocument, StateModule, StateResource
from .translator import list_managed_resources, parse_state_document

__all__ = [
    "StateDocument",
    "StateModule",
    "StateResource",
    "TerraformInventoryReader",
    "list_managed_resources",
    "load_terraform_state",
    "parse_state_document",
]
