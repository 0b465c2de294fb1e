"""Pydantic models describing ``terraform show -json`` state output."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

DATA_MODE = "data"


class TerraformBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)


class StateResource(TerraformBaseModel):
    address: str
    mode: str = "managed"
    type: str
    name: str
    provider_name: str = ""
    index: int | str | None = None
    values: dict[str, Any] | None = None

    @property
    def is_managed(self) -> bool:
        return self.mode != DATA_MODE


class StateModule(TerraformBaseModel):
    address: str | None = None
    resources: list[StateResource] = Field(default_factory=list)
    child_modules: list[StateModule] = Field(default_factory=list)


class StateValues(TerraformBaseModel):
    root_module: StateModule | None = None


class StateDocument(TerraformBaseModel):
    format_version: str | None = None
    terraform_version: str | None = None
    values: StateValues | None = None
